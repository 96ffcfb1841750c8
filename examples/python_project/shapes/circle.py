import math

from shapes.markers import register


@register
class Circle:
    def __init__(self, radius: float):
        self.radius = radius

    def area(self) -> float:
        return math.pi * self.radius ** 2


class Ellipse:
    """Not registered."""

    def __init__(self, a: float, b: float):
        self.a = a
        self.b = b
