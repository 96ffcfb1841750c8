from shapes import markers


@markers.register
class Square:
    def __init__(self, side: float):
        self.side = side

    def area(self) -> float:
        return self.side ** 2


class Polygon:
    @markers.register
    class Triangle:
        def __init__(self, base: float, height: float):
            self.base = base
            self.height = height

        def area(self) -> float:
            return self.base * self.height / 2
