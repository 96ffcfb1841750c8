"""Marker decorator for classes that belong in the registry."""


def register(cls):
    """Mark a class for the generated registry. Returns the class unchanged."""
    return cls
