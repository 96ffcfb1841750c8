"""
registrygen - marker-driven class registry generator.

Scans a source tree for classes carrying a marker (a Python decorator or a
Java annotation) and generates a single class whose static method returns
the set of every marked class.
"""

__version__ = "0.1.0"
