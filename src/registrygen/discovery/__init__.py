"""
Discovery: find marked declarations and reduce them to entities.
"""

from registrygen.discovery.collector import EntityCollector, collect
from registrygen.discovery.scanner import SourceScanner

__all__ = [
    "EntityCollector",
    "SourceScanner",
    "collect",
]
