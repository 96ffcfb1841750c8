"""
Source scanner.

Plays the host side of a build round: discovers source files under the
source root, parses them, and hands back every declaration carrying the
marker in a stable order (sorted file paths, then source order).
"""

import fnmatch
import logging
from pathlib import Path

from registrygen.config.models import Declaration
from registrygen.languages.base.plugin import LanguagePlugin

logger = logging.getLogger(__name__)


class SourceScanner:
    """Finds marked declarations under a source root."""

    def __init__(
        self,
        plugin: LanguagePlugin,
        root: Path,
        marker: str,
        exclude_patterns: list[str] | None = None,
    ):
        self.plugin = plugin
        self.root = root
        self.marker = marker
        self.exclude_patterns = exclude_patterns or []

    def is_excluded(self, file_path: Path) -> bool:
        """Check path components below the root against the exclude patterns (fnmatch-style)."""
        parts = file_path.relative_to(self.root).parts
        return any(
            fnmatch.fnmatch(part, pattern) for part in parts for pattern in self.exclude_patterns
        )

    def discover_source_files(self) -> list[Path]:
        """
        Discover all source files in the source root.

        Returns:
            Sorted list of source file paths
        """
        if not self.root.is_dir():
            raise FileNotFoundError(f"Source root is not a directory: {self.root}")

        source_files = set()
        for ext in self.plugin.file_extensions:
            for file_path in self.root.rglob(f"*{ext}"):
                if self.is_excluded(file_path):
                    continue
                source_files.add(file_path)

        return sorted(source_files)

    def scan(self) -> list[Declaration]:
        """
        Parse every source file and collect the marked declarations.

        Raises:
            SourceParseError: If a source file cannot be parsed
        """
        source_files = self.discover_source_files()
        logger.info(
            f"Scanning {len(source_files)} {self.plugin.language_name} files "
            f"under {self.root} for '{self.marker}'"
        )

        declarations: list[Declaration] = []
        for file_path in source_files:
            tree = self.plugin.parse_file(file_path)
            declarations.extend(
                self.plugin.extract_declarations(file_path, tree, self.marker, self.root)
            )

        logger.info(f"Found {len(declarations)} marked declarations")
        return declarations
