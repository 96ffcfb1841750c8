"""
Base language plugin interface.

All language plugins (Python, Java) must implement this interface.
A plugin owns everything that depends on concrete syntax: parsing source
files, finding marked declarations, and rendering the generated registry.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from registrygen.config.models import Declaration, GeneratedClass, TypeIdentity


def marker_matches(written_name: str, marker: str) -> bool:
    """
    Check whether a decorator/annotation name as written matches the marker.

    Imports are not resolved, so ``@register`` matches the marker
    ``app.registry.register`` and ``@registry.register`` matches ``register``.

    Args:
        written_name: Dotted name as it appears in the source
        marker: Configured marker name (simple or dotted)

    Returns:
        True if the names refer to the same marker
    """
    if written_name == marker:
        return True
    return written_name.rsplit(".", 1)[-1] == marker.rsplit(".", 1)[-1]


def local_name(preferred: str, identities: list[TypeIdentity]) -> str:
    """
    Pick a local variable name that does not obscure any referenced package.

    A local ``set`` would hide a top-level package also named ``set`` when the
    generated body refers to ``set.Foo``; underscores are appended until the
    name is free.
    """
    taken = {identity.fqn.split(".", 1)[0] for identity in identities}
    name = preferred
    while name in taken:
        name += "_"
    return name


class LanguagePlugin(ABC):
    """
    Abstract base class for language plugins.

    Each language plugin provides:
    - AST parsing capabilities
    - Marked declaration extraction
    - Registry rendering in the language's concrete syntax
    """

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the language name (e.g., 'python', 'java')."""
        pass

    @property
    @abstractmethod
    def file_extensions(self) -> list[str]:
        """Return file extensions for this language (e.g., ['.py'], ['.java'])."""
        pass

    # =========================================================================
    # AST Parsing
    # =========================================================================

    @abstractmethod
    def parse_file(self, file_path: Path) -> Any:
        """
        Parse a source file into an AST.

        Raises:
            SourceParseError: If the file is not valid source
        """
        pass

    @abstractmethod
    def parse_source(self, source_code: str) -> Any:
        """Parse source code string into an AST."""
        pass

    # =========================================================================
    # Declaration Extraction
    # =========================================================================

    @abstractmethod
    def extract_declarations(
        self, file_path: Path, tree: Any, marker: str, root: Path
    ) -> list[Declaration]:
        """
        Extract every declaration carrying the marker, in source order.

        Args:
            file_path: Path to the source file
            tree: Parsed AST of the file
            marker: Marker name to look for
            root: Source root, used to derive module names

        Returns:
            List of marked declarations of any kind
        """
        pass

    # =========================================================================
    # Rendering
    # =========================================================================

    @abstractmethod
    def render_class(self, generated: GeneratedClass) -> str:
        """
        Render a generated class into a complete compilation unit.

        Must be deterministic: the same input renders byte-identical text.
        """
        pass

    @abstractmethod
    def file_name(self, class_name: str) -> str:
        """Return the file name holding a generated class (e.g., 'OurClass.java')."""
        pass

    def relative_path(self, package: str, class_name: str) -> str:
        """Map a package and class name to a POSIX path under the generated sources root."""
        parts = [p for p in package.split(".") if p]
        parts.append(self.file_name(class_name))
        return "/".join(parts)
