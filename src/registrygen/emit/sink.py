"""
Sinks that persist generated source text.

The synthesizer receives a sink as a constructor argument; the filesystem
sink is used for real builds and the in-memory sink for tests and dry runs.
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class FileSink(ABC):
    """Abstract base class for generated-source sinks."""

    @abstractmethod
    def write(self, relative_path: str, content: str) -> str:
        """
        Persist content, replacing any previous file at the same path.

        Args:
            relative_path: POSIX path relative to the sink root
            content: Source text

        Returns:
            Location the content was written to

        Raises:
            OSError: If the content cannot be persisted
        """
        ...

    def describe(self, relative_path: str) -> str:
        """Return the location a relative path maps to, without writing."""
        return relative_path


class FilesystemSink(FileSink):
    """
    Writes generated sources below a root directory.

    Writes are atomic: content goes to a temporary file in the destination
    directory which then replaces the target, so readers see either the old
    file or the new one, never a partial write.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    def _resolve_path(self, relative_path: str) -> Path:
        """Resolve a sink path to an absolute filesystem path."""
        clean_path = Path(relative_path).as_posix().lstrip("/")
        full_path = self.root / clean_path

        try:
            full_path.resolve().relative_to(self.root)
        except ValueError:
            raise ValueError(f"Invalid path: {relative_path} (outside {self.root})")

        return full_path

    def describe(self, relative_path: str) -> str:
        return str(self.root / Path(relative_path).as_posix().lstrip("/"))

    def write(self, relative_path: str, content: str) -> str:
        full_path = self._resolve_path(relative_path)
        full_path.parent.mkdir(parents=True, exist_ok=True)

        data = content.encode("utf-8")
        tmp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="wb",
                dir=full_path.parent,
                prefix=f".{full_path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, full_path)
        except BaseException:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise

        logger.info(f"Wrote {full_path} ({len(data)} bytes)")
        return str(full_path)


class InMemorySink(FileSink):
    """Keeps generated sources in a dict keyed by relative path."""

    def __init__(self):
        self.files: dict[str, str] = {}

    def describe(self, relative_path: str) -> str:
        return f"memory://{relative_path}"

    def write(self, relative_path: str, content: str) -> str:
        self.files[relative_path] = content
        return self.describe(relative_path)
