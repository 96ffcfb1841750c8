"""
Error types raised by the registry pipeline.

Every error is recoverable at the round level: the caller decides whether a
failed round aborts the build or is simply re-run on the next trigger.
"""

from pathlib import Path
from typing import Any


class RegistryGenError(Exception):
    """Base class for all registrygen errors."""

    pass


class KindMismatchError(RegistryGenError):
    """A marked declaration is not one of the accepted class-like kinds."""

    def __init__(self, declaration: Any, accepted: list[str]):
        self.declaration = declaration
        self.accepted = accepted
        super().__init__(
            f"{declaration.identity.fqn} is marked but is a {declaration.kind.value}, "
            f"not one of: {', '.join(accepted)} "
            f"({declaration.source_file}:{declaration.line})"
        )


class RenderError(RegistryGenError):
    """A renderer failed on well-formed input (internal invariant violation)."""

    pass


class EmitError(RegistryGenError):
    """The sink could not persist the generated source."""

    def __init__(self, location: str, cause: BaseException):
        self.location = location
        self.cause = cause
        super().__init__(f"Failed to write generated source to {location}: {cause}")


class SourceParseError(RegistryGenError):
    """A source file could not be parsed while scanning for marked declarations."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not parse {path}: {reason}")
