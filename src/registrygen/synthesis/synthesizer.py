"""
Source synthesizer.

Builds the registry method and its hosting class from the collected
entities, renders them through the language plugin, and emits the result
to the injected sink.
"""

import logging
from collections.abc import Sequence

from registrygen.config.models import (
    GeneratedClass,
    GeneratedMethod,
    MarkedEntity,
    SourceFile,
    Statement,
    StatementKind,
    TargetConfig,
)
from registrygen.emit.sink import FileSink
from registrygen.errors import EmitError, RenderError
from registrygen.languages.base.plugin import LanguagePlugin

logger = logging.getLogger(__name__)


class SourceSynthesizer:
    """Turns one round's marked entities into a generated source file."""

    def __init__(self, plugin: LanguagePlugin, sink: FileSink, target: TargetConfig | None = None):
        self.plugin = plugin
        self.sink = sink
        self.target = target or TargetConfig()

    # =========================================================================
    # Model Construction
    # =========================================================================

    def build_method(self, entities: Sequence[MarkedEntity]) -> GeneratedMethod:
        """
        Build the registry method: declare the set, add each entity in order,
        return the set.
        """
        body = [Statement(kind=StatementKind.DECLARE_SET)]
        body.extend(Statement(kind=StatementKind.ADD, target=e.identity) for e in entities)
        body.append(Statement(kind=StatementKind.RETURN))

        return GeneratedMethod(
            name=self.target.method_name,
            is_public=True,
            is_static=True,
            body=body,
        )

    def build_class(self, method: GeneratedMethod) -> GeneratedClass:
        """Wrap the method in the public registry class."""
        return GeneratedClass(
            name=self.target.class_name,
            package=self.target.package_name,
            is_public=True,
            doc=self.target.doc,
            method=method,
        )

    # =========================================================================
    # Rendering & Emission
    # =========================================================================

    def synthesize(self, entities: Sequence[MarkedEntity]) -> SourceFile:
        """
        Render the registry for the given entities.

        Raises:
            RenderError: If the renderer fails (internal invariant violation)
        """
        generated = self.build_class(self.build_method(entities))

        try:
            content = self.plugin.render_class(generated)
        except Exception as e:
            raise RenderError(
                f"{self.plugin.language_name} renderer failed on {generated.name}: {e}"
            ) from e

        relative_path = self.plugin.relative_path(generated.package, generated.name)
        logger.debug(f"Rendered {relative_path} with {len(entities)} entries")

        return SourceFile(
            language=self.plugin.language_name,
            package=generated.package,
            class_name=generated.name,
            relative_path=relative_path,
            content=content,
        )

    def emit(self, source_file: SourceFile) -> str:
        """
        Hand a rendered file to the sink.

        Returns:
            Location reported by the sink

        Raises:
            EmitError: If the sink cannot persist the file; the cause is attached
        """
        try:
            return self.sink.write(source_file.relative_path, source_file.content)
        except (OSError, ValueError) as e:
            location = self.sink.describe(source_file.relative_path)
            logger.error(f"Failed to emit {location}: {e}")
            raise EmitError(location, e) from e
