"""
Round processor: discover -> collect -> synthesize -> emit.

Each call processes one independent build round. Errors propagate to the
caller unchanged; a failed round is simply re-run on the next trigger.
"""

import logging
from collections.abc import Sequence

from registrygen.config.models import Declaration, RegistryGenConfig, RoundResult
from registrygen.discovery.collector import EntityCollector
from registrygen.discovery.scanner import SourceScanner
from registrygen.emit.sink import FileSink, FilesystemSink
from registrygen.languages.base.plugin import LanguagePlugin
from registrygen.languages.registry import LanguagePluginRegistry
from registrygen.synthesis.synthesizer import SourceSynthesizer

logger = logging.getLogger(__name__)


class RegistryProcessor:
    """Processes build rounds for one configuration and sink."""

    def __init__(
        self,
        config: RegistryGenConfig,
        sink: FileSink,
        plugin: LanguagePlugin | None = None,
    ):
        self.config = config
        self.plugin = plugin or LanguagePluginRegistry.get_plugin(config.source.language)
        self.collector = EntityCollector(config.collector.accepted_kinds)
        self.synthesizer = SourceSynthesizer(self.plugin, sink, config.target)

    def scanner(self) -> SourceScanner:
        source = self.config.source
        return SourceScanner(
            plugin=self.plugin,
            root=source.root,
            marker=source.effective_marker(),
            exclude_patterns=source.exclude_patterns,
        )

    def process(self, declarations: Sequence[Declaration]) -> RoundResult:
        """
        Run one round over the marked declarations supplied by the host.

        Raises:
            KindMismatchError: A declaration is not class-like; nothing is emitted
            RenderError: The renderer violated its invariants
            EmitError: The sink failed; the cause is attached
        """
        entities = self.collector.collect(declarations)
        logger.info(f"Collected {len(entities)} marked classes")

        source_file = self.synthesizer.synthesize(entities)
        location = self.synthesizer.emit(source_file)
        logger.info(f"Emitted {source_file.class_name} to {location}")

        return RoundResult(entities=entities, source_file=source_file, location=location)

    def run(self) -> RoundResult:
        """Scan the configured source root and process the resulting round."""
        return self.process(self.scanner().scan())


def run_round(config: RegistryGenConfig, sink: FileSink | None = None) -> RoundResult:
    """
    Convenience function to scan and generate in one call.

    Args:
        config: registrygen configuration
        sink: Destination for the generated file (defaults to the configured output dir)

    Returns:
        RoundResult describing the emitted registry
    """
    sink = sink or FilesystemSink(config.target.output_dir)
    return RegistryProcessor(config, sink).run()
