"""
registrygen CLI - Main entry point.

Provides commands for scanning a source tree for marked classes and
generating the class registry.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from registrygen import __version__
from registrygen.config.loader import (
    ConfigurationError,
    create_config_from_args,
    generate_default_config,
    load_config_from_yaml,
    parse_language,
    validate_config,
)
from registrygen.config.models import RegistryGenConfig
from registrygen.emit.sink import FilesystemSink, InMemorySink
from registrygen.errors import EmitError, KindMismatchError, RenderError, SourceParseError
from registrygen.processor import RegistryProcessor

app = typer.Typer(
    name="registrygen",
    help="Generate a registry class listing every class carrying a marker",
    no_args_is_help=True,
)

console = Console()

EXIT_KIND_MISMATCH = 1
EXIT_EMIT_FAILED = 2
EXIT_BAD_INPUT = 3


# =============================================================================
# Helper Functions
# =============================================================================


def configure_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(name)s: %(message)s")


def validate_path(path: str, must_exist: bool = True) -> Path:
    """Validate and return a Path object."""
    p = Path(path)
    if must_exist and not p.exists():
        raise typer.BadParameter(f"Path does not exist: {path}")
    return p


def build_config(
    source: str,
    language: Optional[str],
    marker: Optional[str],
    output: Optional[str],
    package_name: Optional[str],
    class_name: Optional[str],
    config: Optional[str],
) -> RegistryGenConfig:
    """Load the YAML config if given, otherwise build one from arguments."""
    try:
        if config:
            console.print(f"[cyan]Loading configuration from {config}...[/cyan]")
            cfg = load_config_from_yaml(Path(config))
            # Explicit arguments win over the file
            cfg.source.root = validate_path(source)
            if language:
                cfg.source.language = parse_language(language)
            if marker:
                cfg.source.marker = marker
            if output:
                cfg.target.output_dir = Path(output)
            if package_name:
                cfg.target.package_name = package_name
            if class_name:
                cfg.target.class_name = class_name
            return validate_config(cfg)

        return create_config_from_args(
            source_dir=validate_path(source),
            language=language or "python",
            output_dir=Path(output) if output else None,
            marker=marker,
            package_name=package_name,
            class_name=class_name,
        )
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e}")
        raise typer.Exit(EXIT_BAD_INPUT)


def display_config(cfg: RegistryGenConfig) -> None:
    """Display the effective configuration."""
    table = Table(title="Configuration", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Language", cfg.source.language.value)
    table.add_row("Source root", str(cfg.source.root))
    table.add_row("Marker", cfg.source.effective_marker())
    table.add_row("Accepted kinds", ", ".join(k.value for k in cfg.collector.accepted_kinds))
    table.add_row("Registry", f"{cfg.target.package_name}.{cfg.target.class_name}")
    table.add_row("Output", str(cfg.target.output_dir))

    console.print(table)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def generate(
    source: str = typer.Argument(..., help="Source directory to scan"),
    language: Optional[str] = typer.Option(None, "--lang", "-l", help="Source language (python/java, default python)"),
    marker: Optional[str] = typer.Option(None, "--marker", "-m", help="Marker decorator/annotation name"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Generated sources root"),
    package_name: Optional[str] = typer.Option(None, "--package", "-p", help="Package of the generated registry"),
    class_name: Optional[str] = typer.Option(None, "--class-name", help="Name of the generated class"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to configuration YAML file"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the generated source instead of writing it"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Scan a source tree and generate the class registry.

    Examples:
        registrygen generate ./src
        registrygen generate ./src/main/java -l java -o build/generated/sources
    """
    configure_logging(verbose)

    cfg = build_config(source, language, marker, output, package_name, class_name, config)
    if verbose:
        display_config(cfg)

    sink = InMemorySink() if dry_run else FilesystemSink(cfg.target.output_dir)
    processor = RegistryProcessor(cfg, sink)

    try:
        result = processor.run()
    except KindMismatchError as e:
        console.print(f"[bold red]Invalid marker use:[/bold red] {e}")
        raise typer.Exit(EXIT_KIND_MISMATCH)
    except (SourceParseError, FileNotFoundError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(EXIT_BAD_INPUT)
    except EmitError as e:
        console.print(f"[bold red]Write failed:[/bold red] {e}")
        raise typer.Exit(EXIT_EMIT_FAILED)
    except RenderError as e:
        console.print(f"[bold red]Internal error:[/bold red] {e}")
        raise

    if dry_run:
        lexer = "java" if cfg.source.language.value == "java" else "python"
        console.print(
            Panel(
                Syntax(result.source_file.content, lexer, line_numbers=True),
                title=result.source_file.relative_path,
            )
        )
        return

    console.print(
        f"[green]✓[/green] Registered {len(result.entities)} classes in "
        f"{result.source_file.package}.{result.source_file.class_name}"
    )
    console.print(f"  [dim]{result.location}[/dim]")


@app.command()
def scan(
    source: str = typer.Argument(..., help="Source directory to scan"),
    language: Optional[str] = typer.Option(None, "--lang", "-l", help="Source language (python/java, default python)"),
    marker: Optional[str] = typer.Option(None, "--marker", "-m", help="Marker decorator/annotation name"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to configuration YAML file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """List the declarations carrying the marker without generating anything."""
    configure_logging(verbose)

    cfg = build_config(source, language, marker, None, None, None, config)
    processor = RegistryProcessor(cfg, InMemorySink())

    try:
        declarations = processor.scanner().scan()
    except (SourceParseError, FileNotFoundError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(EXIT_BAD_INPUT)

    accepted = set(cfg.collector.accepted_kinds)

    table = Table(title=f"Declarations marked with '{cfg.source.effective_marker()}'")
    table.add_column("Identity", style="cyan", no_wrap=True)
    table.add_column("Kind", no_wrap=True)
    table.add_column("Location", style="dim")

    for declaration in declarations:
        kind = declaration.kind.value
        if declaration.kind not in accepted:
            kind = f"[red]{kind}[/red]"
        table.add_row(
            declaration.identity.fqn,
            kind,
            f"{declaration.source_file}:{declaration.line}",
        )

    console.print(table)
    console.print(f"\n[bold]{len(declarations)}[/bold] marked declarations")


@app.command()
def init(
    path: str = typer.Argument("registrygen.yaml", help="Where to write the configuration"),
    language: str = typer.Option("python", "--lang", "-l", help="Source language (python/java)"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
):
    """Write a default configuration file."""
    output_path = Path(path)
    if output_path.exists() and not force:
        console.print(f"[yellow]{output_path} already exists (use --force to overwrite)[/yellow]")
        raise typer.Exit(1)

    generate_default_config(output_path, language=language)
    console.print(f"[green]✓[/green] Wrote default configuration to {output_path}")


@app.command()
def version():
    """Show the registrygen version."""
    console.print(f"registrygen {__version__}")


def main():
    app()


if __name__ == "__main__":
    main()
