"""
Configuration loader for registrygen.

Handles loading configuration from YAML files and CLI arguments.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import (
    DEFAULT_CLASS_DOC,
    CollectorConfig,
    DeclarationKind,
    LanguageType,
    ProjectConfig,
    RegistryGenConfig,
    SourceConfig,
    TargetConfig,
)


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""

    pass


def validate_package_name(package_name: str) -> str:
    """Validate a dotted package name ('' is the default package)."""
    if package_name == "":
        return package_name
    for part in package_name.split("."):
        if not part.isidentifier():
            raise ConfigurationError(
                f"Invalid package name '{package_name}': '{part}' is not an identifier"
            )
    return package_name


def parse_language(language: str) -> LanguageType:
    try:
        return LanguageType(language.lower())
    except ValueError:
        raise ConfigurationError(
            f"Unsupported language '{language}'. "
            f"Supported languages: {[lang.value for lang in LanguageType]}"
        )


def validate_config(config: RegistryGenConfig) -> RegistryGenConfig:
    """Checks pydantic cannot express: identifiers and a non-empty kind list."""
    validate_package_name(config.target.package_name)
    for label, value in (
        ("class_name", config.target.class_name),
        ("method_name", config.target.method_name),
    ):
        if not value.isidentifier():
            raise ConfigurationError(f"Invalid {label} '{value}': not an identifier")
    if not config.collector.accepted_kinds:
        raise ConfigurationError("collector.accepted_kinds must name at least one kind")
    return config


def load_config_from_yaml(config_path: Path) -> RegistryGenConfig:
    """Load configuration from a YAML file."""
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if raw_config is None:
        raise ConfigurationError("Configuration file is empty")

    try:
        config = RegistryGenConfig(**raw_config)
    except (ValidationError, TypeError) as e:
        raise ConfigurationError(f"Configuration validation failed:\n{e}")

    return validate_config(config)


def create_config_from_args(
    source_dir: Path,
    language: str = "python",
    output_dir: Path | None = None,
    marker: str | None = None,
    package_name: str | None = None,
    class_name: str | None = None,
    accepted_kinds: list[str] | None = None,
    project_name: str | None = None,
    **kwargs: Any,
) -> RegistryGenConfig:
    """Create configuration from CLI arguments."""
    src_language = parse_language(language)
    source_config = SourceConfig(language=src_language, root=source_dir, marker=marker)

    target_kwargs: dict[str, Any] = {}
    if output_dir is not None:
        target_kwargs["output_dir"] = output_dir
    if package_name is not None:
        target_kwargs["package_name"] = package_name
    if class_name is not None:
        target_kwargs["class_name"] = class_name
    if "method_name" in kwargs:
        target_kwargs["method_name"] = kwargs["method_name"]
    if "doc" in kwargs:
        target_kwargs["doc"] = kwargs["doc"]

    collector_config = CollectorConfig()
    if accepted_kinds:
        try:
            collector_config = CollectorConfig(
                accepted_kinds=[DeclarationKind(k.lower()) for k in accepted_kinds]
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid declaration kind: {e}")

    config = RegistryGenConfig(
        project=ProjectConfig(name=project_name or source_dir.name or "registrygen_project"),
        source=source_config,
        target=TargetConfig(**target_kwargs),
        collector=collector_config,
    )
    return validate_config(config)


def generate_default_config(output_path: Path, language: str = "python") -> None:
    """Generate a default configuration file."""
    default_config = {
        "project": {
            "name": "my_project",
        },
        "source": {
            "language": language,
            "root": "./src",
            "marker": "register" if language == "python" else "Registered",
            "exclude_patterns": ["__pycache__", ".git", "venv", ".venv", "build"],
        },
        "target": {
            "output_dir": "./generated-sources",
            "package_name": "generated.registry",
            "class_name": "OurClass",
            "method_name": "getAllClasses",
            "doc": DEFAULT_CLASS_DOC,
        },
        "collector": {
            "accepted_kinds": ["class"],
        },
    }

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        yaml.dump(default_config, f, default_flow_style=False, sort_keys=False)
