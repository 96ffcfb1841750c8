"""
Core configuration and data models for registrygen.

Defines the configuration structures and the round-local pipeline values
(declarations, collected entities, generated method/class descriptions)
using Pydantic for validation.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class LanguageType(str, Enum):
    """Supported source languages. The registry is generated in the same language."""

    PYTHON = "python"
    JAVA = "java"


class DeclarationKind(str, Enum):
    """Kinds of declarations a marker can be attached to."""

    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    RECORD = "record"
    ANNOTATION = "annotation"
    METHOD = "method"
    FIELD = "field"
    FUNCTION = "function"


class StatementKind(str, Enum):
    """Statements that make up the generated method body."""

    DECLARE_SET = "declare_set"  # Create the empty set
    ADD = "add"  # Insert one type identity
    RETURN = "return"  # Return the set


DEFAULT_MARKERS: dict[LanguageType, str] = {
    LanguageType.PYTHON: "register",
    LanguageType.JAVA: "Registered",
}

DEFAULT_CLASS_DOC = (
    "Registry of every class carrying the marker.\n"
    "\n"
    "Generated automatically by registrygen, do not edit.\n"
)


# ============================================================================
# Configuration
# ============================================================================


class SourceConfig(BaseModel):
    """Source tree configuration."""

    language: LanguageType = Field(default=LanguageType.PYTHON, description="Source language")
    root: Path = Field(default=Path("."), description="Source code root directory")
    marker: str | None = Field(
        default=None,
        description="Marker decorator/annotation name (defaults per language)",
    )
    exclude_patterns: list[str] = Field(
        default_factory=lambda: ["__pycache__", ".git", "node_modules", "venv", ".venv", "build"],
        description="Patterns to exclude from scanning",
    )

    def effective_marker(self) -> str:
        """Return the configured marker, or the language default."""
        return self.marker or DEFAULT_MARKERS[self.language]


class TargetConfig(BaseModel):
    """Generated registry configuration."""

    output_dir: Path = Field(
        default=Path("./generated-sources"), description="Generated sources root"
    )
    package_name: str = Field(
        default="generated.registry", description="Package (or module path) of the registry"
    )
    class_name: str = Field(default="OurClass", description="Name of the generated class")
    method_name: str = Field(
        default="getAllClasses", description="Name of the generated static method"
    )
    doc: str = Field(default=DEFAULT_CLASS_DOC, description="Documentation of the generated class")


class CollectorConfig(BaseModel):
    """Entity collector configuration."""

    accepted_kinds: list[DeclarationKind] = Field(
        default_factory=lambda: [DeclarationKind.CLASS],
        description="Declaration kinds allowed to carry the marker",
    )


class ProjectConfig(BaseModel):
    """Project metadata."""

    name: str = Field(default="registrygen_project", description="Project name")


class RegistryGenConfig(BaseModel):
    """Root configuration model for registrygen."""

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)
    target: TargetConfig = Field(default_factory=TargetConfig)
    collector: CollectorConfig = Field(default_factory=CollectorConfig)


# ============================================================================
# Declaration and Entity Models (one build round)
# ============================================================================


class TypeIdentity(BaseModel):
    """Fully-qualified identity of a declared type."""

    model_config = ConfigDict(frozen=True)

    package: str = Field(description="Java package or Python module ('' for the default package)")
    qualname: str = Field(description="Simple or nested name, e.g. 'Outer.Inner'")

    @property
    def fqn(self) -> str:
        if not self.package:
            return self.qualname
        return f"{self.package}.{self.qualname}"

    @property
    def simple_name(self) -> str:
        return self.qualname.rsplit(".", 1)[-1]

    def __str__(self) -> str:
        return self.fqn


class Declaration(BaseModel):
    """A declaration carrying the marker, as found in the current round."""

    name: str
    kind: DeclarationKind
    identity: TypeIdentity
    source_file: Path
    line: int
    markers: list[str] = Field(default_factory=list, description="Marker names as written")


class MarkedEntity(BaseModel):
    """A validated, class-like marked declaration reduced to its identity."""

    identity: TypeIdentity
    source_file: Path
    line: int


# ============================================================================
# Generated Code Models
# ============================================================================


class Statement(BaseModel):
    """One statement of the generated method body."""

    kind: StatementKind
    target: TypeIdentity | None = None  # Only set for ADD


class GeneratedMethod(BaseModel):
    """Language-independent description of the generated registry method."""

    name: str = "getAllClasses"
    is_public: bool = True
    is_static: bool = True
    body: list[Statement] = Field(default_factory=list)

    @property
    def additions(self) -> list[TypeIdentity]:
        """Type identities inserted by the body, in statement order."""
        return [s.target for s in self.body if s.kind == StatementKind.ADD and s.target]


class GeneratedClass(BaseModel):
    """Language-independent description of the class hosting the method."""

    name: str = "OurClass"
    package: str = "generated.registry"
    is_public: bool = True
    doc: str = DEFAULT_CLASS_DOC
    method: GeneratedMethod


class SourceFile(BaseModel):
    """A rendered compilation unit ready to be handed to a sink."""

    language: LanguageType
    package: str
    class_name: str
    relative_path: str = Field(description="POSIX path relative to the generated sources root")
    content: str


class RoundResult(BaseModel):
    """Outcome of one successful build round."""

    entities: list[MarkedEntity] = Field(default_factory=list)
    source_file: SourceFile
    location: str = Field(description="Where the sink stored the file")
