"""
Unit tests for the source synthesizer.

Covers method/class construction, deterministic rendering for both
languages, and error surfacing on the emit path.
"""

import random
import sys
import types
from pathlib import Path

import pytest

from registrygen.config.models import (
    GeneratedClass,
    MarkedEntity,
    StatementKind,
    TargetConfig,
    TypeIdentity,
)
from registrygen.emit.sink import FileSink, InMemorySink
from registrygen.errors import EmitError, RenderError
from registrygen.languages.java.plugin import JavaPlugin
from registrygen.languages.python.plugin import PythonPlugin
from registrygen.synthesis.synthesizer import SourceSynthesizer


def make_entity(package: str, qualname: str) -> MarkedEntity:
    return MarkedEntity(
        identity=TypeIdentity(package=package, qualname=qualname),
        source_file=Path("x"),
        line=1,
    )


@pytest.fixture
def entities():
    """Two entities from the same package."""
    return [make_entity("pkg", "A"), make_entity("pkg", "B")]


@pytest.fixture
def python_synthesizer():
    return SourceSynthesizer(PythonPlugin(), InMemorySink())


@pytest.fixture
def java_synthesizer():
    return SourceSynthesizer(JavaPlugin(), InMemorySink())


class BrokenSink(FileSink):
    """Sink whose destination is read-only."""

    def write(self, relative_path: str, content: str) -> str:
        raise PermissionError(13, "Read-only file system", relative_path)


class BrokenRenderer(PythonPlugin):
    def render_class(self, generated: GeneratedClass) -> str:
        raise KeyError("template slot")


# =============================================================================
# Model construction
# =============================================================================


def test_build_method_one_add_per_entity(python_synthesizer):
    """N entities give declare + N adds + return, in entity order."""
    entities = [make_entity("pkg", name) for name in ("C", "A", "B", "A")]

    method = python_synthesizer.build_method(entities)

    kinds = [s.kind for s in method.body]
    assert kinds[0] == StatementKind.DECLARE_SET
    assert kinds[-1] == StatementKind.RETURN
    assert kinds.count(StatementKind.ADD) == 4
    assert [t.fqn for t in method.additions] == ["pkg.C", "pkg.A", "pkg.B", "pkg.A"]


def test_build_method_empty(python_synthesizer):
    method = python_synthesizer.build_method([])

    assert [s.kind for s in method.body] == [StatementKind.DECLARE_SET, StatementKind.RETURN]
    assert method.additions == []


def test_build_method_defaults(python_synthesizer, entities):
    method = python_synthesizer.build_method(entities)

    assert method.name == "getAllClasses"
    assert method.is_public
    assert method.is_static


def test_build_class_uses_target_config(entities):
    target = TargetConfig(package_name="com.acme.gen", class_name="Registry", method_name="all")
    synthesizer = SourceSynthesizer(PythonPlugin(), InMemorySink(), target)

    generated = synthesizer.build_class(synthesizer.build_method(entities))

    assert generated.name == "Registry"
    assert generated.package == "com.acme.gen"
    assert generated.method.name == "all"
    assert generated.is_public


# =============================================================================
# Rendering
# =============================================================================


def test_python_render_two_classes(python_synthesizer, entities):
    """The Python registry imports the module and adds each class."""
    source_file = python_synthesizer.synthesize(entities)

    assert source_file.relative_path == "generated/registry/our_class.py"
    assert source_file.content == (
        "# Generated by registrygen. Do not edit.\n"
        "\n"
        "import pkg\n"
        "\n"
        "\n"
        "class OurClass:\n"
        '    """Registry of every class carrying the marker.\n'
        "\n"
        "    Generated automatically by registrygen, do not edit.\n"
        '    """\n'
        "\n"
        "    @staticmethod\n"
        "    def getAllClasses() -> set[type]:\n"
        "        classes: set[type] = set()\n"
        "        classes.add(pkg.A)\n"
        "        classes.add(pkg.B)\n"
        "        return classes\n"
    )


def test_java_render_two_classes(java_synthesizer, entities):
    """The Java registry adds each class literal by its qualified name."""
    source_file = java_synthesizer.synthesize(entities)

    assert source_file.relative_path == "generated/registry/OurClass.java"
    assert source_file.content == (
        "// Generated by registrygen. Do not edit.\n"
        "package generated.registry;\n"
        "\n"
        "import java.util.HashSet;\n"
        "import java.util.Set;\n"
        "\n"
        "/**\n"
        " * Registry of every class carrying the marker.\n"
        " *\n"
        " * Generated automatically by registrygen, do not edit.\n"
        " */\n"
        "public class OurClass {\n"
        "  public static Set<Class<?>> getAllClasses() {\n"
        "    Set<Class<?>> set = new HashSet<>();\n"
        "    set.add(pkg.A.class);\n"
        "    set.add(pkg.B.class);\n"
        "    return set;\n"
        "  }\n"
        "}\n"
    )


def test_python_render_empty_is_valid(python_synthesizer):
    """With no entities the module still compiles and returns an empty set."""
    content = python_synthesizer.synthesize([]).content

    namespace: dict = {}
    exec(compile(content, "our_class.py", "exec"), namespace)

    assert namespace["OurClass"].getAllClasses() == set()
    assert "import " not in content


def test_java_render_empty(java_synthesizer):
    content = java_synthesizer.synthesize([]).content

    assert "Set<Class<?>> set = new HashSet<>();\n    return set;\n" in content
    assert ".add(" not in content


def test_render_is_idempotent(python_synthesizer, java_synthesizer, entities):
    """Same ordered input, byte-identical output."""
    for synthesizer in (python_synthesizer, java_synthesizer):
        first = synthesizer.synthesize(entities).content
        second = synthesizer.synthesize(list(entities)).content
        assert first == second


def test_permutation_only_reorders_adds(java_synthesizer):
    """A permuted input differs only in the order of the add statements."""
    entities = [make_entity("pkg", f"C{i}") for i in range(8)]
    shuffled = list(entities)
    random.Random(7).shuffle(shuffled)

    original = java_synthesizer.synthesize(entities).content.splitlines()
    permuted = java_synthesizer.synthesize(shuffled).content.splitlines()

    def split(lines):
        adds = [line for line in lines if ".add(" in line]
        rest = [line for line in lines if ".add(" not in line]
        return adds, rest

    original_adds, original_rest = split(original)
    permuted_adds, permuted_rest = split(permuted)
    assert original_rest == permuted_rest
    assert sorted(original_adds) == sorted(permuted_adds)
    assert permuted_adds == [f"    set.add(pkg.{e.identity.qualname}.class);" for e in shuffled]


def test_python_render_imports_sorted_and_deduplicated(python_synthesizer):
    entities = [
        make_entity("zoo.animals", "Cat"),
        make_entity("app.models", "User"),
        make_entity("zoo.animals", "Dog"),
        make_entity("app.models", "Outer.Inner"),
    ]

    content = python_synthesizer.synthesize(entities).content

    assert "import app.models\nimport zoo.animals\n" in content
    assert content.count("import zoo.animals") == 1
    assert "classes.add(app.models.Outer.Inner)" in content


def test_local_name_avoids_package_collision(python_synthesizer, java_synthesizer):
    """A top-level package named like the local variable gets a renamed local."""
    py = python_synthesizer.synthesize([make_entity("classes.core", "A")]).content
    java = java_synthesizer.synthesize([make_entity("set.core", "A")]).content

    assert "classes_.add(classes.core.A)" in py
    assert "return classes_" in py
    assert "set_.add(set.core.A.class);" in java


def test_python_render_survives_package_named_like_builtin(python_synthesizer, monkeypatch):
    """`import set.shapes` rebinds the global `set`; the registry must still run."""
    package = types.ModuleType("set")
    shapes = types.ModuleType("set.shapes")
    shape_class = type("A", (), {})
    shapes.A = shape_class
    package.shapes = shapes
    monkeypatch.setitem(sys.modules, "set", package)
    monkeypatch.setitem(sys.modules, "set.shapes", shapes)

    content = python_synthesizer.synthesize([make_entity("set.shapes", "A")]).content

    assert "import builtins\nimport set.shapes\n" in content
    assert "def getAllClasses() -> builtins.set[type]:" in content
    namespace: dict = {}
    exec(compile(content, "our_class.py", "exec"), namespace)
    assert namespace["OurClass"].getAllClasses() == {shape_class}


def test_java_render_default_package():
    target = TargetConfig(package_name="")
    synthesizer = SourceSynthesizer(JavaPlugin(), InMemorySink(), target)

    source_file = synthesizer.synthesize([make_entity("", "Top")])

    assert source_file.relative_path == "OurClass.java"
    assert "package" not in source_file.content
    assert "set.add(Top.class);" in source_file.content


def test_python_docstring_escaping():
    target = TargetConfig(doc='Uses """quotes""" and a \\ backslash "here"')
    synthesizer = SourceSynthesizer(PythonPlugin(), InMemorySink(), target)

    content = synthesizer.synthesize([]).content

    namespace: dict = {}
    exec(compile(content, "our_class.py", "exec"), namespace)
    assert namespace["OurClass"].__doc__ == 'Uses """quotes""" and a \\ backslash "here"'


def test_java_javadoc_cannot_close_early():
    target = TargetConfig(doc="ends */ here")
    synthesizer = SourceSynthesizer(JavaPlugin(), InMemorySink(), target)

    content = synthesizer.synthesize([]).content

    assert content.count("*/") == 1


def test_render_error_wraps_renderer_failure(entities):
    synthesizer = SourceSynthesizer(BrokenRenderer(), InMemorySink())

    with pytest.raises(RenderError) as exc_info:
        synthesizer.synthesize(entities)

    assert isinstance(exc_info.value.__cause__, KeyError)


# =============================================================================
# Emission
# =============================================================================


def test_emit_writes_to_sink(entities):
    sink = InMemorySink()
    synthesizer = SourceSynthesizer(PythonPlugin(), sink)

    source_file = synthesizer.synthesize(entities)
    location = synthesizer.emit(source_file)

    assert location == "memory://generated/registry/our_class.py"
    assert sink.files["generated/registry/our_class.py"] == source_file.content


def test_emit_error_carries_cause(entities):
    """A failing sink surfaces as EmitError with the root cause attached."""
    synthesizer = SourceSynthesizer(PythonPlugin(), BrokenSink())
    source_file = synthesizer.synthesize(entities)

    with pytest.raises(EmitError) as exc_info:
        synthesizer.emit(source_file)

    error = exc_info.value
    assert isinstance(error.cause, PermissionError)
    assert error.__cause__ is error.cause
    assert error.location == "generated/registry/our_class.py"
