"""
Python language plugin.

Finds decorated classes with Python's built-in AST module and renders the
registry as a Python module.
"""

import ast
import keyword
import logging
import re
from pathlib import Path

from registrygen.config.models import (
    Declaration,
    DeclarationKind,
    GeneratedClass,
    GeneratedMethod,
    StatementKind,
    TypeIdentity,
)
from registrygen.errors import SourceParseError
from registrygen.languages.base.plugin import LanguagePlugin, local_name, marker_matches
from registrygen.synthesis.code_builder import CodeBuilder

logger = logging.getLogger(__name__)

ENUM_BASES = {"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"}
INTERFACE_BASES = {"Protocol"}

HEADER = "# Generated by registrygen. Do not edit."

# Builtins the generated module refers to by name
RENDER_BUILTINS = ("set", "type", "staticmethod")


def compound_bodies(node: ast.stmt) -> list[list[ast.stmt]]:
    """Statement blocks nested in an if/for/while/with/try/match statement."""
    blocks = [getattr(node, field, None) for field in ("body", "orelse", "finalbody")]
    blocks.extend(handler.body for handler in getattr(node, "handlers", []))
    blocks.extend(case.body for case in getattr(node, "cases", []))
    return [block for block in blocks if block]


def is_importable(module: str) -> bool:
    return all(part.isidentifier() and not keyword.iskeyword(part) for part in module.split("."))


class PythonPlugin(LanguagePlugin):
    """Python language plugin using Python's built-in AST module."""

    # =========================================================================
    # Plugin Metadata
    # =========================================================================

    @property
    def language_name(self) -> str:
        return "python"

    @property
    def file_extensions(self) -> list[str]:
        return [".py"]

    # =========================================================================
    # AST Parsing
    # =========================================================================

    def parse_file(self, file_path: Path) -> ast.Module:
        """Parse a Python file into an AST, honouring its coding cookie."""
        with open(file_path, "rb") as f:
            source = f.read()
        try:
            return self.parse_source(source)
        except ValueError as e:
            raise SourceParseError(file_path, str(e)) from e

    def parse_source(self, source_code: str | bytes) -> ast.Module:
        """Parse Python source code into an AST."""
        try:
            return ast.parse(source_code)
        except SyntaxError as e:
            raise ValueError(f"Python syntax error: {e}")
        except UnicodeDecodeError as e:
            raise ValueError(f"Python source is not decodable: {e}")

    # =========================================================================
    # Declaration Extraction
    # =========================================================================

    def module_name(self, file_path: Path, root: Path) -> str:
        """Derive the dotted module name of a file relative to the source root."""
        try:
            relative = file_path.resolve().relative_to(root.resolve())
        except ValueError:
            relative = Path(file_path.name)

        parts = list(relative.with_suffix("").parts)
        if parts and parts[-1] == "__init__":
            parts = parts[:-1]
        if not parts:
            # The root's own __init__.py
            parts = [root.resolve().name]
        return ".".join(parts)

    def extract_declarations(
        self, file_path: Path, tree: ast.Module, marker: str, root: Path
    ) -> list[Declaration]:
        """Extract decorated classes and functions, in source order."""
        module = self.module_name(file_path, root)
        declarations: list[Declaration] = []
        self._visit_body(tree.body, module, [], file_path, marker, declarations)

        # Unmarked files may live anywhere; marked ones must be importable
        if declarations and not is_importable(module):
            raise SourceParseError(
                file_path, f"module path '{module}' is not an importable dotted name"
            )

        logger.debug(f"{file_path}: {len(declarations)} marked declarations in {module}")
        return declarations

    def _visit_body(
        self,
        body: list[ast.stmt],
        module: str,
        scope: list[str],
        file_path: Path,
        marker: str,
        declarations: list[Declaration],
    ) -> None:
        # Function bodies are not searched: local classes have no importable identity
        for node in body:
            if isinstance(node, ast.ClassDef):
                qualname = scope + [node.name]
                markers = self._matching_decorators(node, marker)
                if markers:
                    declarations.append(
                        Declaration(
                            name=node.name,
                            kind=self._class_kind(node),
                            identity=TypeIdentity(package=module, qualname=".".join(qualname)),
                            source_file=file_path,
                            line=node.lineno,
                            markers=markers,
                        )
                    )
                self._visit_body(node.body, module, qualname, file_path, marker, declarations)

            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                markers = self._matching_decorators(node, marker)
                if markers:
                    declarations.append(
                        Declaration(
                            name=node.name,
                            kind=DeclarationKind.METHOD if scope else DeclarationKind.FUNCTION,
                            identity=TypeIdentity(
                                package=module, qualname=".".join(scope + [node.name])
                            ),
                            source_file=file_path,
                            line=node.lineno,
                            markers=markers,
                        )
                    )

            else:
                # Module-level if/try/with/match blocks still define module attributes
                for block in compound_bodies(node):
                    self._visit_body(block, module, scope, file_path, marker, declarations)

    def _matching_decorators(
        self, node: ast.ClassDef | ast.FunctionDef | ast.AsyncFunctionDef, marker: str
    ) -> list[str]:
        names = []
        for decorator in node.decorator_list:
            name = self._dotted_name(decorator)
            if name and marker_matches(name, marker):
                names.append(name)
        return names

    def _dotted_name(self, node: ast.expr) -> str | None:
        """Return 'a.b.c' for Name/Attribute chains; calls resolve to their callee."""
        if isinstance(node, ast.Call):
            return self._dotted_name(node.func)
        if isinstance(node, ast.Name):
            return node.id
        if isinstance(node, ast.Attribute):
            value = self._dotted_name(node.value)
            return f"{value}.{node.attr}" if value else None
        return None

    def _class_kind(self, node: ast.ClassDef) -> DeclarationKind:
        base_names = set()
        for base in node.bases:
            # Protocol[T] and Generic-style subscripts
            if isinstance(base, ast.Subscript):
                base = base.value
            name = self._dotted_name(base)
            if name:
                base_names.add(name.rsplit(".", 1)[-1])

        if base_names & ENUM_BASES:
            return DeclarationKind.ENUM
        if base_names & INTERFACE_BASES:
            return DeclarationKind.INTERFACE
        return DeclarationKind.CLASS

    # =========================================================================
    # Rendering
    # =========================================================================

    def file_name(self, class_name: str) -> str:
        """Python modules are snake_case: OurClass -> our_class.py."""
        stem = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", class_name).lower()
        return f"{stem}.py"

    def render_class(self, generated: GeneratedClass) -> str:
        method = generated.method
        additions = method.additions
        modules = {identity.package for identity in additions if identity.package}

        # An `import set.shapes` rebinds the global `set`; reach such builtins via `builtins`
        top_levels = {module.split(".", 1)[0] for module in modules}
        builtin_names = {
            name: f"builtins.{name}" if name in top_levels else name for name in RENDER_BUILTINS
        }
        if top_levels.intersection(RENDER_BUILTINS):
            modules.add("builtins")

        cb = CodeBuilder(indent="    ")
        cb.write(HEADER)
        cb.write()
        for module in sorted(modules):
            cb.write(f"import {module}")
        if modules:
            cb.write()
        cb.write()

        cb.write(f"class {generated.name}:")
        with cb.block():
            if generated.doc.strip():
                self._write_docstring(cb, generated.doc)
                cb.write()
            self._write_method(cb, method, additions, builtin_names)

        return cb.render()

    def _write_docstring(self, cb: CodeBuilder, doc: str) -> None:
        escaped = doc.strip().replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
        lines = escaped.splitlines()
        if len(lines) == 1:
            line = lines[0]
            if line.endswith('"') and not line.endswith('\\"'):
                line = line[:-1] + '\\"'
            cb.write(f'"""{line}"""')
            return
        cb.write(f'"""{lines[0]}')
        for line in lines[1:]:
            cb.write(line)
        cb.write('"""')

    def _write_method(
        self,
        cb: CodeBuilder,
        method: GeneratedMethod,
        additions: list[TypeIdentity],
        builtin_names: dict[str, str],
    ) -> None:
        var = local_name("classes", additions)
        set_type = f"{builtin_names['set']}[{builtin_names['type']}]"

        if method.is_static:
            cb.write(f"@{builtin_names['staticmethod']}")
            cb.write(f"def {method.name}() -> {set_type}:")
        else:
            cb.write(f"def {method.name}(self) -> {set_type}:")

        with cb.block():
            for statement in method.body:
                if statement.kind == StatementKind.DECLARE_SET:
                    cb.write(f"{var}: {set_type} = {builtin_names['set']}()")
                elif statement.kind == StatementKind.ADD:
                    cb.write(f"{var}.add({statement.target.fqn})")
                elif statement.kind == StatementKind.RETURN:
                    cb.write(f"return {var}")
