"""
Java language plugin.

Finds annotated declarations with tree-sitter and renders the registry as a
Java compilation unit.
"""

import logging
from pathlib import Path
from typing import Any

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

TYPE_DECLARATIONS = {
    "class_declaration": DeclarationKind.CLASS,
    "interface_declaration": DeclarationKind.INTERFACE,
    "enum_declaration": DeclarationKind.ENUM,
    "record_declaration": DeclarationKind.RECORD,
    "annotation_type_declaration": DeclarationKind.ANNOTATION,
}

MEMBER_DECLARATIONS = {
    "method_declaration": DeclarationKind.METHOD,
    "constructor_declaration": DeclarationKind.METHOD,
    "annotation_type_element_declaration": DeclarationKind.METHOD,
    "field_declaration": DeclarationKind.FIELD,
    "constant_declaration": DeclarationKind.FIELD,
    "enum_constant": DeclarationKind.FIELD,
}

# Member nodes whose name sits under their first declarator
DECLARATOR_MEMBERS = ("field_declaration", "constant_declaration")

ANNOTATION_NODES = ("marker_annotation", "annotation")

HEADER = "// Generated by registrygen. Do not edit."

SET_TYPE = "Set<Class<?>>"


class JavaPlugin(LanguagePlugin):
    """Java language plugin using tree-sitter for parsing."""

    def __init__(self):
        self._parser = None

    # =========================================================================
    # Plugin Metadata
    # =========================================================================

    @property
    def language_name(self) -> str:
        return "java"

    @property
    def file_extensions(self) -> list[str]:
        return [".java"]

    # =========================================================================
    # AST Parsing (using tree-sitter)
    # =========================================================================

    def _get_parser(self):
        """Lazy initialization of tree-sitter parser."""
        if self._parser is None:
            try:
                import tree_sitter_java as tsjava
                from tree_sitter import Language, Parser
            except ImportError:
                raise RuntimeError(
                    "tree-sitter-java not installed. Run: pip install tree-sitter-java"
                )

            java_language = Language(tsjava.language())
            self._parser = Parser(java_language)
        return self._parser

    def parse_file(self, file_path: Path) -> Any:
        """Parse a Java file into a tree-sitter AST."""
        with open(file_path, "rb") as f:
            source = f.read()
        try:
            return self.parse_source(source.decode("utf-8"))
        except ValueError as e:
            raise SourceParseError(file_path, str(e)) from e

    def parse_source(self, source_code: str) -> Any:
        """Parse Java source code into a tree-sitter AST."""
        parser = self._get_parser()
        tree = parser.parse(bytes(source_code, "utf-8"))
        if tree.root_node.has_error:
            # tree-sitter recovers from errors; identities inside a broken tree are unreliable
            raise ValueError("Java syntax error")
        return tree

    # =========================================================================
    # Declaration Extraction
    # =========================================================================

    def extract_declarations(
        self, file_path: Path, tree: Any, marker: str, root: Path
    ) -> list[Declaration]:
        """Extract annotated types and members, in source order."""
        root_node = tree.root_node
        package = self._package_name(root_node)

        declarations: list[Declaration] = []
        for child in root_node.children:
            self._visit(child, package, [], file_path, marker, declarations)

        logger.debug(f"{file_path}: {len(declarations)} marked declarations in {package or '<default>'}")
        return declarations

    def _visit(
        self,
        node: Any,
        package: str,
        scope: list[str],
        file_path: Path,
        marker: str,
        declarations: list[Declaration],
    ) -> None:
        # Method and constructor bodies are not entered: local classes have no stable identity
        if node.type in TYPE_DECLARATIONS:
            name = self._text(node.child_by_field_name("name"))
            qualname = scope + [name]
            markers = self._matching_annotations(node, marker)
            if markers:
                declarations.append(
                    Declaration(
                        name=name,
                        kind=TYPE_DECLARATIONS[node.type],
                        identity=TypeIdentity(package=package, qualname=".".join(qualname)),
                        source_file=file_path,
                        line=node.start_point[0] + 1,
                        markers=markers,
                    )
                )

            body = node.child_by_field_name("body")
            if body is not None:
                for child in body.children:
                    self._visit(child, package, qualname, file_path, marker, declarations)

        elif node.type in MEMBER_DECLARATIONS:
            markers = self._matching_annotations(node, marker)
            if markers:
                name = self._member_name(node)
                declarations.append(
                    Declaration(
                        name=name,
                        kind=MEMBER_DECLARATIONS[node.type],
                        identity=TypeIdentity(package=package, qualname=".".join(scope + [name])),
                        source_file=file_path,
                        line=node.start_point[0] + 1,
                        markers=markers,
                    )
                )

        elif node.type == "enum_body_declarations":
            for child in node.children:
                self._visit(child, package, scope, file_path, marker, declarations)

    def _package_name(self, root_node: Any) -> str:
        for child in root_node.children:
            if child.type == "package_declaration":
                for part in child.children:
                    if part.type in ("scoped_identifier", "identifier"):
                        return self._text(part)
        return ""

    def _matching_annotations(self, node: Any, marker: str) -> list[str]:
        names = []
        for child in node.children:
            if child.type != "modifiers":
                continue
            for modifier in child.children:
                if modifier.type in ANNOTATION_NODES:
                    name = self._text(modifier.child_by_field_name("name"))
                    if name and marker_matches(name, marker):
                        names.append(name)
        return names

    def _member_name(self, node: Any) -> str:
        if node.type in DECLARATOR_MEMBERS:
            # First declarator only: `@Marker int a, b;` is reported once
            declarator = node.child_by_field_name("declarator")
            return self._text(declarator.child_by_field_name("name")) if declarator else "<field>"
        return self._text(node.child_by_field_name("name"))

    def _text(self, node: Any) -> str:
        if node is None:
            return ""
        return node.text.decode("utf-8")

    # =========================================================================
    # Rendering
    # =========================================================================

    def file_name(self, class_name: str) -> str:
        return f"{class_name}.java"

    def render_class(self, generated: GeneratedClass) -> str:
        cb = CodeBuilder(indent="  ")
        cb.write(HEADER)
        if generated.package:
            cb.write(f"package {generated.package};")
        cb.write()
        cb.write("import java.util.HashSet;")
        cb.write("import java.util.Set;")
        cb.write()

        if generated.doc.strip():
            self._write_javadoc(cb, generated.doc)

        visibility = "public " if generated.is_public else ""
        cb.write(f"{visibility}class {generated.name} {{")
        with cb.block():
            self._write_method(cb, generated.method)
        cb.write("}")

        return cb.render()

    def _write_javadoc(self, cb: CodeBuilder, doc: str) -> None:
        cb.write("/**")
        for line in doc.strip().replace("*/", "*&#47;").splitlines():
            cb.write(f" * {line}".rstrip())
        cb.write(" */")

    def _write_method(self, cb: CodeBuilder, method: GeneratedMethod) -> None:
        var = local_name("set", method.additions)

        modifiers = []
        if method.is_public:
            modifiers.append("public")
        if method.is_static:
            modifiers.append("static")
        prefix = " ".join(modifiers + [SET_TYPE])

        cb.write(f"{prefix} {method.name}() {{")
        with cb.block():
            for statement in method.body:
                if statement.kind == StatementKind.DECLARE_SET:
                    cb.write(f"{SET_TYPE} {var} = new HashSet<>();")
                elif statement.kind == StatementKind.ADD:
                    cb.write(f"{var}.add({statement.target.fqn}.class);")
                elif statement.kind == StatementKind.RETURN:
                    cb.write(f"return {var};")
        cb.write("}")
