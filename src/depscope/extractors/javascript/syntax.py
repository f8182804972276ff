"""Find import declarations, dynamic imports and require() calls via tree-sitter."""

from __future__ import annotations

import logging

import tree_sitter_javascript as tsjavascript
import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser

from depscope.model import RawImportRecord, Specifier

logger = logging.getLogger(__name__)

# extension -> grammar loader
_GRAMMARS = {
    ".js": tsjavascript.language,
    ".jsx": tsjavascript.language,
    ".mjs": tsjavascript.language,
    ".cjs": tsjavascript.language,
    ".ts": tstypescript.language_typescript,
    ".mts": tstypescript.language_typescript,
    ".cts": tstypescript.language_typescript,
    ".tsx": tstypescript.language_tsx,
}

_PARSER_CACHE: dict[str, Parser] = {}


def get_parser(extension: str) -> Parser:
    """Return a cached parser for files with *extension*.

    Raises KeyError for extensions outside the JS/TS family.
    """
    parser = _PARSER_CACHE.get(extension)
    if parser is None:
        language = Language(_GRAMMARS[extension]())
        parser = Parser(language)
        _PARSER_CACHE[extension] = parser
    return parser


def _text(node: Node) -> str:
    return node.text.decode("utf-8")


def _string_value(node: Node | None) -> str | None:
    """Value of a plain string literal node, None for anything else."""
    if node is None or node.type != "string":
        return None
    return _text(node)[1:-1]


def _classify_specifiers(import_clause: Node) -> list[Specifier]:
    specifiers: list[Specifier] = []
    for child in import_clause.named_children:
        if child.type == "identifier":
            # import React from 'react'
            specifiers.append(Specifier(_text(child)))
        elif child.type == "namespace_import":
            # import * as R from 'ramda'
            ident = next((c for c in child.named_children if c.type == "identifier"), None)
            if ident is not None:
                specifiers.append(Specifier(f"* as {_text(ident)}", ("wildcard", "alias")))
        elif child.type == "named_imports":
            # import { map, filter as keep } from 'lodash'
            for spec in child.named_children:
                if spec.type != "import_specifier":
                    continue
                name_node = spec.child_by_field_name("name")
                alias_node = spec.child_by_field_name("alias")
                if name_node is None:
                    continue
                imported = _string_value(name_node) if name_node.type == "string" else _text(name_node)
                local = _text(alias_node) if alias_node is not None else imported
                modifiers = ("alias",) if local != imported else ()
                specifiers.append(Specifier(local, modifiers))
    return specifiers


def _record(node: Node, target: str, specifiers: list[Specifier] | None = None) -> RawImportRecord:
    return RawImportRecord(
        target=target,
        span=(node.start_byte, node.end_byte),
        text=_text(node),
        specifiers=specifiers or [],
    )


def _import_statement(node: Node) -> RawImportRecord | None:
    target = _string_value(node.child_by_field_name("source"))
    if target is not None:
        clause = next((c for c in node.named_children if c.type == "import_clause"), None)
        return _record(node, target, _classify_specifiers(clause) if clause is not None else [])

    # TypeScript: import fs = require('fs')
    require_clause = next((c for c in node.named_children if c.type == "import_require_clause"), None)
    if require_clause is not None:
        target = _string_value(require_clause.child_by_field_name("source"))
        if target is None:
            target = next(
                (_string_value(c) for c in require_clause.named_children if c.type == "string"),
                None,
            )
        if target is not None:
            return _record(node, target)
    return None


def _call_expression(node: Node) -> RawImportRecord | None:
    function = node.child_by_field_name("function")
    arguments = node.child_by_field_name("arguments")
    if function is None or arguments is None or not arguments.named_children:
        return None

    is_dynamic_import = function.type == "import"
    is_require = function.type == "identifier" and _text(function) == "require"
    if not (is_dynamic_import or is_require):
        return None

    target = _string_value(arguments.named_children[0])
    if target is None:
        return None
    return _record(node, target)


def collect_imports(root: Node) -> list[RawImportRecord]:
    """Walk the tree under *root* and return import records in source order."""
    records: list[RawImportRecord] = []
    stack = [root]
    while stack:
        node = stack.pop()
        record = None
        if node.type == "import_statement":
            record = _import_statement(node)
        elif node.type == "export_statement":
            # export { a } from 'x' / export * from 'x'
            target = _string_value(node.child_by_field_name("source"))
            if target is not None:
                record = _record(node, target)
        elif node.type == "call_expression":
            record = _call_expression(node)

        if record is not None:
            records.append(record)
        stack.extend(reversed(node.children))
    return records


def parse_js_imports(source: bytes, extension: str) -> list[RawImportRecord]:
    """Parse *source* with the grammar for *extension* and collect its imports.

    tree-sitter recovers from syntax errors, so imports in the intact parts of
    a broken file are still reported.
    """
    tree = get_parser(extension).parse(source)
    if tree.root_node.has_error:
        logger.debug("Syntax errors while parsing %s source; results may be partial", extension)
    return collect_imports(tree.root_node)
