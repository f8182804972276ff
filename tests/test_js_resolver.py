"""Tests for JS/TS import resolution."""

import pytest

from depscope.extractors.javascript.resolver import (
    UNRESOLVED_LIBRARY,
    candidate_packages,
    is_local_import,
    is_node_builtin,
    js_modifiers,
    lookup_package,
    resolve_js_import,
)
from depscope.model import RawImportRecord, ResolutionKind, Specifier

INDEX = {
    "lodash": "lodash@4.17.21",
    "@babel/core": "@babel/core@7.24.0",
    "@mui/material": "@mui/material@5.15.0",
    "date-fns": "date-fns@3.6.0",
}


def _record(target, *specifiers):
    return RawImportRecord(target=target, span=(0, 0), text="", specifiers=list(specifiers))


class TestLocalAndBuiltin:
    """Tests for local-path, alias and built-in detection."""

    @pytest.mark.parametrize("spec", ["./a", "../b/c", "/abs/x", ".", ".."])
    def test_paths_are_local(self, spec):
        assert is_local_import(spec, set())

    def test_alias_prefix(self):
        prefixes = {"@app", "src"}
        assert is_local_import("@app/components/Button", prefixes)
        assert is_local_import("@app", prefixes)
        assert is_local_import("src/utils", prefixes)
        assert not is_local_import("@apple/pie", prefixes)
        assert not is_local_import("srcery", prefixes)

    def test_builtins(self):
        assert is_node_builtin("fs")
        assert is_node_builtin("fs/promises")
        assert is_node_builtin("node:fs")
        assert is_node_builtin("node:test")
        assert not is_node_builtin("fs-extra")


class TestLookupPackage:
    """Tests for lockfile lookups with subpath fallback."""

    def test_exact(self):
        resolution = lookup_package("lodash", INDEX)
        assert resolution.library == "lodash@4.17.21"
        assert resolution.kind is ResolutionKind.INDEX

    def test_subpath_fallback(self):
        assert lookup_package("lodash/fp", INDEX).library == "lodash@4.17.21"
        assert lookup_package("date-fns/locale/de", INDEX).library == "date-fns@3.6.0"

    def test_scoped_subpath(self):
        assert lookup_package("@mui/material/Button", INDEX).library == "@mui/material@5.15.0"

    def test_unresolved_sentinel(self):
        resolution = lookup_package("left-pad", INDEX)
        assert resolution.library == UNRESOLVED_LIBRARY
        assert resolution.kind is ResolutionKind.UNRESOLVED

    def test_candidates_longest_first(self):
        assert candidate_packages("@scope/pkg/sub") == ["@scope/pkg/sub", "@scope/pkg", "@scope"]
        assert candidate_packages("lodash/fp/map") == ["lodash/fp/map", "lodash/fp", "lodash"]


class TestResolveJsImport:
    """Tests for resolve_js_import."""

    def test_node_builtins_discarded(self):
        assert resolve_js_import(_record("node:fs"), set(), INDEX) is None
        assert resolve_js_import(_record("fs"), set(), INDEX) is None

    def test_relative_discarded(self):
        assert resolve_js_import(_record("./util"), set(), INDEX) is None

    def test_alias_discarded(self):
        assert resolve_js_import(_record("@app/store"), {"@app"}, INDEX) is None

    def test_entity_joins_specifiers(self):
        record = _record("lodash", Specifier("map"), Specifier("keep", ("alias",)))
        resolution = resolve_js_import(record, set(), INDEX)
        assert resolution.library == "lodash@4.17.21"
        assert resolution.entity == "map, keep"

    def test_require_has_empty_entity(self):
        resolution = resolve_js_import(_record("@babel/core"), set(), INDEX)
        assert resolution.library == "@babel/core@7.24.0"
        assert resolution.entity == ""

    def test_empty_index(self):
        resolution = resolve_js_import(_record("react"), set(), {})
        assert resolution.library == UNRESOLVED_LIBRARY


class TestJsModifiers:
    def test_ordered_union(self):
        record = _record(
            "ramda",
            Specifier("* as R", ("wildcard", "alias")),
            Specifier("x", ("alias",)),
        )
        assert js_modifiers(record) == ["wildcard", "alias"]

    def test_none(self):
        assert js_modifiers(_record("react", Specifier("React"))) == []
