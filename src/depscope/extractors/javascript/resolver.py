"""Decide whether a module specifier is external and which package it names."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from depscope.model import RawImportRecord, Resolution, ResolutionKind

# Emitted as the library of a specifier no lockfile entry accounts for.  The
# statement's resolution kind (UNRESOLVED) is the machine-readable marker.
UNRESOLVED_LIBRARY = "No match found in lock file"

NODE_PREFIX = "node:"

NODE_BUILTINS = frozenset(
    {
        "assert",
        "assert/strict",
        "async_hooks",
        "buffer",
        "child_process",
        "cluster",
        "console",
        "constants",
        "crypto",
        "dgram",
        "diagnostics_channel",
        "dns",
        "dns/promises",
        "domain",
        "events",
        "fs",
        "fs/promises",
        "http",
        "http2",
        "https",
        "inspector",
        "module",
        "net",
        "os",
        "path",
        "path/posix",
        "path/win32",
        "perf_hooks",
        "process",
        "punycode",
        "querystring",
        "readline",
        "readline/promises",
        "repl",
        "stream",
        "stream/promises",
        "stream/web",
        "string_decoder",
        "timers",
        "timers/promises",
        "tls",
        "trace_events",
        "tty",
        "url",
        "util",
        "util/types",
        "v8",
        "vm",
        "wasi",
        "worker_threads",
        "zlib",
    }
)


def is_path_import(specifier: str) -> bool:
    return specifier in (".", "..") or specifier.startswith(("./", "../", "/"))


def is_local_import(specifier: str, local_prefixes: Iterable[str]) -> bool:
    """True for relative/absolute paths and tsconfig alias prefixes."""
    if is_path_import(specifier):
        return True
    return any(specifier == prefix or specifier.startswith(f"{prefix}/") for prefix in local_prefixes)


def is_node_builtin(specifier: str) -> bool:
    if specifier.startswith(NODE_PREFIX):
        return True
    return specifier in NODE_BUILTINS


def candidate_packages(specifier: str) -> list[str]:
    """Package names *specifier* could belong to, longest first.

    ``lodash/fp/map`` → ``lodash/fp/map``, ``lodash/fp``, ``lodash``.  Scoped
    packages come out the same way, with ``@scope/pkg`` ahead of ``@scope``.
    """
    parts = specifier.split("/")
    return ["/".join(parts[:i]) for i in range(len(parts), 0, -1)]


def lookup_package(specifier: str, dependency_index: Mapping[str, str]) -> Resolution:
    """Resolve *specifier* against a lockfile index, falling back to subpaths."""
    coord = dependency_index.get(specifier)
    if coord is not None:
        return Resolution(coord, "", ResolutionKind.INDEX)

    for candidate in candidate_packages(specifier):
        coord = dependency_index.get(candidate)
        if coord is not None:
            return Resolution(coord, "", ResolutionKind.INDEX)

    return Resolution(UNRESOLVED_LIBRARY, "", ResolutionKind.UNRESOLVED)


def resolve_js_import(
    record: RawImportRecord,
    local_prefixes: Iterable[str],
    dependency_index: Mapping[str, str],
) -> Resolution | None:
    """Attribute *record* to a package, or None if it is local or built in."""
    if is_local_import(record.target, local_prefixes) or is_node_builtin(record.target):
        return None

    resolution = lookup_package(record.target, dependency_index)
    entity = ", ".join(spec.name for spec in record.specifiers)
    return Resolution(resolution.library, entity, resolution.kind)


def js_modifiers(record: RawImportRecord) -> list[str]:
    """Ordered, duplicate-free union of the record's specifier modifiers."""
    modifiers: list[str] = []
    for spec in record.specifiers:
        for modifier in spec.modifiers:
            if modifier not in modifiers:
                modifiers.append(modifier)
    return modifiers
