"""Parse Java import declarations and attribute them to libraries."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from depscope.model import ClassOrigin, RawImportRecord, Resolution, ResolutionKind

# import [static] a.b.C[.*];
_IMPORT_RE = re.compile(
    r"^[ \t]*(?P<stmt>import[ \t]+(?P<static>static[ \t]+)?(?P<path>[\w$.]+?)(?P<wildcard>\.\*)?[ \t]*;)",
    re.MULTILINE,
)

# Namespaces shipped with the Java platform itself.
PLATFORM_NAMESPACES = ("java", "javax", "jdk", "sun")


def parse_java_imports(source: str) -> list[RawImportRecord]:
    """Return one record per import declaration, in declaration order."""
    records: list[RawImportRecord] = []
    for m in _IMPORT_RE.finditer(source):
        records.append(
            RawImportRecord(
                target=m.group("path"),
                span=(m.start("stmt"), m.end("stmt")),
                text=m.group("stmt"),
                is_static=m.group("static") is not None,
                is_wildcard=m.group("wildcard") is not None,
            )
        )
    return records


def is_local_import(target: str, local_prefixes: Iterable[str]) -> bool:
    return any(target.startswith(prefix) for prefix in local_prefixes)


def is_platform_namespace(library: str) -> bool:
    return any(library == ns or library.startswith(ns + ".") for ns in PLATFORM_NAMESPACES)


def lookup_class_index(
    target: str, is_wildcard: bool, class_index: Mapping[str, ClassOrigin]
) -> Resolution | None:
    """Resolve *target* from jdeps evidence.

    jdeps reports leaf classes, so a wildcard import is matched by the first
    indexed class directly or indirectly under the imported package/class.
    """
    if not is_wildcard:
        origin = class_index.get(target)
        if origin is not None:
            return Resolution(origin.archive, origin.entity, ResolutionKind.INDEX)
        return None

    prefix = target + "."
    for imported_class, origin in class_index.items():
        if imported_class.startswith(prefix):
            return Resolution(origin.archive, "*", ResolutionKind.INDEX)
    return None


def split_import_path(target: str, is_static: bool, is_wildcard: bool) -> Resolution:
    """Guess library and entity from the shape of the import alone.

    Not authoritative: the package prefix is not necessarily the artifact,
    it only points in the right direction.
    """
    head, dot, last = target.rpartition(".")

    if is_wildcard and dot:
        # import static org.junit.jupiter.api.Assertions.*  -> Assertions.*
        entity = f"{last}.*" if is_static else "*"
        return Resolution(head, entity, ResolutionKind.HEURISTIC)

    if is_static:
        parts = target.split(".")
        if len(parts) > 2:
            # import static org.mockito.Mockito.when -> Mockito.when
            return Resolution(
                ".".join(parts[:-2]), ".".join(parts[-2:]), ResolutionKind.HEURISTIC
            )

    if dot:
        return Resolution(head, last, ResolutionKind.HEURISTIC)

    return Resolution(target, target, ResolutionKind.UNRESOLVED)


def resolve_java_import(
    record: RawImportRecord,
    local_prefixes: Iterable[str],
    class_index: Mapping[str, ClassOrigin],
) -> Resolution | None:
    """Attribute *record* to a library, or None if it is local or JDK."""
    if is_local_import(record.target, local_prefixes):
        return None

    resolution = lookup_class_index(
        record.target, record.is_wildcard, class_index
    ) or split_import_path(record.target, record.is_static, record.is_wildcard)

    if is_platform_namespace(resolution.library):
        return None
    return resolution


def java_modifiers(record: RawImportRecord) -> list[str]:
    modifiers: list[str] = []
    if record.is_static:
        modifiers.append("static")
    if record.is_wildcard:
        modifiers.append("wildcard")
    return modifiers
