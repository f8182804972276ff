"""Language-agnostic data model for extracted import statements."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path


class ResolutionKind(str, enum.Enum):
    """How a library attribution was obtained."""

    INDEX = "index"  # found in the project's dependency index
    HEURISTIC = "heuristic"  # syntactic guess from the import target
    UNRESOLVED = "unresolved"  # nothing matched; library is a placeholder


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one import target to a library."""

    library: str
    entity: str
    kind: ResolutionKind


@dataclass(frozen=True)
class ClassOrigin:
    """Archive a Java class was loaded from, as reported by jdeps."""

    archive: str  # e.g. "guava@33.0.0-jre"
    entity: str  # simple class name


@dataclass(frozen=True)
class Specifier:
    """One binding of a JS/TS import declaration."""

    name: str
    modifiers: tuple[str, ...] = ()


@dataclass
class RawImportRecord:
    """An import occurrence as found in source, before resolution."""

    target: str
    span: tuple[int, int]
    text: str
    is_static: bool = False
    is_wildcard: bool = False
    alias: str | None = None
    specifiers: list[Specifier] = field(default_factory=list)


@dataclass
class Project:
    """A build unit identified by the directory holding its manifest."""

    root: Path
    manifest: Path | None = None
    local_prefixes: frozenset[str] = frozenset()
    dependency_index: dict = field(default_factory=dict)


# Serialized field order; keys are the camelCase names used in output files.
FIELDS = (
    "file",
    "projectPath",
    "importedEntity",
    "modifiers",
    "language",
    "library",
    "fullImport",
)


@dataclass
class ImportStatement:
    """A resolved external import, the unit of output."""

    file: str
    project_path: str | None
    imported_entity: str
    modifiers: list[str]
    language: str
    library: str
    full_import: str
    resolution: ResolutionKind = ResolutionKind.INDEX

    def to_dict(self, with_resolution: bool = False) -> dict:
        d = {
            "file": self.file,
            "projectPath": self.project_path,
            "importedEntity": self.imported_entity,
            "modifiers": list(self.modifiers),
            "language": self.language,
            "library": self.library,
            "fullImport": self.full_import,
        }
        if with_resolution:
            d["resolution"] = self.resolution.value
        return d
