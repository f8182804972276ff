"""Extractor protocol: all language families conform to this interface."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from depscope.config import DepscopeConfig
from depscope.model import ImportStatement

_LANGUAGES = {
    ".java": "Java",
    ".js": "JavaScript",
    ".mjs": "JavaScript",
    ".cjs": "JavaScript",
    ".jsx": "JavaScript (JSX)",
    ".ts": "TypeScript",
    ".mts": "TypeScript",
    ".cts": "TypeScript",
    ".tsx": "TypeScript (TSX)",
}


def language_for_extension(extension: str) -> str:
    """Return the language tag recorded on statements from *extension* files."""
    return _LANGUAGES.get(extension, "Unknown")


def relative_to_repo(repo_path: Path, file_path: Path) -> str:
    """Return *file_path* relative to *repo_path* with POSIX separators.

    Files outside the repository are returned unchanged.
    """
    try:
        return file_path.relative_to(repo_path).as_posix()
    except ValueError:
        return file_path.as_posix()


class LanguageExtractor(Protocol):
    """Per-run extractor for one language family, built once by its plugin."""

    def is_ignored(self, file_path: Path) -> bool:
        """Return True if the family-specific rules exclude *file_path*."""
        ...

    async def extract(self, file_path: Path, repo_path: Path) -> list[ImportStatement]:
        """Return the external imports found in *file_path*."""
        ...


class LanguagePlugin(Protocol):
    """Factory for a language family's extractor."""

    extensions: tuple[str, ...]

    async def create_extractor(
        self,
        files_by_extension: dict[str, list[Path]],
        repo_path: Path,
        config: DepscopeConfig,
    ) -> LanguageExtractor:
        """Analyze project manifests once and return a ready extractor."""
        ...
