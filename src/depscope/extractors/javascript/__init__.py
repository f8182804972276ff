"""JavaScript / TypeScript extractor driven by lockfiles and tsconfig aliases."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from depscope.config import DepscopeConfig
from depscope.discover import IgnoreRules
from depscope.extractors.base import language_for_extension, relative_to_repo
from depscope.extractors.javascript.lockfiles import NPM_LOCK, PNPM_LOCK, build_dependency_map
from depscope.extractors.javascript.resolver import js_modifiers, resolve_js_import
from depscope.extractors.javascript.syntax import parse_js_imports
from depscope.extractors.javascript.tsconfig import CONFIG_NAMES, extract_local_prefixes
from depscope.model import ImportStatement
from depscope.scoping import find_owning_project

logger = logging.getLogger(__name__)

__all__ = ["JavaScriptExtractor", "JavaScriptPlugin"]

JS_EXTENSIONS = (".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs", ".mts", ".cts")

JS_IGNORE_RULES = IgnoreRules(
    directories=(
        ".nuxt",
        ".svelte-kit",
        ".storybook",
        ".vercel",
        ".firebase",
        "storybook-static",
        ".cache",
        ".output",
        ".vite",
        ".angular",
        ".astro",
    ),
    file_patterns=(
        "*.test.js",
        "*.test.ts",
        "*.test.jsx",
        "*.test.tsx",
        "*.spec.js",
        "*.spec.ts",
        "*.spec.jsx",
        "*.spec.tsx",
        "*.d.ts",
        "*.min.js",
        "webpack.config.js",
        "babel.config.js",
        "tsconfig.json",
        ".eslintrc.js",
        ".eslintrc.cjs",
        ".prettierrc.js",
        "jest.config.js",
    ),
)


class JavaScriptExtractor:
    """Extracts JS/TS imports and attributes them via per-project lockfiles."""

    def __init__(
        self,
        repo_path: Path,
        dependency_map: dict[Path, dict[str, str]],
        local_prefixes: set[str],
    ):
        self.repo_path = repo_path
        self.dependency_map = dependency_map
        self.local_prefixes = local_prefixes
        self.rules = JS_IGNORE_RULES

    def is_ignored(self, file_path: Path) -> bool:
        return self.rules.is_ignored(file_path, self.repo_path)

    async def extract(self, file_path: Path, repo_path: Path) -> list[ImportStatement]:
        project_root = find_owning_project(file_path, self.dependency_map)
        dependency_index = self.dependency_map[project_root] if project_root is not None else {}

        try:
            source = await asyncio.to_thread(file_path.read_bytes)
            records = parse_js_imports(source, file_path.suffix)
        except (OSError, ValueError, KeyError) as e:
            logger.error("Failed to process file: %s: %s", file_path, e)
            return []

        relative_path = relative_to_repo(repo_path, file_path)
        language = language_for_extension(file_path.suffix)
        statements: list[ImportStatement] = []
        for record in records:
            resolution = resolve_js_import(record, self.local_prefixes, dependency_index)
            if resolution is None:
                continue
            statements.append(
                ImportStatement(
                    file=relative_path,
                    project_path=str(project_root) if project_root is not None else None,
                    imported_entity=resolution.entity,
                    modifiers=js_modifiers(record),
                    language=language,
                    library=resolution.library,
                    full_import=record.text,
                    resolution=resolution.kind,
                )
            )
        return statements


class JavaScriptPlugin:
    """Builds a JavaScriptExtractor from the repository's configs and lockfiles."""

    extensions = JS_EXTENSIONS

    async def create_extractor(
        self,
        files_by_extension: dict[str, list[Path]],
        repo_path: Path,
        config: DepscopeConfig,
    ) -> JavaScriptExtractor:
        json_files = files_by_extension.get(".json", [])
        yaml_files = files_by_extension.get(".yaml", [])

        config_paths = [p for p in json_files if p.name in CONFIG_NAMES]
        local_prefixes = await asyncio.to_thread(extract_local_prefixes, config_paths)

        lockfiles = [p for p in json_files if p.name == NPM_LOCK]
        lockfiles += [p for p in yaml_files if p.name == PNPM_LOCK]
        dependency_map = await build_dependency_map(lockfiles)
        if not dependency_map:
            logger.info("No JS/TS lockfiles found; imports will be reported unresolved")

        return JavaScriptExtractor(repo_path, dependency_map, local_prefixes)
