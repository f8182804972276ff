"""Route discovered files to the extractor of their language family."""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path

from depscope.config import DepscopeConfig
from depscope.extractors import builtin_plugins
from depscope.extractors.base import LanguageExtractor, LanguagePlugin
from depscope.model import ImportStatement

logger = logging.getLogger(__name__)

# Read by the manifest analyzers, never extracted as source.
METADATA_EXTENSIONS = frozenset({".json", ".yaml", ".yml", ".xml"})


def unhandled_extensions(
    files_by_extension: dict[str, list[Path]],
    plugins: list[LanguagePlugin],
) -> Counter:
    handled = {ext for plugin in plugins for ext in plugin.extensions}
    return Counter(
        {
            ext: len(files)
            for ext, files in files_by_extension.items()
            if files and ext not in handled and ext not in METADATA_EXTENSIONS
        }
    )


async def group_files_by_extractor(
    files_by_extension: dict[str, list[Path]],
    repo_path: Path,
    config: DepscopeConfig,
    plugins: list[LanguagePlugin] | None = None,
) -> list[tuple[LanguageExtractor, list[Path]]]:
    """Build one extractor per language family that has files.

    Returns ``(extractor, files)`` pairs in plugin registration order.  Each
    family's manifests are analyzed exactly once, here.
    """
    if plugins is None:
        plugins = builtin_plugins()

    unhandled = unhandled_extensions(files_by_extension, plugins)
    if unhandled:
        summary = ", ".join(
            f"{ext or '<none>'} ({count})" for ext, count in sorted(unhandled.items())
        )
        logger.info("Unhandled extensions found: %s", summary)

    groups: list[tuple[LanguageExtractor, list[Path]]] = []
    for plugin in plugins:
        files = [f for ext in plugin.extensions for f in files_by_extension.get(ext, [])]
        if not files:
            continue
        logger.debug("%s: %d files", type(plugin).__name__, len(files))
        extractor = await plugin.create_extractor(files_by_extension, repo_path, config)
        groups.append((extractor, sorted(files)))
    return groups


async def extract_imports(
    files_by_extension: dict[str, list[Path]],
    repo_path: Path,
    config: DepscopeConfig,
    plugins: list[LanguagePlugin] | None = None,
) -> list[ImportStatement]:
    """Extract every external import from the grouped files.

    Files are processed one at a time per family, so the result follows
    family order and then file order.
    """
    groups = await group_files_by_extractor(files_by_extension, repo_path, config, plugins)

    statements: list[ImportStatement] = []
    for extractor, files in groups:
        for file_path in files:
            if extractor.is_ignored(file_path):
                logger.debug("Ignoring %s", file_path)
                continue
            statements.extend(await extractor.extract(file_path, repo_path))

    logger.debug("Extracted %d import statements", len(statements))
    return statements
