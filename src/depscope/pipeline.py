"""Orchestrator: discover → analyze manifests → extract → write."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from depscope.config import DepscopeConfig, load_config
from depscope.discover import group_files_by_extension
from depscope.dispatch import extract_imports
from depscope.errors import ConfigError
from depscope.extractors.base import LanguagePlugin
from depscope.model import ImportStatement
from depscope.writers import FORMATS, format_for_path, write_statements

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_STEM = "extracted-imports"


def _check_repo(repo_path: Path) -> Path:
    if not repo_path.exists():
        raise ConfigError(f"Repository path does not exist: {repo_path}")
    if not repo_path.is_dir():
        raise ConfigError(f"Repository path is not a directory: {repo_path}")
    return repo_path.resolve()


async def extract_async(
    repo_path: Path,
    config: DepscopeConfig,
    plugins: list[LanguagePlugin] | None = None,
) -> list[ImportStatement]:
    files_by_extension = await asyncio.to_thread(
        group_files_by_extension, repo_path, config.ignore_rules
    )
    return await extract_imports(files_by_extension, repo_path, config, plugins)


def extract(
    repo_path: Path,
    *,
    config: DepscopeConfig | None = None,
    plugins: list[LanguagePlugin] | None = None,
) -> list[ImportStatement]:
    """Return every external import statement found under *repo_path*.

    Raises ConfigError if *repo_path* is not an existing directory.
    """
    repo_path = _check_repo(repo_path)
    if config is None:
        config = load_config(repo_path)
    return asyncio.run(extract_async(repo_path, config, plugins))


def run(
    repo_path: Path,
    *,
    output: Path | None = None,
    fmt: str | None = None,
    with_resolution: bool = False,
    jdeps_release: int | None = None,
    java_tools: bool | None = None,
    plugins: list[LanguagePlugin] | None = None,
) -> Path:
    """Run the full depscope pipeline and return the output path."""
    repo_path = _check_repo(repo_path)
    if fmt is not None and fmt not in FORMATS:
        raise ConfigError(f"Unknown output format: {fmt!r}")

    config = load_config(repo_path)
    if jdeps_release is not None:
        config.jdeps_release = jdeps_release
    if java_tools is not None:
        config.java_tools = java_tools

    if output is None:
        output = Path.cwd() / f"{DEFAULT_OUTPUT_STEM}.{fmt or 'json'}"
    fmt = fmt or format_for_path(output)

    logger.info("Extracting imports from %s", repo_path)
    statements = extract(repo_path, config=config, plugins=plugins)

    write_statements(statements, output, fmt, with_resolution)
    logger.info("Generated %s", output)
    return output
