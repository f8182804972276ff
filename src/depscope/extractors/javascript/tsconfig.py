"""Local absolute-import prefixes from tsconfig.json / jsconfig.json."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import json5

logger = logging.getLogger(__name__)

CONFIG_NAMES = ("tsconfig.json", "jsconfig.json")


def prefixes_from_config(config: dict) -> set[str]:
    """Return the import prefixes a parsed config maps onto local files.

    ``paths`` keys win (``@app/*`` → ``@app``); without them a ``baseUrl``
    other than the project root makes its directory name a prefix.
    """
    prefixes: set[str] = set()
    compiler_opts = config.get("compilerOptions") or {}
    if not isinstance(compiler_opts, dict):
        return prefixes

    paths = compiler_opts.get("paths")
    base_url = compiler_opts.get("baseUrl")

    if isinstance(paths, dict) and paths:
        for alias_pattern in paths:
            cleaned = alias_pattern[:-2] if alias_pattern.endswith("/*") else alias_pattern
            cleaned = cleaned.rstrip("*")
            if cleaned:
                prefixes.add(cleaned)
    elif isinstance(base_url, str):
        relative_base = base_url
        if relative_base.startswith("./"):
            relative_base = relative_base[2:]
        elif relative_base.startswith("."):
            relative_base = relative_base[1:]
        relative_base = relative_base.rstrip("/")
        # baseUrl outside the project ("../shared") cannot shadow a package name
        if relative_base and not relative_base.startswith("."):
            prefixes.add(relative_base)

    return prefixes


def extract_local_prefixes(config_paths: Iterable[Path]) -> set[str]:
    """Union of local prefixes across all *config_paths*.

    Configs are parsed as JSON5 so comments and trailing commas are accepted.
    Unreadable or malformed configs are logged and skipped.
    """
    all_prefixes: set[str] = set()
    for config_path in config_paths:
        try:
            config = json5.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("Failed to parse js/tsconfig: %s: %s", config_path, e)
            continue
        if not isinstance(config, dict):
            continue
        all_prefixes |= prefixes_from_config(config)

    logger.debug("JS/TS local prefixes: %s", sorted(all_prefixes))
    return all_prefixes
