"""Run configuration read from .depscope.toml or [tool.depscope] in pyproject.toml."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]

from depscope.discover import GLOBAL_IGNORE_RULES, IgnoreRules

logger = logging.getLogger(__name__)

DEFAULT_JDEPS_RELEASE = 17


@dataclass
class DepscopeConfig:
    """Options shared by discovery, the dispatcher and the language extractors."""

    exclude_dirs: list[str] = field(default_factory=list)
    exclude_files: list[str] = field(default_factory=list)
    jdeps_release: int = DEFAULT_JDEPS_RELEASE
    java_tools: bool = True

    @property
    def ignore_rules(self) -> IgnoreRules:
        """Global ignore rules plus any configured extras."""
        return GLOBAL_IGNORE_RULES.extend(self.exclude_dirs, self.exclude_files)


def load_config(repo_path: Path) -> DepscopeConfig:
    """Read configuration for *repo_path*, falling back to defaults."""
    table = _read_config_table(repo_path)
    config = DepscopeConfig()
    if not table:
        return config

    exclude_dirs = table.get("exclude_dirs", [])
    if isinstance(exclude_dirs, list):
        config.exclude_dirs = [str(d) for d in exclude_dirs]
    exclude_files = table.get("exclude_files", [])
    if isinstance(exclude_files, list):
        config.exclude_files = [str(p) for p in exclude_files]

    release = table.get("jdeps_release")
    if isinstance(release, int) and not isinstance(release, bool):
        config.jdeps_release = release
    elif release is not None:
        logger.warning("Ignoring non-integer jdeps_release: %r", release)

    java_tools = table.get("java_tools")
    if isinstance(java_tools, bool):
        config.java_tools = java_tools

    logger.debug("Loaded config: %s", config)
    return config


def _read_config_table(repo_path: Path) -> dict | None:
    # Try .depscope.toml first
    depscope_toml = repo_path / ".depscope.toml"
    if depscope_toml.exists():
        try:
            with open(depscope_toml, "rb") as f:
                data = tomllib.load(f)
            return data.get("depscope", {})
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning("Could not parse %s: %s", depscope_toml, e)

    # Fall back to [tool.depscope] in pyproject.toml
    pyproject = repo_path / "pyproject.toml"
    if pyproject.exists():
        try:
            with open(pyproject, "rb") as f:
                data = tomllib.load(f)
            return data.get("tool", {}).get("depscope", None)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning("Could not parse %s: %s", pyproject, e)

    return None
