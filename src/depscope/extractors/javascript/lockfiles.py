"""Resolved package versions from npm and pnpm lockfiles."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

NPM_LOCK = "package-lock.json"
PNPM_LOCK = "pnpm-lock.yaml"

_PNPM_SECTIONS = ("dependencies", "devDependencies", "optionalDependencies")


# ---------------------------------------------------------------------------
# npm
# ---------------------------------------------------------------------------


def parse_npm_lock(lock_data: dict) -> dict[str, str]:
    """Return ``{name: "name@version"}`` from a parsed package-lock.json.

    Version 1 lockfiles are a nested ``dependencies`` tree whose top level is
    what ``node_modules`` exposes; version 2 and 3 lockfiles list every
    installed path in a flat ``packages`` map.
    """
    version = lock_data.get("lockfileVersion", 1)
    packages = lock_data.get("packages")
    if isinstance(version, int) and version >= 2 and isinstance(packages, dict):
        return _parse_npm_packages(packages)
    dependencies = lock_data.get("dependencies")
    return _parse_npm_dependency_tree(dependencies if isinstance(dependencies, dict) else {})


def _parse_npm_dependency_tree(dependencies: dict) -> dict[str, str]:
    deps: dict[str, str] = {}
    for name, info in dependencies.items():
        if not isinstance(info, dict):
            continue
        version = info.get("version")
        if isinstance(version, str) and version:
            deps[name] = f"{name}@{version}"
    return deps


def _parse_npm_packages(packages: dict) -> dict[str, str]:
    hoisted: dict[str, str] = {}
    nested: dict[str, str] = {}

    for key, info in packages.items():
        # "" is the root project; workspace folders have no node_modules/ part
        if "node_modules/" not in key or not isinstance(info, dict):
            continue
        if info.get("link") or info.get("optional"):
            continue
        version = info.get("version")
        if not isinstance(version, str) or not version:
            continue

        name = key.rsplit("node_modules/", 1)[1]
        target = hoisted if key.count("node_modules/") == 1 and key.startswith("node_modules/") else nested
        target.setdefault(name, f"{name}@{version}")

    for name, coord in nested.items():
        hoisted.setdefault(name, coord)
    return hoisted


# ---------------------------------------------------------------------------
# pnpm
# ---------------------------------------------------------------------------


def _pnpm_version(raw) -> str | None:
    """Strip peer-dependency decorations from a pnpm version reference."""
    if isinstance(raw, dict):
        raw = raw.get("version")
    if isinstance(raw, (int, float)):
        raw = str(raw)
    if not isinstance(raw, str) or not raw:
        return None
    if raw.startswith(("link:", "file:", "workspace:")):
        return None
    # 6.x+: "18.2.0(react@18.2.0)", 5.x: "18.2.0_react@18.2.0"
    return raw.split("(", 1)[0].split("_", 1)[0]


def _parse_pnpm_sections(sections: dict) -> dict[str, str]:
    deps: dict[str, str] = {}
    for section in _PNPM_SECTIONS:
        entries = sections.get(section) or {}
        if not isinstance(entries, dict):
            continue
        for name, raw in entries.items():
            version = _pnpm_version(raw)
            if version:
                deps.setdefault(name, f"{name}@{version}")
    return deps


def parse_pnpm_lock(lock_data: dict) -> dict[str, dict[str, str]]:
    """Return ``{importer path: {name: "name@version"}}`` from pnpm-lock.yaml.

    Workspace lockfiles carry one ``importers`` entry per package directory;
    single-project lockfiles list dependencies at the top level (keyed ``.``).
    """
    importers = lock_data.get("importers")
    if isinstance(importers, dict) and importers:
        return {
            str(path): _parse_pnpm_sections(sections)
            for path, sections in importers.items()
            if isinstance(sections, dict)
        }
    return {".": _parse_pnpm_sections(lock_data)}


# ---------------------------------------------------------------------------
# Project grouping
# ---------------------------------------------------------------------------


def _load_npm_project(package_json: Path, lock_path: Path) -> dict[Path, dict[str, str]]:
    with open(lock_path, encoding="utf-8") as f:
        lock_data = json.load(f)
    if not isinstance(lock_data, dict):
        raise ValueError(f"{lock_path} is not a JSON object")
    return {package_json.parent: parse_npm_lock(lock_data)}


def _load_pnpm_project(lock_path: Path) -> dict[Path, dict[str, str]]:
    with open(lock_path, encoding="utf-8") as f:
        lock_data = yaml.safe_load(f)
    if not isinstance(lock_data, dict):
        raise ValueError(f"{lock_path} is not a YAML mapping")
    root = lock_path.parent
    return {
        (root / importer).resolve() if importer != "." else root: deps
        for importer, deps in parse_pnpm_lock(lock_data).items()
    }


async def build_dependency_map(lockfile_candidates: Iterable[Path]) -> dict[Path, dict[str, str]]:
    """Map each project directory to its resolved ``name → name@version`` map.

    A directory counts as a project only when it holds ``package.json`` next
    to a lockfile; manifests without a lockfile are skipped because nothing
    pins their versions.  Lockfiles are parsed concurrently and a malformed
    one only drops its own project.
    """
    jobs = []
    for lock_path in sorted(set(lockfile_candidates)):
        package_json = lock_path.parent / "package.json"
        if not package_json.is_file():
            logger.debug("No package.json next to %s, skipping", lock_path)
            continue
        if lock_path.name == NPM_LOCK:
            jobs.append((lock_path, asyncio.to_thread(_load_npm_project, package_json, lock_path)))
        elif lock_path.name == PNPM_LOCK:
            jobs.append((lock_path, asyncio.to_thread(_load_pnpm_project, lock_path)))

    results = await asyncio.gather(*(job for _, job in jobs), return_exceptions=True)

    dependency_map: dict[Path, dict[str, str]] = {}
    for (lock_path, _), result in zip(jobs, results):
        if isinstance(result, BaseException):
            if not isinstance(result, (OSError, ValueError, yaml.YAMLError)):
                raise result
            logger.warning("Could not parse %s: %s", lock_path, result)
            continue
        for project_dir, deps in result.items():
            dependency_map.setdefault(project_dir, deps)

    logger.debug("Dependency maps built for %d JS/TS projects", len(dependency_map))
    return dependency_map
