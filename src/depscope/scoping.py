"""Project boundaries: manifest discovery and innermost-project lookup."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)


def find_owning_project(file_path: Path, project_roots: Iterable[Path]) -> Path | None:
    """Return the most specific root in *project_roots* that contains *file_path*.

    Containment is checked per path component, so ``/repo/app`` does not own
    ``/repo/application/x.js``.  Among all ancestors the longest path wins.
    Returns None when no root contains the file.
    """
    best: Path | None = None
    for root in project_roots:
        if root != file_path and root not in file_path.parents:
            continue
        if best is None or len(str(root)) > len(str(best)):
            best = root
    return best


def discover_manifest_roots(
    repo_path: Path,
    manifest_name: str,
    skip_dirs: Iterable[str] = (),
) -> list[Path]:
    """Breadth-first search for directories holding *manifest_name*.

    A directory is registered as a project root unless one of its ancestors
    was registered first; submodules of a multi-module build therefore belong
    to the outermost manifest.  Entries are visited in sorted order so the
    result is stable between runs.
    """
    skip = set(skip_dirs)
    roots: list[Path] = []
    queue: deque[Path] = deque([repo_path])

    while queue:
        current = queue.popleft()
        try:
            entries = sorted(current.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.warning("Could not list %s: %s", current, e)
            continue

        for entry in entries:
            if entry.is_dir():
                if entry.name not in skip and not entry.is_symlink():
                    queue.append(entry)
            elif entry.name == manifest_name:
                if any(root == current or root in current.parents for root in roots):
                    logger.debug("Skipping nested manifest %s", entry)
                    continue
                roots.append(current)

    logger.debug("Found %d %s roots under %s", len(roots), manifest_name, repo_path)
    return roots
