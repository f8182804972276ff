"""Walk a repository and group its files by extension, honouring ignore rules."""

from __future__ import annotations

import fnmatch
import logging
import os
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IgnoreRules:
    """Ordered exclusion rules applied to repository paths.

    ``directories`` entries match a single path component (``node_modules``)
    or a run of consecutive components (``src/test``).  ``file_patterns`` are
    shell-style patterns matched against the file name (``*.min.js``).
    """

    directories: tuple[str, ...] = ()
    file_patterns: tuple[str, ...] = ()

    def extend(
        self,
        directories: tuple[str, ...] | list[str] = (),
        file_patterns: tuple[str, ...] | list[str] = (),
    ) -> IgnoreRules:
        """Return a new rule set with extra rules layered on top of this one."""
        return IgnoreRules(
            directories=self.directories + tuple(d for d in directories if d not in self.directories),
            file_patterns=self.file_patterns
            + tuple(p for p in file_patterns if p not in self.file_patterns),
        )

    def is_ignored_dir(self, parts: tuple[str, ...]) -> bool:
        for rule in self.directories:
            rule_parts = tuple(rule.split("/"))
            n = len(rule_parts)
            for i in range(len(parts) - n + 1):
                if parts[i : i + n] == rule_parts:
                    return True
        return False

    def is_ignored_file(self, name: str) -> bool:
        return any(fnmatch.fnmatchcase(name, pattern) for pattern in self.file_patterns)

    def is_ignored(self, path: Path, root: Path | None = None) -> bool:
        """Return True if *path* (a file) is excluded by these rules.

        Directory rules are matched against the components between *root* and
        the file, so a repository that itself lives under ``build/`` is not
        ignored wholesale.
        """
        rel = path
        if root is not None:
            try:
                rel = path.relative_to(root)
            except ValueError:
                pass
        return self.is_ignored_dir(rel.parts[:-1]) or self.is_ignored_file(path.name)


GLOBAL_IGNORE_RULES = IgnoreRules(
    directories=(
        # Build output
        "target",
        "build",
        "out",
        "dist",
        # IDE / project metadata
        ".idea",
        ".vscode",
        ".settings",
        ".classpath",
        ".project",
        # Test trees
        "src/test",
        "__tests__",
        "__mocks__",
        # Coverage
        "jacoco",
        ".nyc_output",
        "coverage",
        # Dependencies
        "node_modules",
        "lib",
        "libs",
        # Docs and framework caches
        "docs",
        ".next",
        ".turbo",
        ".parcel-cache",
        ".nx",
        "storybook-static",
        # Python environments
        "venv",
        ".venv",
        "__pycache__",
        # Version control
        ".git",
        ".svn",
        ".hg",
    ),
    file_patterns=(
        "*.class",
        "*.jar",
        "*.war",
        "*.ear",
        "*.zip",
        "*.tar.gz",
        "*.kts",
        "*.log",
        "*.tmp",
        "*.bak",
        "*.swp",
        "*.md",
        "*.png",
        "*.jpg",
        "*.jpeg",
        "*.gif",
        "*.svg",
        "*.sql",
    ),
)


def group_files_by_extension(
    repo_path: Path, rules: IgnoreRules = GLOBAL_IGNORE_RULES
) -> dict[str, list[Path]]:
    """Return ``{extension: [absolute paths]}`` for every non-ignored file.

    Directories and files are visited in sorted order, so the grouping is
    identical across runs on an unchanged tree.  Files without a suffix are
    grouped under ``""``.
    """
    grouped: dict[str, list[Path]] = defaultdict(list)
    repo_path = repo_path.resolve()

    for dirpath, dirnames, filenames in os.walk(repo_path):
        current = Path(dirpath)
        rel_parts = current.relative_to(repo_path).parts
        dirnames[:] = sorted(
            d for d in dirnames if not rules.is_ignored_dir(rel_parts + (d,))
        )
        for name in sorted(filenames):
            if rules.is_ignored_file(name):
                continue
            path = current / name
            grouped[path.suffix].append(path)

    logger.debug(
        "Discovered %d files in %d extension groups",
        sum(len(v) for v in grouped.values()),
        len(grouped),
    )
    return dict(grouped)
