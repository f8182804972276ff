"""Read Maven project metadata: own groupId, built archive, dependency JARs."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

logger = logging.getLogger(__name__)

# Blocks whose <groupId> children belong to some other artifact.  <parent>
# is the important one: its groupId often precedes the project's own.
_FOREIGN_BLOCKS = (
    "parent",
    "dependencyManagement",
    "dependencies",
    "build",
    "reporting",
    "profiles",
)

_GROUP_ID_RE = re.compile(r"<groupId>\s*([\w.\-]+)\s*</groupId>")
_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)


def _strip_block(text: str, tag: str) -> str:
    return re.sub(rf"<{tag}(?:\s[^>]*)?>.*?</{tag}\s*>", "", text, flags=re.DOTALL)


def group_id_from_text(pom_text: str) -> str | None:
    """Return the project's own groupId from raw pom.xml text.

    Parent, dependency and build blocks are removed before matching so the
    inherited or referenced groupIds never shadow the declared one.
    """
    text = _COMMENT_RE.sub("", pom_text)
    for tag in _FOREIGN_BLOCKS:
        text = _strip_block(text, tag)
    m = _GROUP_ID_RE.search(text)
    return m.group(1) if m else None


def read_group_id(pom_path: Path) -> str | None:
    """Extract the declared groupId of *pom_path*, or None if it has none."""
    try:
        pom_text = pom_path.read_text(encoding="utf-8")
    except OSError as e:
        logger.error("Error reading %s: %s", pom_path, e)
        return None

    group_id = group_id_from_text(pom_text)
    if group_id is None:
        logger.warning("No own <groupId> found in %s", pom_path)
    return group_id


def find_project_archive(project_dir: Path) -> Path | None:
    """Return the project's built JAR under ``target/``.

    Sorted listing; the first ``*.jar`` that is neither a sources nor a
    javadoc archive wins.
    """
    target = project_dir / "target"
    try:
        names = sorted(p.name for p in target.iterdir() if p.is_file())
    except OSError as e:
        logger.warning("Could not list %s: %s", target, e)
        return None

    for name in names:
        if name.endswith(".jar") and "-sources" not in name and "-javadoc" not in name:
            return target / name
    return None


def resolve_dependency_jars(project_dir: Path) -> list[Path]:
    """Resolve the dependency JARs of a Maven project via jgo.

    Returns a sorted, deduplicated list of JAR paths from the local Maven
    repository.  Artifacts that cannot be resolved are logged and skipped.
    """
    from jgo.maven import POM, MavenContext, Model

    pom = POM(project_dir / "pom.xml")
    model = Model(pom, MavenContext())
    deps, _ = model.dependencies()

    jar_paths: set[Path] = set()
    for dep in deps:
        if dep.scope not in (None, "compile", "runtime", "provided", "test"):
            continue
        try:
            jar = dep.artifact.resolve()
            if jar.exists():
                jar_paths.add(jar)
        except Exception as e:
            logger.debug(
                "Could not resolve artifact %s:%s: %s",
                dep.groupId,
                dep.artifactId,
                e,
            )

    logger.debug("Resolved %d dependency JARs for %s", len(jar_paths), project_dir)
    return sorted(jar_paths)


def jgo_classpath(project_dir: Path) -> str:
    """Classpath string built from jgo-resolved dependency JARs."""
    return os.pathsep.join(str(p) for p in resolve_dependency_jars(project_dir))
