"""Build a class → archive index from ``mvn`` classpath and ``jdeps`` output.

Both tools sit behind small capability protocols so the text parsing can be
exercised with recorded output and the tools swapped out in tests.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import shutil
from pathlib import Path
from typing import Protocol

from depscope.errors import ToolError
from depscope.extractors.java.maven import find_project_archive, jgo_classpath
from depscope.model import ClassOrigin

logger = logging.getLogger(__name__)

# jdeps -verbose:class, one dependency per line:
#    com.acme.App     -> com.google.common.base.Strings     guava-33.0.0-jre.jar
# Lines whose archive is "not found" have a space in the last column and are
# left unmatched.
_REPORT_LINE_RE = re.compile(r"^\s*(\S+)\s+->\s+(\S+)\s+(\S+)\s*$")

# Version suffix of an archive name: the final "-<digit>..." segment.
_ARCHIVE_VERSION_RE = re.compile(r"^(?P<name>.+)-(?P<version>\d[^/]*)$")

_CLASSPATH_MARKER = "Dependencies classpath:"


class ClasspathResolver(Protocol):
    """Produces the compile classpath for a project."""

    async def resolve_classpath(self, project_dir: Path) -> str: ...


class DependencyAnalyzer(Protocol):
    """Produces class-level dependency report lines for one compiled target."""

    async def analyze(self, project_dir: Path, classpath: str, target: Path) -> list[str]: ...


async def run_tool(cmd: list[str], cwd: Path) -> str:
    """Run *cmd* in *cwd* and return its stdout; raise ToolError on failure."""
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd),
        )
    except OSError as e:
        raise ToolError(cmd, None, str(e)) from e

    stdout_data, stderr_data = await process.communicate()
    stdout = stdout_data.decode("utf-8", errors="replace")
    if process.returncode != 0:
        stderr = stderr_data.decode("utf-8", errors="replace")
        raise ToolError(cmd, process.returncode, stderr or stdout)
    return stdout


def parse_build_classpath_output(output: str) -> str:
    """Extract the classpath from ``mvn dependency:build-classpath`` output.

    Maven prints the classpath on the line after ``Dependencies classpath:``.
    Output without the marker (e.g. ``-q`` runs) is taken to be the classpath
    itself, minus any ``[INFO]``-style log lines.
    """
    lines = output.splitlines()
    for i, line in enumerate(lines):
        if _CLASSPATH_MARKER in line:
            for candidate in lines[i + 1 :]:
                candidate = candidate.strip()
                if candidate and not candidate.startswith("["):
                    return candidate
            return ""
    plain = [line.strip() for line in lines if line.strip() and not line.lstrip().startswith("[")]
    return plain[-1] if plain else ""


class MavenClasspathResolver:
    """Classpath via ``mvn dependency:build-classpath``, or jgo without Maven."""

    def __init__(self, mvn_path: str | None = None):
        self.mvn_path = mvn_path or shutil.which("mvn")

    async def resolve_classpath(self, project_dir: Path) -> str:
        if self.mvn_path is None:
            logger.debug("mvn not found on PATH, resolving %s with jgo", project_dir)
            return await asyncio.to_thread(jgo_classpath, project_dir)

        output = await run_tool(
            [self.mvn_path, "-B", "dependency:build-classpath"], cwd=project_dir
        )
        return parse_build_classpath_output(output)


class JdepsAnalyzer:
    """Class-level dependency report via ``jdeps -verbose:class``."""

    def __init__(self, release: int = 17, jdeps_path: str | None = None):
        self.release = release
        self.jdeps_path = jdeps_path or shutil.which("jdeps")

    async def analyze(self, project_dir: Path, classpath: str, target: Path) -> list[str]:
        if self.jdeps_path is None:
            raise ToolError(["jdeps"], None, "jdeps not found on PATH; is a JDK installed?")

        cmd = [self.jdeps_path, "--multi-release", str(self.release), "-verbose:class"]
        if classpath:
            cmd += ["-cp", classpath]
        cmd.append(str(target))
        output = await run_tool(cmd, cwd=project_dir)
        return output.splitlines()


def archive_coordinate(archive: str) -> str:
    """Normalize an archive file name into a ``name@version`` coordinate.

    ``guava-33.0.0-jre.jar`` → ``guava@33.0.0-jre``; names without a version
    (``java.base``, ``classes``) are returned without the ``.jar`` suffix.
    """
    if archive.endswith(".jar"):
        archive = archive[: -len(".jar")]
    m = _ARCHIVE_VERSION_RE.match(archive)
    if m:
        return f"{m.group('name')}@{m.group('version')}"
    return archive


def parse_report_line(line: str) -> tuple[str, str, str] | None:
    """Split a jdeps report line into (source class, imported class, archive)."""
    m = _REPORT_LINE_RE.match(line)
    if m is None:
        return None
    return m.group(1), m.group(2), m.group(3)


def index_report(
    lines: list[str],
    group_id: str | None,
    own_archives: set[str],
) -> dict[str, ClassOrigin]:
    """Index report *lines* by imported class name.

    Lines pointing back into the project's own archives are dropped, as are
    lines whose source class lies outside *group_id*.  The first line seen
    for an imported class wins.
    """
    index: dict[str, ClassOrigin] = {}
    for line in lines:
        parsed = parse_report_line(line)
        if parsed is None:
            continue
        source_class, imported_class, archive = parsed
        if archive in own_archives:
            continue
        if group_id and not source_class.startswith(group_id):
            continue
        if imported_class in index:
            continue
        index[imported_class] = ClassOrigin(
            archive=archive_coordinate(archive),
            entity=imported_class.rsplit(".", 1)[-1],
        )
    return index


async def build_class_index(
    project_dir: Path,
    group_id: str | None,
    classpath_resolver: ClasspathResolver,
    analyzer: DependencyAnalyzer,
) -> dict[str, ClassOrigin]:
    """Run the external tools for one project and index their report.

    Raises ToolError or OSError when a tool fails; an absent archive yields
    an empty index.
    """
    archive = find_project_archive(project_dir)
    if archive is None:
        logger.warning("No JAR found in target for %s, skipping...", project_dir)
        return {}

    logger.info("Processing %s...", project_dir)
    classpath = await classpath_resolver.resolve_classpath(project_dir)

    lines = list(await analyzer.analyze(project_dir, classpath, archive))
    own_archives = {archive.name, archive.stem, "classes"}

    test_classes = project_dir / "target" / "test-classes"
    if test_classes.is_dir():
        test_cp = os.pathsep.join(p for p in (classpath, str(archive)) if p)
        lines += await analyzer.analyze(project_dir, test_cp, test_classes)
        own_archives.add(test_classes.name)

    logger.info("Parsing jdeps output for %s...", project_dir)
    index = index_report(lines, group_id, own_archives)
    logger.debug("%s: %d imported classes indexed", project_dir, len(index))
    return index
