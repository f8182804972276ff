"""Java extractor for Maven projects."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from depscope.config import DepscopeConfig
from depscope.discover import IgnoreRules
from depscope.extractors.base import language_for_extension, relative_to_repo
from depscope.extractors.java.imports import java_modifiers, parse_java_imports, resolve_java_import
from depscope.extractors.java.jdeps import (
    ClasspathResolver,
    DependencyAnalyzer,
    JdepsAnalyzer,
    MavenClasspathResolver,
    build_class_index,
)
from depscope.extractors.java.maven import read_group_id
from depscope.model import ClassOrigin, ImportStatement, Project, ResolutionKind
from depscope.scoping import discover_manifest_roots, find_owning_project

logger = logging.getLogger(__name__)

__all__ = ["JavaExtractor", "JavaPlugin"]

JAVA_EXTENSIONS = (".java",)

JAVA_IGNORE_RULES = IgnoreRules(
    directories=(".gradle", ".mvn"),
    file_patterns=(
        "*.iml",
        "build.gradle",
        "build.gradle.kts",
        "settings.gradle",
        "settings.gradle.kts",
        "pom.xml",
        "*.ivy",
        "*.ivy.xml",
        "*Test.java",
        "*.test.java",
        "*.spec.java",
    ),
)

# Directories never searched for pom.xml files.
_MANIFEST_SKIP_DIRS = (".git", ".mvn", "node_modules", "target")


class JavaExtractor:
    """Extracts Java imports, attributing them with per-project jdeps evidence."""

    def __init__(self, repo_path: Path, projects: dict[Path, Project], local_prefixes: frozenset[str]):
        self.repo_path = repo_path
        self.projects = projects
        self.local_prefixes = local_prefixes
        self.rules = JAVA_IGNORE_RULES

    def is_ignored(self, file_path: Path) -> bool:
        return self.rules.is_ignored(file_path, self.repo_path)

    def project_for(self, file_path: Path) -> Project | None:
        root = find_owning_project(file_path, self.projects)
        return self.projects[root] if root is not None else None

    async def extract(self, file_path: Path, repo_path: Path) -> list[ImportStatement]:
        project = self.project_for(file_path)
        if project is None:
            logger.warning(
                "No Maven project owns %s; its imports are reported unresolved",
                file_path,
            )
        class_index: dict[str, ClassOrigin] = project.dependency_index if project else {}

        try:
            source = await asyncio.to_thread(file_path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to process file: %s: %s", file_path, e)
            return []

        relative_path = relative_to_repo(repo_path, file_path)
        language = language_for_extension(file_path.suffix)
        statements: list[ImportStatement] = []
        for record in parse_java_imports(source):
            resolution = resolve_java_import(record, self.local_prefixes, class_index)
            if resolution is None:
                continue
            kind = resolution.kind
            if project is None and kind is ResolutionKind.HEURISTIC:
                kind = ResolutionKind.UNRESOLVED
            statements.append(
                ImportStatement(
                    file=relative_path,
                    project_path=str(project.root) if project else None,
                    imported_entity=resolution.entity,
                    modifiers=java_modifiers(record),
                    language=language,
                    library=resolution.library,
                    full_import=record.text,
                    resolution=kind,
                )
            )
        return statements


class JavaPlugin:
    """Builds a JavaExtractor once per run from the repository's pom.xml files."""

    extensions = JAVA_EXTENSIONS

    def __init__(
        self,
        classpath_resolver: ClasspathResolver | None = None,
        analyzer: DependencyAnalyzer | None = None,
    ):
        self.classpath_resolver = classpath_resolver
        self.analyzer = analyzer

    async def create_extractor(
        self,
        files_by_extension: dict[str, list[Path]],
        repo_path: Path,
        config: DepscopeConfig,
    ) -> JavaExtractor:
        roots = discover_manifest_roots(repo_path, "pom.xml", _MANIFEST_SKIP_DIRS)
        group_ids = {root: read_group_id(root / "pom.xml") for root in roots}
        local_prefixes = frozenset(g for g in group_ids.values() if g)
        logger.debug("Java local prefixes: %s", sorted(local_prefixes))

        if config.java_tools:
            resolver = self.classpath_resolver or MavenClasspathResolver()
            analyzer = self.analyzer or JdepsAnalyzer(release=config.jdeps_release)
            indexes = await asyncio.gather(
                *(_index_project(root, group_ids[root], resolver, analyzer) for root in roots)
            )
        else:
            logger.info("Java tool invocation disabled; using import heuristics only")
            indexes = [{} for _ in roots]

        projects = {
            root: Project(
                root=root,
                manifest=root / "pom.xml",
                local_prefixes=local_prefixes,
                dependency_index=index,
            )
            for root, index in zip(roots, indexes)
        }
        return JavaExtractor(repo_path, projects, local_prefixes)


async def _index_project(
    root: Path,
    group_id: str | None,
    resolver: ClasspathResolver,
    analyzer: DependencyAnalyzer,
) -> dict[str, ClassOrigin]:
    try:
        return await build_class_index(root, group_id, resolver, analyzer)
    except Exception as e:
        # ToolError from mvn/jdeps, ParseError or AttributeError from jgo
        logger.warning("Failed to process dependencies for %s: %s", root, e)
    return {}
