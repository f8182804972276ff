"""End-to-end tests over throw-away polyglot repositories."""

import json
import logging
from xml.etree.ElementTree import ParseError

import pytest

from depscope.cli import main
from depscope.config import DepscopeConfig
from depscope.errors import ConfigError, ToolError
from depscope.extractors.java import JavaPlugin
from depscope.extractors.javascript import JavaScriptPlugin
from depscope.extractors.javascript.resolver import UNRESOLVED_LIBRARY
from depscope.model import ResolutionKind
from depscope.pipeline import extract, run

PACKAGE_LOCK = {
    "name": "web",
    "lockfileVersion": 3,
    "packages": {
        "": {"name": "web"},
        "node_modules/lodash": {"version": "4.17.21"},
        "node_modules/ramda": {"version": "0.29.1"},
    },
}

APP_TS = """\
import { map } from 'lodash/fp';
import * as R from 'ramda';
import fs from 'node:fs';
import path from 'path';
import store from '@app/store';
import { helper } from './helper';
import axios from 'axios';
"""

APP_JAVA = """\
package com.acme;

import com.acme.util.Helpers;
import com.google.common.base.Strings;
import java.util.List;
import static org.junit.jupiter.api.Assertions.*;

public class App {}
"""

POM = """<project>
  <parent><groupId>org.springframework.boot</groupId></parent>
  <groupId>com.acme</groupId>
  <artifactId>core</artifactId>
</project>
"""

JDEPS_LINES = [
    "core-1.0.jar -> java.base",
    "   com.acme.App    -> com.google.common.base.Strings    guava-33.0.0-jre.jar",
    "   com.acme.App    -> java.lang.Object                  java.base",
]


class FakeResolver:
    async def resolve_classpath(self, project_dir):
        return "/m2/guava-33.0.0-jre.jar"


class FakeAnalyzer:
    def __init__(self):
        self.calls = 0

    async def analyze(self, project_dir, classpath, target):
        self.calls += 1
        return list(JDEPS_LINES)


class ExplodingAnalyzer:
    async def analyze(self, project_dir, classpath, target):
        raise AssertionError("java tools must not run")


class FailingResolver:
    """Raises *error* for the project named "bad"."""

    def __init__(self, error):
        self.error = error

    async def resolve_classpath(self, project_dir):
        if project_dir.name == "bad":
            raise self.error
        return "/m2/guava-33.0.0-jre.jar"


class FailingAnalyzer(FakeAnalyzer):
    def __init__(self, error):
        super().__init__()
        self.error = error

    async def analyze(self, project_dir, classpath, target):
        if project_dir.name == "bad":
            raise self.error
        return await super().analyze(project_dir, classpath, target)


@pytest.fixture
def repo(make_tree):
    root = make_tree(
        {
            "repo/web/package.json": '{"name": "web"}',
            "repo/web/package-lock.json": json.dumps(PACKAGE_LOCK),
            "repo/web/tsconfig.json": '{"compilerOptions": {"paths": {"@app/*": ["src/*"]}}}',
            "repo/web/src/app.ts": APP_TS,
            "repo/web/src/app.test.ts": "import { expect } from 'vitest';\n",
            "repo/web/src/helper.js": "const _ = require('lodash');\nmodule.exports = _;\n",
            "repo/core/pom.xml": POM,
            "repo/core/target/core-1.0.jar": b"",
            "repo/core/src/main/java/com/acme/App.java": APP_JAVA,
            "repo/core/src/test/java/com/acme/AppTest.java": "import org.mockito.Mockito;\n",
            "repo/scripts/tool.py": "import os\n",
        }
    )
    return root / "repo"


def _plugins(analyzer=None):
    return [
        JavaScriptPlugin(),
        JavaPlugin(classpath_resolver=FakeResolver(), analyzer=analyzer or FakeAnalyzer()),
    ]


class TestExtract:
    """Tests for the engine over a mixed JS/TS + Maven repository."""

    def test_statements(self, repo):
        statements = extract(repo, plugins=_plugins())

        summary = [(s.file, s.library, s.imported_entity, s.modifiers) for s in statements]
        assert summary == [
            ("web/src/app.ts", "lodash@4.17.21", "map", []),
            ("web/src/app.ts", "ramda@0.29.1", "* as R", ["wildcard", "alias"]),
            ("web/src/app.ts", UNRESOLVED_LIBRARY, "axios", []),
            ("web/src/helper.js", "lodash@4.17.21", "", []),
            ("core/src/main/java/com/acme/App.java", "guava@33.0.0-jre", "Strings", []),
            (
                "core/src/main/java/com/acme/App.java",
                "org.junit.jupiter.api",
                "Assertions.*",
                ["static", "wildcard"],
            ),
        ]

    def test_project_paths_and_languages(self, repo):
        statements = extract(repo, plugins=_plugins())
        by_file = {s.file: s for s in statements}

        assert by_file["web/src/app.ts"].project_path == str(repo / "web")
        assert by_file["web/src/app.ts"].language == "TypeScript"
        assert by_file["web/src/helper.js"].language == "JavaScript"
        java = by_file["core/src/main/java/com/acme/App.java"]
        assert java.project_path == str(repo / "core")
        assert java.language == "Java"

    def test_resolution_tags(self, repo):
        kinds = [s.resolution for s in extract(repo, plugins=_plugins())]
        assert kinds == [
            ResolutionKind.INDEX,
            ResolutionKind.INDEX,
            ResolutionKind.UNRESOLVED,
            ResolutionKind.INDEX,
            ResolutionKind.INDEX,
            ResolutionKind.HEURISTIC,
        ]

    def test_library_never_empty(self, repo):
        assert all(s.library for s in extract(repo, plugins=_plugins()))

    def test_full_import_is_verbatim(self, repo):
        statements = extract(repo, plugins=_plugins())
        assert statements[1].full_import == "import * as R from 'ramda';"
        assert statements[-1].full_import == "import static org.junit.jupiter.api.Assertions.*;"

    def test_java_tools_disabled(self, repo):
        config = DepscopeConfig(java_tools=False)
        statements = extract(repo, config=config, plugins=_plugins(ExplodingAnalyzer()))

        java = [s for s in statements if s.language == "Java"]
        assert [s.library for s in java] == ["com.google.common.base", "org.junit.jupiter.api"]
        assert all(s.resolution is ResolutionKind.HEURISTIC for s in java)

    def test_ownerless_java_file_is_unresolved(self, make_tree):
        """Without an owning pom.xml the guess is kept but tagged unresolved."""
        repo = make_tree({"loose/Main.java": "import com.google.gson.Gson;\n"})
        analyzer = FakeAnalyzer()

        (statement,) = extract(repo, plugins=_plugins(analyzer))

        assert statement.library == "com.google.gson"
        assert statement.project_path is None
        assert statement.resolution is ResolutionKind.UNRESOLVED
        assert analyzer.calls == 0

    def test_unhandled_extensions_logged(self, repo, caplog):
        with caplog.at_level(logging.INFO, logger="depscope"):
            extract(repo, plugins=_plugins())
        assert "Unhandled extensions found: .py (1)" in caplog.text

    def test_missing_repo(self, tmp_path):
        with pytest.raises(ConfigError):
            extract(tmp_path / "nope")

    def test_repo_is_a_file(self, tmp_path):
        target = tmp_path / "file.txt"
        target.write_text("x")
        with pytest.raises(ConfigError):
            extract(target)


@pytest.fixture
def two_projects(make_tree):
    root = make_tree(
        {
            "repo/bad/pom.xml": "<project><groupId>com.bad",
            "repo/bad/target/bad-1.0.jar": b"",
            "repo/bad/src/main/java/com/bad/Bad.java": "import org.slf4j.Logger;\n",
            "repo/good/pom.xml": POM,
            "repo/good/target/good-1.0.jar": b"",
            "repo/good/src/main/java/com/acme/App.java": APP_JAVA,
        }
    )
    return root / "repo"


FAILURES = [
    ParseError("no element found: line 1, column 26"),
    AttributeError("'NoneType' object has no attribute 'text'"),
    RuntimeError("unexpected"),
    ToolError(["mvn", "dependency:build-classpath"], 1, "BUILD FAILURE"),
]


class TestProjectIsolation:
    """One failing Maven project must not cost the others their index."""

    def _good_statement(self, statements):
        (statement,) = [s for s in statements if s.imported_entity == "Strings"]
        return statement

    @pytest.mark.parametrize("error", FAILURES, ids=lambda e: type(e).__name__)
    def test_resolver_failure(self, two_projects, error, caplog):
        plugins = [JavaPlugin(classpath_resolver=FailingResolver(error), analyzer=FakeAnalyzer())]

        with caplog.at_level(logging.WARNING, logger="depscope"):
            statements = extract(two_projects, plugins=plugins)

        statement = self._good_statement(statements)
        assert statement.library == "guava@33.0.0-jre"
        assert statement.resolution is ResolutionKind.INDEX
        assert statement.project_path == str(two_projects / "good")
        assert "Failed to process dependencies for" in caplog.text

        (bad,) = [s for s in statements if s.file.startswith("bad/")]
        assert bad.library == "org.slf4j"
        assert bad.resolution is ResolutionKind.HEURISTIC

    @pytest.mark.parametrize("error", FAILURES, ids=lambda e: type(e).__name__)
    def test_analyzer_failure(self, two_projects, error):
        analyzer = FailingAnalyzer(error)
        plugins = [JavaPlugin(classpath_resolver=FakeResolver(), analyzer=analyzer)]

        statement = self._good_statement(extract(two_projects, plugins=plugins))

        assert statement.library == "guava@33.0.0-jre"
        assert statement.resolution is ResolutionKind.INDEX
        assert analyzer.calls == 1


class TestRun:
    """Tests for run() and the CLI."""

    def test_idempotent_output(self, repo, tmp_path):
        first = run(repo, output=tmp_path / "first.json", plugins=_plugins())
        second = run(repo, output=tmp_path / "second.json", plugins=_plugins())
        assert first.read_bytes() == second.read_bytes()

    def test_csv_from_suffix(self, repo, tmp_path):
        out = run(repo, output=tmp_path / "imports.csv", plugins=_plugins())
        assert out.read_text(encoding="utf-8").startswith("file,projectPath,importedEntity")

    def test_with_resolution(self, repo, tmp_path):
        out = run(repo, output=tmp_path / "x.json", with_resolution=True, plugins=_plugins())
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data[2]["resolution"] == "unresolved"

    def test_bad_format(self, repo, tmp_path):
        with pytest.raises(ConfigError):
            run(repo, output=tmp_path / "x.json", fmt="xml", plugins=_plugins())

    def test_default_output_in_cwd(self, repo, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        out = run(repo, plugins=_plugins())
        assert out.resolve() == (tmp_path / "extracted-imports.json").resolve()
        assert out.exists()

    def test_cli(self, repo, tmp_path):
        out = tmp_path / "cli.json"
        main([str(repo), "-o", str(out), "--no-java-tools"])

        data = json.loads(out.read_text(encoding="utf-8"))
        assert {d["library"] for d in data} >= {"lodash@4.17.21", "org.junit.jupiter.api"}

    def test_cli_missing_repo_exits_1(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "missing")])
        assert exc_info.value.code == 1
