"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest


@pytest.fixture
def make_tree(tmp_path):
    """Write a throw-away repository from a ``{relative path: content}`` mapping.

    Returns the resolved repository root.  ``None`` content creates a
    directory instead of a file.
    """

    def _make(files: dict) -> Path:
        root = tmp_path.resolve()
        for rel, content in files.items():
            path = root / rel
            if content is None:
                path.mkdir(parents=True, exist_ok=True)
                continue
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        return root

    return _make
