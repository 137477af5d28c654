"""Shared fixtures: a small built-SPA tree on disk and in memory."""

from datetime import UTC, datetime

import pytest

from spaserve.fs.directory import DirFileSystem
from spaserve.fs.memory import MemoryFileSystem

INDEX_HTML = "<!doctype html><title>App</title><div id=app></div>"
TEST_CSS = "body { color: red; }"
TEST_JS = "console.log('dir');"

MODIFIED = datetime(2024, 6, 15, 10, 0, 0, tzinfo=UTC)


@pytest.fixture
def site_dir(tmp_path):
    """Create a static tree: index, a stylesheet, and a nested script."""
    site = tmp_path / "site"
    site.mkdir()
    (site / "index.html").write_text(INDEX_HTML)
    (site / "test.css").write_text(TEST_CSS)
    sub = site / "dir"
    sub.mkdir()
    (sub / "test.js").write_text(TEST_JS)
    (sub / "index.html").write_text("<h1>Dir</h1>")
    return site


@pytest.fixture
def dir_fs(site_dir) -> DirFileSystem:
    return DirFileSystem(site_dir)


@pytest.fixture
def memory_fs() -> MemoryFileSystem:
    return MemoryFileSystem(
        {
            "/index.html": INDEX_HTML,
            "/test.css": TEST_CSS,
            "/dir/test.js": TEST_JS,
        },
        modified=MODIFIED,
    )
