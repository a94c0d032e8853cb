"""Shared fixtures for warble tests."""

import time
from pathlib import Path

import pytest
from support import CountingCompiler, set_mtime


@pytest.fixture
def styles(tmp_path: Path) -> Path:
    """Stylesheet tree: index.scss importing a partial, plus a broken entry.

    Every file starts an hour in the past so freshly compiled css is newer.
    """
    src = tmp_path / "styles"
    src.mkdir()
    (src / "_partial.scss").write_text("$accent: red;\n.partial { color: $accent; }\n")
    (src / "index.scss").write_text('@import "partial";\nbody { margin: 0; }\n')
    (src / "broken.scss").write_text("body {\n  color: $undefined;\n}\n")
    pages = src / "pages"
    pages.mkdir()
    (pages / "about.scss").write_text('@import "../partial";\n.about { padding: 1px; }\n')

    an_hour_ago = time.time() - 3600
    for path in src.rglob("*.scss"):
        set_mtime(path, an_hour_ago)
    return src


@pytest.fixture
def public(tmp_path: Path) -> Path:
    """Destination directory for compiled css (created on first write)."""
    return tmp_path / "public"


@pytest.fixture
def counting_compiler() -> CountingCompiler:
    return CountingCompiler()
