"""Shared test fixtures."""

from pathlib import Path

import pytest

from content_tree.core.tree.content_tree import ContentTree
from tests.unit.fakes import FakeProvider

DOCS_SOURCE = {
    "docs/index.md": "---\ntitle: Docs\nweight: 5\n---\n# Docs home\n",
    "docs/guide.md": "---\nweight: 10\n---\n# Guide\n\nSee [the tutorial](./tutorial.md).\n",
    "docs/tutorial.md": "---\nweight: 20\n---\n# Tutorial\n\n![Diagram](./img/diagram.png)\n",
    "docs/tutorial.fr.md": "# Tutoriel\n",
    "api/reference.md": "# API Reference\n",
    "intro.md": "---\nweight: 1\n---\n# Introduction\n",
}


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider(DOCS_SOURCE)


@pytest.fixture
def docs_tree(provider: FakeProvider) -> ContentTree:
    """Return an English tree loaded from DOCS_SOURCE."""
    tree = ContentTree(provider)
    tree.load()
    return tree


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Write a small content project to disk and return its directory."""
    root = tmp_path / "content"
    (root / "docs" / "img").mkdir(parents=True)
    (root / "docs" / "index.md").write_text("# Docs\n\nRead the [guide](./guide.md).\n")
    (root / "docs" / "guide.md").write_text(
        "---\nweight: 2\n---\n\n# Guide\n\n![Logo](./img/logo.png)\n\nBack to [docs](/docs/).\n"
    )
    (root / "docs" / "guide.fr.md").write_text("# Guide FR\n")
    (root / "docs" / "img" / "logo.png").write_bytes(b"\x89PNG")
    return root
