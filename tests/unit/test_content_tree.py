"""Tests for content tree construction, ordering and mutation."""

import itertools

import pytest
from loguru import logger

from content_tree.core.tree.content_tree import ContentTree
from content_tree.errors import NodeNotFoundError, StructuralError
from tests.unit.fakes import FakeProvider


def _paths(nodes: list) -> list[str]:
    return [n.path for n in nodes]


def test_add_rejects_other_languages() -> None:
    tree = ContentTree(FakeProvider())
    en = tree.add("a.en.md", "# A\n")
    fr = tree.add("a.fr.md", "# A FR\n")

    assert fr is None
    assert en is not None
    assert en.language == "en"
    assert tree.get_node("a") is en
    assert len(tree.get_content()) == 1


def test_add_uses_default_language_for_untagged_files() -> None:
    tree = ContentTree(FakeProvider(), language="de", default_language="de")
    node = tree.add("docs/guide.md", "# Anleitung\n")

    assert node is not None
    assert node.language == "de"
    assert tree.add("docs/guide.en.md", "# Guide\n") is None


def test_force_add_bypasses_language_filter() -> None:
    tree = ContentTree(FakeProvider())
    node = tree.force_add("style/guide.fr.md", "# Guide de style\n")

    assert node.language == "fr"
    assert tree.get_node("style/guide") is node


def test_root_node_shape() -> None:
    tree = ContentTree(FakeProvider())
    root = tree.get_root()

    assert root.path == ""
    assert root.name == "."
    assert root.is_directory
    assert root.weight == 0
    assert tree.get_node("") is root


def test_intermediate_directories_are_synthesized() -> None:
    tree = ContentTree(FakeProvider())
    node = tree.add("/docs/advanced/secrets/managing.md", "# Managing\n")

    assert node is not None
    assert node.path == "docs/advanced/secrets/managing"
    for path in ("docs", "docs/advanced", "docs/advanced/secrets"):
        directory = tree.get_node(path)
        assert directory is not None
        assert directory.is_directory
        assert directory.content is None
        assert directory.weight == 999
    assert node.parent is tree.get_node("docs/advanced/secrets")


def test_children_are_sorted_by_weight_in_any_insertion_order() -> None:
    docs = {
        "b.md": "---\nweight: 2\n---\n",
        "a.md": "---\nweight: 1\n---\n",
        "c.md": "# No weight\n",
        "index.md": "---\nweight: 50\n---\n",
    }
    for order in itertools.permutations(docs):
        tree = ContentTree(FakeProvider())
        for name in order:
            tree.add(name, docs[name])
        children = tree.get_root().children
        assert [c.name for c in children] == ["index", "a", "b", "c"]
        weights = [c.weight for c in children]
        assert weights == sorted(weights)


def test_equal_weights_keep_insertion_order() -> None:
    tree = ContentTree(FakeProvider())
    for name in ("zeta.md", "alpha.md", "mid.md"):
        tree.add(name, "# Same weight\n")

    assert [c.name for c in tree.get_root().children] == ["zeta", "alpha", "mid"]


def test_sidebar_position_is_used_when_weight_missing() -> None:
    tree = ContentTree(FakeProvider())
    tree.add("late.md", "---\nsidebar_position: 3\n---\n")
    tree.add("early.md", "---\nsidebar_position: 1\n---\n")

    assert [c.name for c in tree.get_root().children] == ["early", "late"]


@pytest.mark.parametrize("index_first", [True, False])
def test_index_weight_propagates_to_parent(index_first: bool) -> None:
    docs = [
        ("docs/index.md", "---\nweight: 5\n---\n# Docs\n"),
        ("docs/guide.md", "---\nweight: 10\n---\n# Guide\n"),
    ]
    tree = ContentTree(FakeProvider())
    for path, text in docs if index_first else reversed(docs):
        tree.add(path, text)

    directory = tree.get_node("docs")
    assert directory is not None
    assert directory.weight == 5
    assert [c.name for c in directory.children] == ["index", "guide"]
    assert directory.children[0].weight == -1


def test_index_weight_resorts_grandparent() -> None:
    tree = ContentTree(FakeProvider())
    tree.add("first.md", "---\nweight: 3\n---\n")
    tree.add("docs/page.md", "# Page\n")
    assert [c.name for c in tree.get_root().children] == ["first", "docs"]

    tree.add("docs/_index.md", "---\nweight: 1\n---\n")

    assert [c.name for c in tree.get_root().children] == ["docs", "first"]


def test_index_without_lower_weight_leaves_parent_alone(docs_tree: ContentTree) -> None:
    docs_tree.add("api/index.md", "# API\n")
    api = docs_tree.get_node("api")
    assert api is not None
    assert api.weight == 999


def test_reingesting_a_path_replaces_the_node() -> None:
    tree = ContentTree(FakeProvider())
    first = tree.add("page.md", "# One\n")
    second = tree.add("page.md", "# Two\n")

    assert first is second
    assert len(tree.get_root().children) == 1
    assert second is not None
    assert second.frontmatter["title"] == "Two"


def test_flattened_tree_is_reading_order(docs_tree: ContentTree) -> None:
    assert _paths(docs_tree.get_flattened_tree()) == [
        "intro",
        "docs/index",
        "docs/guide",
        "docs/tutorial",
        "api/reference",
    ]


def test_flattened_tree_is_repeatable(docs_tree: ContentTree) -> None:
    assert docs_tree.get_flattened_tree() == docs_tree.get_flattened_tree()


def test_flattened_tree_from_start_path(docs_tree: ContentTree) -> None:
    assert _paths(docs_tree.get_flattened_tree("docs")) == ["docs/index", "docs/guide", "docs/tutorial"]


def test_flattened_tree_unknown_start_raises(docs_tree: ContentTree) -> None:
    with pytest.raises(NodeNotFoundError, match="Node not found: missing"):
        docs_tree.get_flattened_tree("missing")


def test_require_node_raises_for_missing_path(docs_tree: ContentTree) -> None:
    assert docs_tree.require_node("docs/guide").name == "guide"
    with pytest.raises(NodeNotFoundError):
        docs_tree.require_node("docs/nope")


def test_get_siblings_excludes_directories(docs_tree: ContentTree) -> None:
    intro = docs_tree.get_node("intro")
    guide = docs_tree.get_node("docs/guide")
    assert intro is not None
    assert guide is not None

    assert _paths(docs_tree.get_siblings(intro)) == ["intro"]
    assert _paths(docs_tree.get_siblings(guide)) == ["docs/index", "docs/guide", "docs/tutorial"]
    assert docs_tree.get_siblings(docs_tree.get_root()) == []


def test_get_content_returns_documents_only(docs_tree: ContentTree) -> None:
    content = docs_tree.get_content()
    assert all(not n.is_directory for n in content)
    assert len(content) == 5
    assert len(docs_tree.get_nodes()) == 8  # root, docs, api and five documents


def test_node_fields_are_populated(docs_tree: ContentTree) -> None:
    node = docs_tree.get_node("docs/tutorial")
    assert node is not None
    assert node.file_path == "docs/tutorial.md"
    assert node.frontmatter == {"weight": 20, "title": "Tutorial"}
    assert node.hash is not None and len(node.hash) == 32
    assert [i.path for i in node.images] == ["./img/diagram.png"]


def test_update_content_resorts_when_weight_changes(provider: FakeProvider, docs_tree: ContentTree) -> None:
    guide = docs_tree.get_node("docs/guide")
    assert guide is not None
    old_hash = guide.hash

    docs_tree.update_content(guide, "---\nweight: 30\n---\n# Guide v2\n")

    docs = docs_tree.get_node("docs")
    assert docs is not None
    assert [c.name for c in docs.children] == ["index", "tutorial", "guide"]
    assert guide.weight == 30
    assert guide.hash != old_hash
    assert guide.frontmatter["title"] == "Guide v2"
    assert ("update", "docs/guide.md") in provider.calls
    assert provider.documents["docs/guide.md"].endswith("# Guide v2\n")


def test_update_index_keeps_index_first(docs_tree: ContentTree) -> None:
    index = docs_tree.get_node("docs/index")
    assert index is not None

    docs_tree.update_content(index, "---\nweight: 0\n---\n# Docs\n")

    docs = docs_tree.get_node("docs")
    assert docs is not None
    assert index.weight == -1
    assert docs.children[0] is index
    assert docs.weight == 0


def test_update_content_of_directory_raises(docs_tree: ContentTree) -> None:
    docs = docs_tree.get_node("docs")
    assert docs is not None
    with pytest.raises(StructuralError):
        docs_tree.update_content(docs, "# Nope\n")


def test_delete_leaf_document(provider: FakeProvider, docs_tree: ContentTree) -> None:
    node = docs_tree.get_node("docs/guide")
    assert node is not None

    assert docs_tree.delete("docs/guide") is True

    assert docs_tree.get_node("docs/guide") is None
    assert node.parent is None
    assert "docs/guide" not in _paths(docs_tree.get_flattened_tree())
    assert ("delete", "docs/guide.md") in provider.calls


def test_delete_missing_path_returns_false(docs_tree: ContentTree) -> None:
    assert docs_tree.delete("docs/missing") is False


def test_delete_non_empty_directory_raises_and_leaves_tree(docs_tree: ContentTree) -> None:
    before = _paths(docs_tree.get_flattened_tree())

    with pytest.raises(StructuralError, match="Cannot delete non-empty directory: docs"):
        docs_tree.delete("docs")

    assert _paths(docs_tree.get_flattened_tree()) == before
    assert docs_tree.get_node("docs") is not None


def test_delete_root_raises(docs_tree: ContentTree) -> None:
    with pytest.raises(StructuralError, match="Cannot delete root node"):
        docs_tree.delete("")


def test_delete_empty_directory(provider: FakeProvider, docs_tree: ContentTree) -> None:
    assert docs_tree.delete("api/reference") is True
    assert docs_tree.delete("api") is True
    assert docs_tree.get_node("api") is None
    assert [c for c in provider.calls if c[0] == "delete"] == [("delete", "api/reference.md")]


def test_create_writes_through_provider() -> None:
    provider = FakeProvider()
    tree = ContentTree(provider, language="fr")

    node = tree.create("docs/nouveau", "---\nweight: 15\n---\n# Nouveau\n")

    assert node.file_path == "docs/nouveau.fr.md"
    assert node.path == "docs/nouveau"
    assert provider.calls == [("write", "docs/nouveau.fr.md")]


def test_create_without_language_suffix() -> None:
    provider = FakeProvider()
    tree = ContentTree(provider, include_language_suffix=False)

    node = tree.create("notes", "# Notes\n")

    assert node.file_path == "notes.md"
    assert "notes.md" in provider.documents


def test_tree_map(docs_tree: ContentTree) -> None:
    expected = (
        "└── .\n"
        "    ├── intro.md (title: Introduction)\n"
        "    ├── docs\n"
        "    │   ├── index.md (title: Docs)\n"
        "    │   ├── guide.md (title: Guide)\n"
        "    │   └── tutorial.md (title: Tutorial)\n"
        "    └── api\n"
        "        └── reference.md (title: API Reference)\n"
    )
    assert docs_tree.get_tree_map() == expected


def test_tree_map_with_images() -> None:
    tree = ContentTree(FakeProvider())
    tree.add("page.md", "# Page\n\n![a](./a.png)\n\n![b](./b.png)\n")
    tree.add("zz.md", "# Last\n")

    assert tree.get_tree_map(include_images=True) == (
        "└── .\n"
        "    ├── page.md (title: Page)\n"
        "    │   ├── [image] ./a.png\n"
        "    │   └── [image] ./b.png\n"
        "    └── zz.md (title: Last)\n"
    )


def test_tree_map_of_empty_tree() -> None:
    assert ContentTree(FakeProvider()).get_tree_map() == ""


def test_format_tree_lists_every_node(docs_tree: ContentTree) -> None:
    lines = docs_tree.format_tree()
    assert lines[0] == "[DIR] .  (weight: 0)"
    assert "  [FILE] intro [en] (weight: 1)" in lines
    assert "  [DIR] docs  (weight: 5)" in lines
    assert "    [FILE] index [en] (weight: -1)" in lines
    assert len(lines) == 8


def test_load_counts_accepted_and_rejected(provider: FakeProvider) -> None:
    tree = ContentTree(provider)
    assert tree.load() == (5, 1)


def test_print_tree_logs_each_line(docs_tree: ContentTree) -> None:
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="INFO")
    try:
        docs_tree.print_tree()
    finally:
        logger.remove(handler_id)

    assert messages == docs_tree.format_tree()
