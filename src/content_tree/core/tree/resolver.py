"""Resolve link and image references to nodes of a content tree."""

from __future__ import annotations

import posixpath
from typing import TYPE_CHECKING
from urllib.parse import unquote

from content_tree.config import INDEX_NAMES, MARKDOWN_EXTENSIONS
from content_tree.core.tree.paths import is_remote, join_logical, strip_fragment, to_posix
from content_tree.languages import is_supported

if TYPE_CHECKING:
    from content_tree.core.tree.content_tree import ContentTree
    from content_tree.models.node import ContentNode


def _normalize(reference: str, from_path: str) -> str | None:
    """Turn a reference into a root-relative path, or None if it escapes the root."""
    if reference.startswith("/"):
        joined = reference.lstrip("/")
    else:
        joined = posixpath.join(posixpath.dirname(from_path), reference)
    if not joined:
        return ""
    normalized = posixpath.normpath(joined)
    if normalized == ".":
        return ""
    if normalized == ".." or normalized.startswith("../"):
        return None
    return normalized


def _strip_suffixes(path: str, tree: ContentTree) -> str:
    """Drop a markdown extension and then a trailing language tag.

    Without a markdown extension only the tree or default language counts as
    a tag, so ``run.pl`` keeps its extension while ``run.pl.md`` does not.
    """
    directory, name = posixpath.split(path)
    had_extension = False
    for extension in MARKDOWN_EXTENSIONS:
        if name.endswith(extension) and len(name) > len(extension):
            name = name[: -len(extension)]
            had_extension = True
            break
    stem, dot, tag = name.rpartition(".")
    if dot and stem and (tag in (tree.language, tree.default_language) or (had_extension and is_supported(tag))):
        name = stem
    return join_logical(directory, name)


def _index_of(tree: ContentTree, directory: str) -> ContentNode | None:
    for index_name in INDEX_NAMES:
        node = tree.get_node(join_logical(directory, index_name))
        if node is not None and not node.is_directory:
            return node
    return None


def resolve_link(tree: ContentTree, reference: str, from_path: str) -> ContentNode | None:
    """Resolve a reference against the tree without touching any file system.

    ``./tutorial``, ``./tutorial.md`` and ``./tutorial.en.md`` all name the
    same document. A reference to a directory (or ending in ``/``) resolves
    to that directory's index document.

    Args:
        tree: Tree to resolve against.
        reference: Raw link or image target, possibly with a ``#fragment``.
        from_path: Logical path of the referring document.

    Returns:
        The target document node, or None when the reference is remote,
        fragment-only or names nothing in the tree.
    """
    if is_remote(reference):
        return None
    target = unquote(strip_fragment(to_posix(reference.strip())))
    if not target:
        return None

    wants_directory = target.endswith("/")
    path = _normalize(target, from_path)
    if path is None:
        return None

    if wants_directory:
        return _index_of(tree, path)

    for candidate in dict.fromkeys((_strip_suffixes(path, tree), path)):
        node = tree.get_node(candidate)
        if node is None:
            continue
        if node.is_directory:
            return _index_of(tree, candidate)
        return node
    return None
