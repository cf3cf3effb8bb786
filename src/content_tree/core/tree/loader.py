"""Build content trees from directories on disk."""

from pathlib import Path

from loguru import logger

from content_tree.config import DEFAULT_LANGUAGE
from content_tree.core.providers.filesystem import FileSystemProvider
from content_tree.core.tree.content_tree import ContentTree


def build_content_tree(
    content_dir: Path,
    *,
    language: str = DEFAULT_LANGUAGE,
    default_language: str = DEFAULT_LANGUAGE,
) -> ContentTree:
    """Load every markdown file under ``content_dir`` into a tree for one language.

    Args:
        content_dir: Directory holding the markdown sources.
        language: Language the tree is scoped to.
        default_language: Language assumed for files without a language tag.

    Returns:
        A tree backed by a file system provider rooted at ``content_dir``.
    """
    tree = ContentTree(
        FileSystemProvider(content_dir),
        language=language,
        default_language=default_language,
    )
    accepted, rejected = tree.load()
    logger.info("Loaded {} documents from {} ({} in other languages)", accepted, content_dir, rejected)
    return tree
