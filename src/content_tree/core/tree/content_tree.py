"""In-memory tree of single-language markdown documents."""

import posixpath

from loguru import logger

from content_tree.config import DEFAULT_LANGUAGE, DEFAULT_WEIGHT, INDEX_WEIGHT
from content_tree.core.tree.metadata import parse_markdown_content
from content_tree.core.tree.paths import extract_file_info, join_logical, normalize_directory
from content_tree.core.tree.resolver import resolve_link
from content_tree.errors import NodeNotFoundError, StructuralError
from content_tree.models.node import ContentNode, FileInfo, ParsedContent
from content_tree.protocols import ContentProvider


class ContentTree:
    """A tree of documents for one target language, keyed by logical path.

    Documents are added incrementally; missing ancestor directories are
    synthesized and children stay sorted by weight after every change.
    Mutations must be serialized by the caller.
    """

    def __init__(
        self,
        provider: ContentProvider,
        *,
        language: str = DEFAULT_LANGUAGE,
        default_language: str = DEFAULT_LANGUAGE,
        include_language_suffix: bool = True,
    ) -> None:
        self.provider = provider
        self.language = language
        self.default_language = default_language
        self.include_language_suffix = include_language_suffix

        self._root = ContentNode(name=".", path="", is_directory=True, weight=0, file_path="")
        self._nodes: dict[str, ContentNode] = {"": self._root}

    # --- Construction ---

    def load(self) -> tuple[int, int]:
        """Ingest every document from the provider.

        Returns:
            (accepted, rejected) document counts.
        """
        accepted = rejected = 0
        for file_path, content in self.provider.load_content():
            if self.add(file_path, content) is None:
                rejected += 1
            else:
                accepted += 1
        logger.debug("Loaded {} documents, skipped {} in other languages", accepted, rejected)
        return accepted, rejected

    def add(self, file_path: str, content: str) -> ContentNode | None:
        """Add a document, or return None if it is not in the tree's language."""
        info = extract_file_info(file_path, self.default_language)
        if info.language != self.language:
            logger.debug("Skipping {} (language {} != {})", file_path, info.language, self.language)
            return None
        return self._do_add(info, content)

    def force_add(self, file_path: str, content: str) -> ContentNode:
        """Add a document regardless of its language."""
        return self._do_add(extract_file_info(file_path, self.default_language), content)

    def create(self, logical_path: str, content: str) -> ContentNode:
        """Add a new document at a logical path and write it through the provider."""
        suffix = f".{self.language}" if self.include_language_suffix else ""
        file_path = f"{logical_path}{suffix}.md"
        node = self._do_add(extract_file_info(file_path, self.default_language), content)
        self.provider.write_content(node.file_path, content)
        return node

    def _do_add(self, info: FileInfo, content: str) -> ContentNode:
        parsed = parse_markdown_content(content)
        parent = self._ensure_directory(info.directory)
        logical_path = join_logical(info.directory, info.base_name)

        node = self._nodes.get(logical_path)
        if node is None:
            node = ContentNode(
                name=info.base_name,
                path=logical_path,
                is_directory=False,
                weight=DEFAULT_WEIGHT,
                file_path=info.file_path,
            )
            self._nodes[logical_path] = node
            node.parent = parent
            parent.children.append(node)
        else:
            # A document replaces the previous document, or fills in a synthesized directory.
            node.is_directory = False
            node.file_path = info.file_path

        node.language = info.language
        self._apply(node, parsed, is_index=info.is_index_file)
        return node

    def _ensure_directory(self, directory: str) -> ContentNode:
        """Return the node for a directory path, synthesizing missing ancestors."""
        directory = normalize_directory(directory)
        existing = self._nodes.get(directory)
        if existing is not None:
            return existing

        parent = self._ensure_directory(posixpath.dirname(directory))
        node = ContentNode(
            name=posixpath.basename(directory),
            path=directory,
            is_directory=True,
            weight=DEFAULT_WEIGHT,
            file_path=directory,
            parent=parent,
        )
        parent.children.append(node)
        self._sort_children(parent)
        self._nodes[directory] = node
        return node

    def _apply(self, node: ContentNode, parsed: ParsedContent, *, is_index: bool) -> None:
        """Copy parsed metadata onto a node and restore sibling ordering."""
        node.content = parsed.content
        node.frontmatter = parsed.frontmatter
        node.hash = parsed.hash
        node.images = parsed.images
        node.code_blocks = parsed.code_blocks
        node.links = parsed.links
        node.weight = INDEX_WEIGHT if is_index else parsed.weight

        parent = node.parent
        if parent is None:
            return
        self._sort_children(parent)
        if is_index and parsed.weight < parent.weight:
            parent.weight = parsed.weight
            if parent.parent is not None:
                self._sort_children(parent.parent)

    @staticmethod
    def _sort_children(node: ContentNode) -> None:
        node.children.sort(key=lambda child: child.weight)

    # --- Queries ---

    def get_root(self) -> ContentNode:
        return self._root

    def get_node(self, path: str) -> ContentNode | None:
        return self._nodes.get(path)

    def require_node(self, path: str) -> ContentNode:
        """Return the node at a logical path, raising if the tree does not contain it."""
        node = self._nodes.get(path)
        if node is None:
            msg = f"Node not found: {path}"
            raise NodeNotFoundError(msg)
        return node

    def get_nodes(self) -> list[ContentNode]:
        return list(self._nodes.values())

    def get_content(self) -> list[ContentNode]:
        """Return every document node in insertion order."""
        return [n for n in self._nodes.values() if not n.is_directory and n.content is not None]

    def get_siblings(self, node: ContentNode) -> list[ContentNode]:
        """Return the document children of the node's parent (the node included)."""
        if node.parent is None:
            return []
        return node.parent.document_children()

    def get_flattened_tree(self, start_at: str | None = None) -> list[ContentNode]:
        """Return document nodes in reading order (depth-first, weight-ordered).

        Args:
            start_at: Logical path to start from; the root when omitted.

        Returns:
            Document nodes only; directories are traversed but not emitted.
        """
        start = self._root if start_at is None else self.require_node(start_at)
        result: list[ContentNode] = []
        stack = [start]
        while stack:
            node = stack.pop()
            if not node.is_directory:
                result.append(node)
            stack.extend(reversed(node.children))
        return result

    def resolve_link(self, reference: str, from_path: str) -> ContentNode | None:
        """Resolve a link or image reference made from the node at ``from_path``."""
        return resolve_link(self, reference, from_path)

    # --- Mutations ---

    def update_content(self, node: ContentNode, content: str) -> None:
        """Replace a document's text, re-deriving metadata, and write it through the provider."""
        if node.is_directory:
            msg = f"Cannot update content of directory: {node.path}"
            raise StructuralError(msg)

        info = extract_file_info(node.file_path, self.default_language)
        self._apply(node, parse_markdown_content(content), is_index=info.is_index_file)
        self.provider.update_content(node.file_path, content)

    def delete(self, path: str) -> bool:
        """Delete a document or empty directory.

        Returns:
            False if nothing exists at ``path``, True once the node is removed.

        Raises:
            StructuralError: For the root or a directory that still has children.
        """
        node = self._nodes.get(path)
        if node is None:
            return False
        if node is self._root:
            msg = "Cannot delete root node"
            raise StructuralError(msg)
        if node.children:
            msg = f"Cannot delete non-empty directory: {path}"
            raise StructuralError(msg)

        if node.parent is not None:
            node.parent.children.remove(node)
        del self._nodes[path]
        if not node.is_directory:
            self.provider.delete_content(node.file_path)
        node.parent = None
        return True

    # --- Rendering ---

    def get_tree_map(self, *, include_images: bool = False) -> str:
        """Render the tree as a connector diagram with one line per document."""
        return self._build_tree_map(self._root, True, "", include_images)

    def _build_tree_map(self, node: ContentNode, is_last: bool, indent: str, include_images: bool) -> str:
        prefix = f"{indent}{'└── ' if is_last else '├── '}"
        child_indent = f"{indent}{' ' if is_last else '│'}   "

        if not node.is_directory:
            if node.content is None:
                return ""
            output = f"{prefix}{posixpath.basename(node.file_path)} (title: {node.title or ''})\n"
            if include_images:
                for i, image in enumerate(node.images):
                    connector = "└── " if i == len(node.images) - 1 else "├── "
                    output += f"{child_indent}{connector}[image] {image.path}\n"
            return output

        output = ""
        for i, child in enumerate(node.children):
            output += self._build_tree_map(child, i == len(node.children) - 1, child_indent, include_images)
        if output:
            output = f"{prefix}{node.name}\n{output}"
        return output

    def format_tree(self) -> list[str]:
        """Return a debug listing with one line per node."""
        lines: list[str] = []

        def visit(node: ContentNode, level: int) -> None:
            kind = "[DIR]" if node.is_directory else "[FILE]"
            language = f"[{node.language}]" if node.language else ""
            lines.append(f"{'  ' * level}{kind} {node.name} {language} (weight: {node.weight})")
            for child in node.children:
                visit(child, level + 1)

        visit(self._root, 0)
        return lines

    def print_tree(self) -> None:
        for line in self.format_tree():
            logger.info(line)
