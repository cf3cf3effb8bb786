"""Multi-language markdown content tree with link resolution and content checks."""

from content_tree.core.check.checker import check_all, check_files, check_node
from content_tree.core.check.types import CheckIssue, CheckOptions, CheckResult
from content_tree.core.providers.filesystem import FileSystemProvider
from content_tree.core.providers.memory import MemoryProvider
from content_tree.core.tree.content_tree import ContentTree
from content_tree.core.tree.loader import build_content_tree
from content_tree.errors import NodeNotFoundError, StructuralError
from content_tree.models.node import ContentNode
from content_tree.protocols import ContentProvider

__all__ = [
    "CheckIssue",
    "CheckOptions",
    "CheckResult",
    "ContentNode",
    "ContentProvider",
    "ContentTree",
    "FileSystemProvider",
    "MemoryProvider",
    "NodeNotFoundError",
    "StructuralError",
    "build_content_tree",
    "check_all",
    "check_files",
    "check_node",
]
