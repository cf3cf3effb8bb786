"""Domain models for the content tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ImageReference:
    """An image referenced from a document body."""

    path: str
    alt: str | None
    line: int
    remote: bool = False


@dataclass(frozen=True)
class CodeBlockReference:
    """A fenced code block in a document body."""

    language: str | None
    code: str
    line: int


@dataclass(frozen=True)
class LinkReference:
    """A hyperlink target in a document body."""

    url: str
    text: str
    line: int
    remote: bool = False


@dataclass(frozen=True)
class FileInfo:
    """Components of a document path."""

    file_path: str
    directory: str
    base_name: str
    language: str
    extension: str
    is_index_file: bool


@dataclass(frozen=True)
class ParsedContent:
    """Metadata derived from a document's raw text."""

    content: str
    frontmatter: dict[str, Any]
    weight: int | float
    hash: str
    images: tuple[ImageReference, ...] = ()
    code_blocks: tuple[CodeBlockReference, ...] = ()
    links: tuple[LinkReference, ...] = ()


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a remote reachability probe."""

    ok: bool
    status: int | None = None
    timed_out: bool = False


@dataclass(eq=False)
class ContentNode:
    """A directory or a single-language document in a content tree.

    Nodes compare by identity. ``parent`` is a plain back-reference and is
    left out of the repr.
    """

    name: str
    path: str
    is_directory: bool
    weight: int | float
    file_path: str
    children: list[ContentNode] = field(default_factory=list)
    parent: ContentNode | None = field(default=None, repr=False)
    content: str | None = None
    frontmatter: dict[str, Any] = field(default_factory=dict)
    language: str | None = None
    hash: str | None = None
    images: tuple[ImageReference, ...] = ()
    code_blocks: tuple[CodeBlockReference, ...] = ()
    links: tuple[LinkReference, ...] = ()

    @property
    def title(self) -> str | None:
        title = self.frontmatter.get("title")
        return str(title) if title is not None else None

    def document_children(self) -> list[ContentNode]:
        """Return the child nodes that are documents."""
        return [c for c in self.children if not c.is_directory]
