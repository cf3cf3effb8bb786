"""Protocols for dependency injection in the content tree."""

from typing import Protocol, runtime_checkable

from content_tree.models.node import ProbeResult


@runtime_checkable
class ContentProvider(Protocol):
    """Protocol for document stores backing a content tree."""

    def load_content(self) -> list[tuple[str, str]]:
        """Return every document as a (path, text) pair."""
        ...

    def write_content(self, path: str, content: str) -> None:
        """Create a new document."""
        ...

    def update_content(self, path: str, content: str) -> None:
        """Overwrite an existing document."""
        ...

    def delete_content(self, path: str) -> None:
        """Delete a document."""
        ...


@runtime_checkable
class ExistenceProbe(Protocol):
    """Protocol answering whether a physical path exists."""

    def exists(self, path: str) -> bool:
        """Return True if the path exists."""
        ...


@runtime_checkable
class UrlProbe(Protocol):
    """Protocol for checking whether a remote URL is reachable."""

    def head(self, url: str, timeout_ms: int) -> ProbeResult:
        """Issue a HEAD request bounded by a timeout in milliseconds."""
        ...


@runtime_checkable
class Linter(Protocol):
    """Protocol for markdown content-quality linters."""

    def lint(self, file_path: str, content: str) -> list[tuple[int, str, str]]:
        """Return (line, rule, description) tuples for each violation."""
        ...
