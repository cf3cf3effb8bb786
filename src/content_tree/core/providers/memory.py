"""Dict-backed document store."""

from content_tree.errors import ProviderError


class MemoryProvider:
    """In-memory document store keyed by path."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.documents: dict[str, str] = dict(initial or {})

    def load_content(self) -> list[tuple[str, str]]:
        return list(self.documents.items())

    def write_content(self, path: str, content: str) -> None:
        self.documents[path] = content

    def update_content(self, path: str, content: str) -> None:
        self.documents[path] = content

    def delete_content(self, path: str) -> None:
        if path not in self.documents:
            msg = f"Content not found: {path}"
            raise ProviderError(msg)
        del self.documents[path]

    def get(self, path: str) -> str | None:
        return self.documents.get(path)

    def has(self, path: str) -> bool:
        return path in self.documents

    def size(self) -> int:
        return len(self.documents)

    def clear(self) -> None:
        self.documents.clear()
