"""Document store reading and writing markdown files under a root directory."""

import fnmatch
from pathlib import Path

from loguru import logger

from content_tree.errors import ProviderError

DEFAULT_PATTERNS: tuple[str, ...] = ("**/*.md",)
DEFAULT_EXCLUDES: tuple[str, ...] = (".git", "node_modules")


def _read_gitignore(root: Path) -> list[str]:
    """Return the non-comment patterns of the root ``.gitignore``."""
    gitignore = root / ".gitignore"
    if not gitignore.is_file():
        return []
    patterns = []
    for line in gitignore.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith(("#", "!")):
            patterns.append(line)
    return patterns


def _is_ignored(relative: str, patterns: list[str]) -> bool:
    parts = relative.split("/")
    for pattern in patterns:
        anchored = pattern.startswith("/")
        pattern = pattern.strip("/")
        if not pattern:
            continue
        if "/" in pattern or anchored:
            if fnmatch.fnmatch(relative, pattern) or relative.startswith(pattern + "/"):
                return True
        elif any(fnmatch.fnmatch(part, pattern) for part in parts):
            return True
    return False


class FileSystemProvider:
    """Markdown files below ``root``, addressed by POSIX paths relative to it."""

    def __init__(
        self,
        root: Path,
        *,
        patterns: tuple[str, ...] = DEFAULT_PATTERNS,
        exclude: tuple[str, ...] = DEFAULT_EXCLUDES,
    ) -> None:
        self.root = Path(root)
        self.patterns = patterns
        self.exclude = exclude

    def _path(self, path: str) -> Path:
        return self.root / path.lstrip("/")

    def list_paths(self) -> list[str]:
        """Return matching file paths relative to the root, sorted."""
        ignore = list(self.exclude) + _read_gitignore(self.root)
        found: set[str] = set()
        for pattern in self.patterns:
            for path in self.root.glob(pattern):
                if not path.is_file():
                    continue
                relative = path.relative_to(self.root).as_posix()
                if not _is_ignored(relative, ignore):
                    found.add(relative)
        return sorted(found)

    def load_content(self) -> list[tuple[str, str]]:
        if not self.root.is_dir():
            msg = f"Failed to load content from {self.root}: not a directory"
            raise ProviderError(msg)
        documents = []
        for relative in self.list_paths():
            try:
                documents.append((relative, self._path(relative).read_text(encoding="utf-8")))
            except (OSError, UnicodeDecodeError) as e:
                msg = f"Failed to read content at {relative}: {e}"
                raise ProviderError(msg) from e
        logger.debug("Read {} files from {}", len(documents), self.root)
        return documents

    def _write(self, operation: str, path: str, content: str) -> None:
        target = self._path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        except OSError as e:
            msg = f"Failed to {operation} content at {path}: {e}"
            raise ProviderError(msg) from e

    def write_content(self, path: str, content: str) -> None:
        self._write("write", path, content)

    def update_content(self, path: str, content: str) -> None:
        self._write("update", path, content)

    def delete_content(self, path: str) -> None:
        try:
            self._path(path).unlink()
        except OSError as e:
            msg = f"Failed to delete content at {path}: {e}"
            raise ProviderError(msg) from e
