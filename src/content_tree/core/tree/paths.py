"""Path and language parsing for document paths."""

import posixpath
import re

from content_tree.config import DEFAULT_LANGUAGE, INDEX_NAMES
from content_tree.models.node import FileInfo

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


def to_posix(path: str) -> str:
    return path.replace("\\", "/")


def normalize_directory(directory: str) -> str:
    """Normalize a directory to the tree's key form ("" for the root)."""
    directory = to_posix(directory).strip("/")
    if not directory:
        return ""
    normalized = posixpath.normpath(directory)
    return "" if normalized in (".", "/") else normalized


def join_logical(directory: str, name: str) -> str:
    return f"{directory}/{name}" if directory else name


def extract_file_info(file_path: str, default_language: str = DEFAULT_LANGUAGE) -> FileInfo:
    """Split a document path into base name, language, directory and index flag.

    ``docs/guide.fr.md`` gives base name ``guide`` and language ``fr``;
    ``docs/guide.md`` falls back to ``default_language``.

    Args:
        file_path: Path as reported by the document store.
        default_language: Language used when the stem carries no language tag.

    Returns:
        The parsed file information. Any string is accepted.
    """
    posix_path = to_posix(file_path)
    directory = normalize_directory(posixpath.dirname(posix_path))
    file_name = posixpath.basename(posix_path)
    stem, extension = posixpath.splitext(file_name)
    if not stem:
        stem, extension = file_name, ""

    parts = stem.split(".")
    if len(parts) > 1:
        base_name = ".".join(parts[:-1])
        language = parts[-1]
    else:
        base_name = stem
        language = default_language

    return FileInfo(
        file_path=file_path,
        directory=directory,
        base_name=base_name,
        language=language,
        extension=extension,
        is_index_file=base_name in INDEX_NAMES,
    )


def is_remote(target: str) -> bool:
    """Return True for scheme-qualified or protocol-relative targets."""
    return target.startswith("//") or bool(_SCHEME_RE.match(target))


def http_url(target: str) -> str | None:
    """URL to request for an http(s) or protocol-relative target, else None.

    Other schemes such as ``mailto:`` or ``tel:`` cannot be fetched.
    """
    if target.startswith("//"):
        return f"https:{target}"
    if target.lower().startswith(("http://", "https://")):
        return target
    return None


def strip_fragment(reference: str) -> str:
    """Drop a trailing ``#fragment`` and ``?query`` from a reference."""
    for marker in ("#", "?"):
        index = reference.find(marker)
        if index >= 0:
            reference = reference[:index]
    return reference


def resolve_static_path(
    path: str,
    static_prefix: str | None,
    static_dir: str | None,
) -> str | None:
    """Map an absolute reference under ``static_prefix`` onto ``static_dir``."""
    if not static_prefix or not static_dir or not path.startswith(static_prefix):
        return None
    relative = path[len(static_prefix) :].lstrip("/")
    return posixpath.join(to_posix(static_dir), relative)
