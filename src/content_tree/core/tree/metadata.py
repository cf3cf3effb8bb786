"""Parse document text into frontmatter, weight, hash and embedded references."""

import hashlib
import re
from typing import Any

import yaml
from loguru import logger

from content_tree.config import (
    DEFAULT_WEIGHT,
    LEGACY_TRANSLATION_SRC_HASH_KEY,
    TRANSLATION_SRC_HASH_KEY,
)
from content_tree.core.tree.elements import extract_markdown_elements
from content_tree.models.node import ParsedContent

_FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(?P<yaml>.*?)(?:\r?\n)?^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


def split_frontmatter(text: str) -> tuple[dict[str, Any], str, int]:
    """Separate a leading YAML frontmatter block from the body.

    Returns:
        (frontmatter mapping, body text, number of lines the block occupied).
    """
    match = _FRONTMATTER_RE.match(text)
    if not match:
        return {}, text, 0

    block = match.group(0)
    body = text[match.end() :]
    line_count = block.count("\n")
    try:
        data = yaml.safe_load(match.group("yaml"))
    except yaml.YAMLError as e:
        logger.debug("Ignoring invalid frontmatter: {}", e)
        return {}, body, line_count
    if data is None:
        return {}, body, line_count
    if not isinstance(data, dict):
        logger.debug("Ignoring frontmatter that is not a mapping: {!r}", data)
        return {}, body, line_count
    return {str(k): v for k, v in data.items()}, body, line_count


def _as_weight(value: Any) -> int | float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return value
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return int(number) if number.is_integer() else number
    return None


def determine_weight(frontmatter: dict[str, Any]) -> int | float:
    """Pick the ordering weight: ``weight``, then ``sidebar_position``, then the default."""
    for key in ("weight", "sidebar_position"):
        if key in frontmatter:
            weight = _as_weight(frontmatter[key])
            if weight is not None:
                return weight
    return DEFAULT_WEIGHT


def generate_hash(text: str) -> str:
    """MD5 hex digest of the UTF-8 encoded text."""
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def translation_source_hash(frontmatter: dict[str, Any]) -> str | None:
    """Return the source hash a translated document was produced from, if recorded."""
    for key in (TRANSLATION_SRC_HASH_KEY, LEGACY_TRANSLATION_SRC_HASH_KEY):
        value = frontmatter.get(key)
        if value:
            return str(value)
    return None


def parse_markdown_content(text: str) -> ParsedContent:
    """Derive all node metadata from a document's raw text.

    The ``title`` frontmatter key defaults to the first level-1 heading when
    it is not declared.

    Args:
        text: Raw document text, frontmatter included.

    Returns:
        Parsed content keeping ``text`` unchanged as the node content.
    """
    frontmatter, body, line_offset = split_frontmatter(text)
    elements = extract_markdown_elements(body, line_offset=line_offset)
    if "title" not in frontmatter and elements.title is not None:
        frontmatter["title"] = elements.title

    return ParsedContent(
        content=text,
        frontmatter=frontmatter,
        weight=determine_weight(frontmatter),
        hash=generate_hash(text),
        images=elements.images,
        code_blocks=elements.code_blocks,
        links=elements.links,
    )
