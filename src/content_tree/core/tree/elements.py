"""Scan markdown bodies for images, code blocks, links and the first heading."""

import re
from dataclasses import dataclass

from markdown_it import MarkdownIt
from markdown_it.token import Token

from content_tree.core.tree.paths import is_remote
from content_tree.models.node import CodeBlockReference, ImageReference, LinkReference

_md = MarkdownIt("commonmark")
# Keep link destinations as written; local targets are decoded when checked.
_md.normalizeLink = lambda url: url  # type: ignore[method-assign]

_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_CODE_DIRECTIVE_OPEN_RE = re.compile(r"^ {0,3}(:{3,})code(?:\{(?P<attrs>[^}]*)\})?\s*$")
_DIRECTIVE_CLOSE_RE = re.compile(r"^ {0,3}(:{3,})\s*$")
_IMAGE_DIRECTIVE_RE = re.compile(
    r"(?<!:):{1,2}image(?:\[(?P<label>[^\]]*)\])?\{(?P<attrs>[^}]*)\}"
)
_IMG_TAG_RE = re.compile(r"<img\b[^>]*>", re.IGNORECASE)
_CODE_SPAN_RE = re.compile(r"(`+)(.+?)\1", re.DOTALL)


def _attr_pattern(name: str) -> re.Pattern[str]:
    return re.compile(
        rf"(?<![\w-]){name}\s*=\s*(?:\"(?P<dq>[^\"]*)\"|'(?P<sq>[^']*)'|(?P<bare>[^\s\"'>}}]+))",
        re.IGNORECASE,
    )


_SRC_ATTR_RE = _attr_pattern("src")
_ALT_ATTR_RE = _attr_pattern("alt")
_LANG_ATTR_RE = _attr_pattern("lang(?:uage)?")


@dataclass(frozen=True)
class MarkdownElements:
    """References and title found in a markdown body."""

    images: tuple[ImageReference, ...] = ()
    code_blocks: tuple[CodeBlockReference, ...] = ()
    links: tuple[LinkReference, ...] = ()
    title: str | None = None


def _attr_value(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    if not match:
        return None
    return next(g for g in (match.group("dq"), match.group("sq"), match.group("bare")) if g is not None)


def _target(raw: str) -> tuple[str, bool]:
    """Return the stored form of a link/image target and whether it is remote."""
    raw = raw.strip()
    return raw, is_remote(raw)


def _mask_code_spans(text: str) -> str:
    """Blank out inline code spans, keeping newlines so offsets still map to lines."""
    return _CODE_SPAN_RE.sub(lambda m: re.sub(r"[^\n]", " ", m.group(0)), text)


def _split_code_directives(
    lines: list[str], line_offset: int
) -> tuple[list[str], list[CodeBlockReference]]:
    """Pull ``:::code`` container directives out of the body.

    Directive lines are replaced with blanks so the remaining text keeps its
    line numbering when handed to the markdown parser.
    """
    out = list(lines)
    blocks: list[CodeBlockReference] = []
    fence: str | None = None
    i = 0
    while i < len(lines):
        line = lines[i]
        fence_match = _FENCE_RE.match(line)
        if fence is not None:
            if fence_match and fence_match.group(1)[0] == fence[0] and len(fence_match.group(1)) >= len(fence):
                fence = None
            i += 1
            continue
        if fence_match:
            fence = fence_match.group(1)
            i += 1
            continue

        open_match = _CODE_DIRECTIVE_OPEN_RE.match(line)
        if not open_match:
            i += 1
            continue

        marker = open_match.group(1)
        end = i + 1
        while end < len(lines):
            close_match = _DIRECTIVE_CLOSE_RE.match(lines[end])
            if close_match and len(close_match.group(1)) == len(marker):
                break
            end += 1
        body = "\n".join(lines[i + 1 : end]).strip("\n")
        attrs = open_match.group("attrs") or ""
        blocks.append(
            CodeBlockReference(
                language=_attr_value(_LANG_ATTR_RE, attrs),
                code=body,
                line=i + 1 + line_offset,
            )
        )
        for j in range(i, min(end + 1, len(lines))):
            out[j] = ""
        i = end + 1
    return out, blocks


def _inline_text(children: list[Token]) -> str:
    parts: list[str] = []
    for child in children:
        if child.type in ("text", "code_inline"):
            parts.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            parts.append(" ")
        elif child.type == "image":
            parts.append(_inline_text(child.children or []) or child.content)
    return "".join(parts)


def _image_column(block_lines: list[str], index: int, nth: int) -> int:
    """Column of the ``nth`` ``![`` on a block line, 0 when it cannot be found."""
    if not 0 <= index < len(block_lines):
        return 0
    pos = -1
    for _ in range(nth + 1):
        pos = block_lines[index].find("![", pos + 1)
        if pos < 0:
            return 0
    return pos


def _scan_inline(
    token: Token,
    base_line: int,
    block_lines: list[str],
    images: list[tuple[int, int, ImageReference]],
    links: list[tuple[int, int, LinkReference]],
) -> None:
    """Collect markdown images and links from one inline token.

    ``block_lines`` is the block source with code spans masked. It gives each
    image a column so images written in different syntaxes sort by position.
    """
    children = token.children or []
    line = base_line
    per_line: dict[int, int] = {}

    def add_image(child: Token) -> None:
        src = child.attrGet("src")
        if not src:
            return
        nth = per_line.get(line, 0)
        per_line[line] = nth + 1
        path, remote = _target(str(src))
        alt = _inline_text(child.children or []) or child.content
        column = _image_column(block_lines, line - base_line, nth)
        images.append((line, column, ImageReference(path=path, alt=alt or None, line=line, remote=remote)))

    i = 0
    while i < len(children):
        child = children[i]
        if child.type in ("softbreak", "hardbreak"):
            line += 1
        elif child.type == "image":
            add_image(child)
        elif child.type == "link_open":
            href = child.attrGet("href")
            start_line = line
            label: list[Token] = []
            i += 1
            while i < len(children) and children[i].type != "link_close":
                if children[i].type in ("softbreak", "hardbreak"):
                    line += 1
                elif children[i].type == "image":
                    add_image(children[i])
                label.append(children[i])
                i += 1
            if href:
                url, remote = _target(str(href))
                links.append(
                    (start_line, 0, LinkReference(url=url, text=_inline_text(label), line=start_line, remote=remote))
                )
        i += 1


def _scan_raw_images(
    text: str,
    first_line: int,
    images: list[tuple[int, int, ImageReference]],
) -> None:
    """Collect image directives and ``<img>`` tags from a block's masked source."""

    def position(pos: int) -> tuple[int, int]:
        return first_line + text.count("\n", 0, pos), pos - (text.rfind("\n", 0, pos) + 1)

    for match in _IMAGE_DIRECTIVE_RE.finditer(text):
        src = _attr_value(_SRC_ATTR_RE, match.group("attrs"))
        if not src:
            continue
        alt = match.group("label") or _attr_value(_ALT_ATTR_RE, match.group("attrs"))
        path, remote = _target(src)
        line, column = position(match.start())
        images.append((line, column, ImageReference(path=path, alt=alt or None, line=line, remote=remote)))

    for match in _IMG_TAG_RE.finditer(text):
        tag = match.group(0)
        src = _attr_value(_SRC_ATTR_RE, tag)
        if not src:
            continue
        alt = _attr_value(_ALT_ATTR_RE, tag)
        path, remote = _target(src)
        line, column = position(match.start())
        images.append((line, column, ImageReference(path=path, alt=alt or None, line=line, remote=remote)))


def extract_markdown_elements(body: str, *, line_offset: int = 0) -> MarkdownElements:
    """Scan a markdown body for embedded references and its first level-1 heading.

    Images are taken from standard markdown syntax, ``:image[alt]{src=...}`` /
    ``::image{src=...}`` directives and raw ``<img>`` tags, and are
    de-duplicated by target (the first occurrence in source order wins). Links are de-duplicated
    by URL. Code blocks are kept in document order.

    Args:
        body: Markdown text without frontmatter.
        line_offset: Number of lines preceding ``body`` in the full document.

    Returns:
        The extracted elements with 1-based line numbers relative to the full document.
    """
    lines = body.split("\n")
    parse_lines, directive_blocks = _split_code_directives(lines, line_offset)
    tokens = _md.parse("\n".join(parse_lines))

    images: list[tuple[int, int, ImageReference]] = []
    links: list[tuple[int, int, LinkReference]] = []
    code_blocks: list[CodeBlockReference] = list(directive_blocks)
    title: str | None = None

    for index, token in enumerate(tokens):
        if token.map is None:
            continue
        start, end = token.map
        if token.type == "fence":
            info = token.info.strip()
            code_blocks.append(
                CodeBlockReference(
                    language=info.split()[0] if info else None,
                    code=token.content.rstrip("\n"),
                    line=start + 1 + line_offset,
                )
            )
        elif token.type == "heading_open" and token.tag == "h1" and title is None:
            inline = tokens[index + 1] if index + 1 < len(tokens) else None
            if inline is not None and inline.type == "inline":
                title = _inline_text(inline.children or []).strip() or None
        elif token.type in ("inline", "html_block"):
            text = _mask_code_spans("\n".join(parse_lines[start:end]))
            if token.type == "inline":
                _scan_inline(token, start + 1 + line_offset, text.split("\n"), images, links)
            _scan_raw_images(text, start + 1 + line_offset, images)

    images.sort(key=lambda item: (item[0], item[1]))
    seen_images: set[str] = set()
    unique_images: list[ImageReference] = []
    for _line, _column, image in images:
        if image.path not in seen_images:
            seen_images.add(image.path)
            unique_images.append(image)

    seen_links: set[str] = set()
    unique_links: list[LinkReference] = []
    for _line, _column, link in links:
        if link.url not in seen_links:
            seen_links.add(link.url)
            unique_links.append(link)

    code_blocks.sort(key=lambda block: block.line)
    return MarkdownElements(
        images=tuple(unique_images),
        code_blocks=tuple(code_blocks),
        links=tuple(unique_links),
        title=title,
    )
