"""Tests for frontmatter, weight, hash and path parsing."""

import hashlib

import pytest

from content_tree.core.tree.metadata import (
    determine_weight,
    generate_hash,
    parse_markdown_content,
    split_frontmatter,
    translation_source_hash,
)
from content_tree.core.tree.paths import (
    extract_file_info,
    http_url,
    is_remote,
    resolve_static_path,
    strip_fragment,
)


def test_extract_file_info_language_suffix() -> None:
    info = extract_file_info("docs/guide.fr.md", "en")
    assert info.base_name == "guide"
    assert info.language == "fr"
    assert info.directory == "docs"
    assert info.extension == ".md"
    assert info.is_index_file is False


def test_extract_file_info_default_language() -> None:
    info = extract_file_info("/docs/guide.md", "ja")
    assert info.base_name == "guide"
    assert info.language == "ja"
    assert info.directory == "docs"
    assert info.file_path == "/docs/guide.md"


@pytest.mark.parametrize("path", ["docs/index.md", "docs/_index.md", "docs/index.de.md"])
def test_extract_file_info_index_files(path: str) -> None:
    assert extract_file_info(path).is_index_file is True


def test_extract_file_info_root_file() -> None:
    info = extract_file_info("README.md")
    assert info.directory == ""
    assert info.base_name == "README"


def test_extract_file_info_multiple_dots_keep_all_but_last() -> None:
    info = extract_file_info("a/b/my.file.name.zh-CN.md")
    assert info.base_name == "my.file.name"
    assert info.language == "zh-CN"
    assert info.directory == "a/b"


def test_extract_file_info_file_without_extension() -> None:
    info = extract_file_info("notes/LICENSE")
    assert info.base_name == "LICENSE"
    assert info.extension == ""


def test_extract_file_info_windows_separators() -> None:
    info = extract_file_info("docs\\guide.md")
    assert info.directory == "docs"
    assert info.base_name == "guide"


def test_frontmatter_split() -> None:
    frontmatter, body, lines = split_frontmatter("---\ntitle: Hello\nweight: 3\n---\n# Body\n")
    assert frontmatter == {"title": "Hello", "weight": 3}
    assert body == "# Body\n"
    assert lines == 4


def test_frontmatter_no_frontmatter() -> None:
    assert split_frontmatter("# Just a body\n") == ({}, "# Just a body\n", 0)


def test_frontmatter_empty_frontmatter() -> None:
    frontmatter, body, lines = split_frontmatter("---\n---\ntext\n")
    assert frontmatter == {}
    assert body == "text\n"
    assert lines == 2


def test_frontmatter_invalid_yaml_is_ignored() -> None:
    frontmatter, body, _ = split_frontmatter("---\ntitle: [unclosed\n---\nbody\n")
    assert frontmatter == {}
    assert body == "body\n"


def test_frontmatter_non_mapping_is_ignored() -> None:
    frontmatter, _, _ = split_frontmatter("---\n- a\n- b\n---\nbody\n")
    assert frontmatter == {}


def test_frontmatter_thematic_break_later_in_body_is_not_frontmatter() -> None:
    text = "# Title\n\n---\n\nMore\n"
    assert split_frontmatter(text) == ({}, text, 0)


@pytest.mark.parametrize(
    ("frontmatter", "expected"),
    [
        ({"weight": 10}, 10),
        ({"weight": 10, "sidebar_position": 2}, 10),
        ({"sidebar_position": 2}, 2),
        ({"weight": "7"}, 7),
        ({"weight": 1.5}, 1.5),
        ({"weight": -3}, -3),
        ({"weight": "heavy"}, 999),
        ({"weight": True}, 999),
        ({}, 999),
    ],
)
def test_weight_precedence(frontmatter: dict, expected: float) -> None:
    assert determine_weight(frontmatter) == expected


def test_hash_is_md5_of_raw_text() -> None:
    text = "---\ntitle: Ünïcode\n---\nbody\n"
    assert generate_hash(text) == hashlib.md5(text.encode("utf-8")).hexdigest()
    assert generate_hash(text) == generate_hash(text)
    assert generate_hash(text) != generate_hash(text + " ")


def test_title_defaults_to_first_h1() -> None:
    parsed = parse_markdown_content("Intro text\n\n## Sub\n\n# First\n\n# Second\n")
    assert parsed.frontmatter["title"] == "First"


def test_declared_title_wins() -> None:
    parsed = parse_markdown_content("---\ntitle: Declared\n---\n# Heading\n")
    assert parsed.frontmatter["title"] == "Declared"


def test_no_h1_leaves_title_unset() -> None:
    parsed = parse_markdown_content("## Only a subheading\n")
    assert "title" not in parsed.frontmatter


def test_parsed_content_keeps_raw_text() -> None:
    text = "---\nweight: 4\n---\n# T\n"
    parsed = parse_markdown_content(text)
    assert parsed.content == text
    assert parsed.weight == 4


def test_translation_source_hash_keys() -> None:
    assert translation_source_hash({"tmdTranslationSourceHash": "abc"}) == "abc"
    assert translation_source_hash({"wsmSourceHash": "old"}) == "old"
    assert translation_source_hash({"title": "x"}) is None


@pytest.mark.parametrize(
    ("target", "remote"),
    [
        ("https://example.com/a.png", True),
        ("http://example.com", True),
        ("mailto:someone@example.com", True),
        ("//cdn.example.com/x.js", True),
        ("./local.md", False),
        ("/static/img.png", False),
        ("images/a.png", False),
    ],
)
def test_is_remote(target: str, remote: bool) -> None:
    assert is_remote(target) is remote


@pytest.mark.parametrize(
    ("target", "url"),
    [
        ("https://example.com/a.png", "https://example.com/a.png"),
        ("HTTP://example.com", "HTTP://example.com"),
        ("//cdn.example.com/x.js", "https://cdn.example.com/x.js"),
        ("mailto:someone@example.com", None),
        ("tel:+123456", None),
        ("ftp://files.example.com/a", None),
    ],
)
def test_http_url(target: str, url: str | None) -> None:
    assert http_url(target) == url


def test_strip_fragment() -> None:
    assert strip_fragment("./guide.md#intro") == "./guide.md"
    assert strip_fragment("./guide?x=1#y") == "./guide"
    assert strip_fragment("#only") == ""


def test_resolve_static_path() -> None:
    assert resolve_static_path("/static/img/a.png", "/static/", "/site/public") == "/site/public/img/a.png"
    assert resolve_static_path("/other/a.png", "/static/", "/site/public") is None
    assert resolve_static_path("/static/a.png", None, "/site/public") is None
