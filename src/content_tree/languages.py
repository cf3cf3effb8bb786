"""Language tags supported for content variants."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Language:
    """A supported content language."""

    code: str
    name: str


LANGUAGES: tuple[Language, ...] = (
    Language("en", "English (United States)"),
    Language("de", "Deutsch"),
    Language("es", "Español (Estados Unidos)"),
    Language("fr", "Français"),
    Language("id", "Bahasa Indonesia"),
    Language("it", "Italiano"),
    Language("ja", "日本語"),
    Language("ko", "한국어"),
    Language("nl", "Nederlands"),
    Language("pl", "Polski"),
    Language("pt", "Brazilian Português"),
    Language("uk", "украї́нська"),
    Language("zh-CN", "中文(简体)"),
    Language("zh-TW", "中文(繁體)"),
)

_BY_CODE: dict[str, Language] = {lang.code: lang for lang in LANGUAGES}


def get_language(code: str) -> Language | None:
    """Look up a language by its tag."""
    return _BY_CODE.get(code)


def is_supported(code: str) -> bool:
    return code in _BY_CODE


def language_codes() -> list[str]:
    return [lang.code for lang in LANGUAGES]
