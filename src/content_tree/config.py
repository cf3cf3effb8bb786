"""Configuration constants and project configuration loading."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from content_tree.errors import ConfigError
from content_tree.languages import is_supported, language_codes

# Weight given to documents without an explicit weight and to synthesized directories.
DEFAULT_WEIGHT: int = 999

# Weight every index document carries relative to its siblings.
INDEX_WEIGHT: int = -1

# Stems that mark a document as its directory's index.
INDEX_NAMES: tuple[str, ...] = ("index", "_index")

# Extensions stripped from references during resolution.
MARKDOWN_EXTENSIONS: tuple[str, ...] = (".md", ".mdx", ".markdown")

DEFAULT_LANGUAGE: str = "en"

# Frontmatter keys recording the source hash a translation was made from.
TRANSLATION_SRC_HASH_KEY: str = "tmdTranslationSourceHash"
LEGACY_TRANSLATION_SRC_HASH_KEY: str = "wsmSourceHash"

DEFAULT_LINK_TIMEOUT_MS: int = 5000

# Cap on in-flight remote HEAD requests during a check run.
MAX_REMOTE_CONCURRENCY: int = 8

# Markdownlint rules that never apply to documentation content.
DEFAULT_DISABLED_LINT_RULES: tuple[str, ...] = ("MD013", "MD033")

# Project config files. First file found is used.
CONFIG_FILE_NAMES: list[str] = [
    ".content-treerc.json",
    ".content-treerc",
    "content-tree.config.json",
]

ENV_PREFIX: str = "CTREE_"

SEVERITIES: tuple[str, ...] = ("error", "warning")
CATEGORIES: tuple[str, ...] = ("lint", "link", "image")


@dataclass(frozen=True)
class CheckSettings:
    """Settings for content checks."""

    timeout_ms: int = DEFAULT_LINK_TIMEOUT_MS
    skip_external: bool = False
    ignore_patterns: tuple[str, ...] = ()
    ignore_rules: tuple[str, ...] = ()
    static_prefix: str | None = None
    static_dir: Path | None = None
    min_severity: str | None = None
    categories: tuple[str, ...] = ()


@dataclass(frozen=True)
class ProjectConfig:
    """Resolved configuration for one content project."""

    project_dir: Path
    content_dir: Path
    language: str = DEFAULT_LANGUAGE
    default_language: str = DEFAULT_LANGUAGE
    check: CheckSettings = field(default_factory=CheckSettings)
    config_file: Path | None = None


def find_config_file(project_dir: Path) -> Path | None:
    """Return the first config file present in the project directory."""
    for name in CONFIG_FILE_NAMES:
        candidate = project_dir / name
        if candidate.is_file():
            return candidate
    return None


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        msg = f"Invalid configuration file {path}: {e}"
        raise ConfigError(msg) from e
    if not isinstance(data, dict):
        msg = f"Invalid configuration file {path}: expected a JSON object"
        raise ConfigError(msg)
    return data


def _env(name: str) -> str | None:
    return os.environ.get(ENV_PREFIX + name)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _pick(overrides: dict[str, Any], key: str, env_name: str | None, file_value: Any) -> Any:
    """Resolve one setting: override, then environment, then file value."""
    if overrides.get(key) is not None:
        return overrides[key]
    if env_name is not None:
        env_value = _env(env_name)
        if env_value is not None:
            return env_value
    return file_value


def _validate_language(key: str, value: str) -> str:
    if not is_supported(value):
        msg = (
            f"Invalid configuration for {key}: Unsupported language {value} "
            f"(supported: {', '.join(language_codes())})"
        )
        raise ConfigError(msg)
    return value


def _validate_choices(key: str, values: tuple[str, ...], allowed: tuple[str, ...]) -> None:
    for value in values:
        if value not in allowed:
            msg = f"Invalid configuration for {key}: {value!r} is not one of {allowed}"
            raise ConfigError(msg)


def load_project_config(
    project_dir: Path,
    *,
    overrides: dict[str, Any] | None = None,
) -> ProjectConfig:
    """Load configuration for a project directory.

    Precedence is overrides (CLI options), then ``CTREE_*`` environment
    variables, then the first config file found, then defaults.

    Args:
        project_dir: Project root holding the optional config file.
        overrides: Explicit values keyed like the config file; ``None`` values are ignored.

    Returns:
        The resolved project configuration.
    """
    overrides = overrides or {}
    project_dir = project_dir.resolve()
    config_file = find_config_file(project_dir)
    file_data: dict[str, Any] = _read_config_file(config_file) if config_file else {}
    if config_file:
        logger.debug("Using config file {}", config_file)
    check_data: dict[str, Any] = file_data.get("check") or {}

    language = _validate_language(
        "language",
        str(_pick(overrides, "language", "LANGUAGE", file_data.get("language", DEFAULT_LANGUAGE))),
    )
    default_language = _validate_language(
        "defaultLanguage",
        str(
            _pick(
                overrides,
                "defaultLanguage",
                "DEFAULT_LANGUAGE",
                file_data.get("defaultLanguage", DEFAULT_LANGUAGE),
            )
        ),
    )

    content_dir_value = _pick(overrides, "contentDir", "CONTENT_DIR", file_data.get("contentDir"))
    content_dir = (project_dir / content_dir_value).resolve() if content_dir_value else project_dir

    try:
        timeout_ms = int(
            _pick(overrides, "timeout", "LINK_TIMEOUT", check_data.get("timeout", DEFAULT_LINK_TIMEOUT_MS))
        )
    except (TypeError, ValueError) as e:
        msg = f"Invalid configuration for check.timeout: {e}"
        raise ConfigError(msg) from e

    static_dir_value = _pick(overrides, "staticDir", None, check_data.get("staticDir"))
    check = CheckSettings(
        timeout_ms=timeout_ms,
        skip_external=_as_bool(
            _pick(overrides, "skipExternal", "SKIP_EXTERNAL", check_data.get("skipExternal", False))
        ),
        ignore_patterns=tuple(
            overrides.get("ignorePatterns") or check_data.get("ignorePatterns") or ()
        ),
        ignore_rules=tuple(overrides.get("ignoreRules") or check_data.get("ignoreRules") or ()),
        static_prefix=_pick(overrides, "staticPrefix", None, check_data.get("staticPrefix")),
        static_dir=(project_dir / static_dir_value).resolve() if static_dir_value else None,
        min_severity=_pick(overrides, "minSeverity", None, check_data.get("minSeverity")),
        categories=tuple(overrides.get("categories") or check_data.get("categories") or ()),
    )
    if check.min_severity is not None:
        _validate_choices("check.minSeverity", (check.min_severity,), SEVERITIES)
    _validate_choices("check.categories", check.categories, CATEGORIES)

    return ProjectConfig(
        project_dir=project_dir,
        content_dir=content_dir,
        language=language,
        default_language=default_language,
        check=check,
        config_file=config_file,
    )
