"""Issue and option types for content checks."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from content_tree.config import DEFAULT_LINK_TIMEOUT_MS, MAX_REMOTE_CONCURRENCY, CheckSettings

if TYPE_CHECKING:
    from content_tree.core.tree.content_tree import ContentTree
    from content_tree.protocols import ExistenceProbe, Linter, UrlProbe

SEVERITY_RANK: dict[str, int] = {"error": 0, "warning": 1}


@dataclass(frozen=True)
class CheckIssue:
    """A single problem found in a document."""

    file: str
    line: int
    severity: str
    category: str
    rule: str
    message: str
    column: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "severity": self.severity,
            "category": self.category,
            "rule": self.rule,
            "message": self.message,
        }


@dataclass(frozen=True)
class FileCheckResult:
    """Issues found in one document."""

    file_path: str
    issues: tuple[CheckIssue, ...] = ()


@dataclass(frozen=True)
class CheckResult:
    """Aggregate of a check run."""

    files: tuple[FileCheckResult, ...]
    total_errors: int
    total_warnings: int

    @property
    def has_errors(self) -> bool:
        return self.total_errors > 0


@dataclass(frozen=True)
class CheckOptions:
    """Options controlling a check run.

    ``content_dir`` is the directory document source paths are relative to;
    absolute references resolve against ``root_content_dir`` when given.
    The probes and linter default to the file system, requests and the
    PyMarkdown linter.
    """

    content_dir: Path
    root_content_dir: Path | None = None
    content_tree: "ContentTree | None" = None
    timeout_ms: int = DEFAULT_LINK_TIMEOUT_MS
    skip_external: bool = False
    ignore_patterns: tuple[str, ...] = ()
    ignore_rules: tuple[str, ...] = ()
    static_prefix: str | None = None
    static_dir: Path | None = None
    min_severity: str | None = None
    categories: tuple[str, ...] = ()
    max_remote_concurrency: int = MAX_REMOTE_CONCURRENCY
    existence_probe: "ExistenceProbe | None" = field(default=None, repr=False)
    url_probe: "UrlProbe | None" = field(default=None, repr=False)
    linter: "Linter | None" = field(default=None, repr=False)

    @classmethod
    def from_settings(
        cls,
        settings: CheckSettings,
        *,
        content_dir: Path,
        root_content_dir: Path | None = None,
        content_tree: "ContentTree | None" = None,
    ) -> "CheckOptions":
        """Build options from project check settings."""
        return cls(
            content_dir=content_dir,
            root_content_dir=root_content_dir,
            content_tree=content_tree,
            timeout_ms=settings.timeout_ms,
            skip_external=settings.skip_external,
            ignore_patterns=settings.ignore_patterns,
            ignore_rules=settings.ignore_rules,
            static_prefix=settings.static_prefix,
            static_dir=settings.static_dir,
            min_severity=settings.min_severity,
            categories=settings.categories,
        )
