"""Markdown style checks backed by PyMarkdown."""

from loguru import logger
from pymarkdown.api import PyMarkdownApi, PyMarkdownApiException

from content_tree.config import DEFAULT_DISABLED_LINT_RULES
from content_tree.core.check.types import CheckIssue
from content_tree.errors import LintError
from content_tree.protocols import Linter


class MarkdownLinter:
    """PyMarkdown with every default rule enabled except ``disabled``.

    ``disabled`` takes rule ids (``MD025``) or aliases (``single-h1``).
    Frontmatter is parsed, so a ``title`` key counts as the top-level
    heading and line numbers refer to the whole document.
    """

    def __init__(self, disabled: tuple[str, ...] = DEFAULT_DISABLED_LINT_RULES) -> None:
        self.disabled = tuple(dict.fromkeys(rule.lower() for rule in disabled))

    def _api(self) -> PyMarkdownApi:
        api = PyMarkdownApi().set_boolean_property("extensions.front-matter.enabled", True)
        for rule in self.disabled:
            api = api.disable_rule_by_identifier(rule)
        return api

    def lint(self, file_path: str, content: str) -> list[tuple[int, str, str]]:
        """Return (line, rule names, description) for each violation, sorted by line."""
        try:
            result = self._api().scan_string(content)
        except PyMarkdownApiException as e:
            msg = f"Failed to lint {file_path}: {e}"
            raise LintError(msg) from e

        violations = [
            (
                failure.line_number,
                f"{failure.rule_id.upper()}/{failure.rule_name.replace(',', '/')}",
                failure.rule_description,
            )
            for failure in result.scan_failures
        ]
        violations.sort(key=lambda v: v[0])
        logger.debug("Linted {}: {} violations", file_path, len(violations))
        return violations


def check_lint(
    file_path: str,
    content: str,
    ignore_rules: tuple[str, ...] = (),
    *,
    linter: Linter | None = None,
) -> list[CheckIssue]:
    """Lint one document and report every violation as a warning."""
    linter = linter or MarkdownLinter(DEFAULT_DISABLED_LINT_RULES + tuple(ignore_rules))
    return [
        CheckIssue(
            file=file_path,
            line=line,
            severity="warning",
            category="lint",
            rule=rule,
            message=description,
        )
        for line, rule, description in linter.lint(file_path, content)
    ]
