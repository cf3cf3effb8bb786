"""Run lint, link and image checks over content tree documents."""

import asyncio

from loguru import logger

from content_tree.core.check.images import check_images
from content_tree.core.check.links import check_links, compile_ignore_patterns
from content_tree.core.check.lint import check_lint
from content_tree.core.check.probes import FileSystemProbe, RemoteGate, RequestsUrlProbe
from content_tree.core.check.types import (
    SEVERITY_RANK,
    CheckIssue,
    CheckOptions,
    CheckResult,
    FileCheckResult,
)
from content_tree.core.tree.content_tree import ContentTree
from content_tree.errors import NodeNotFoundError
from content_tree.models.node import ContentNode


def meets_min_severity(severity: str, min_severity: str | None) -> bool:
    if not min_severity:
        return True
    return SEVERITY_RANK[severity] <= SEVERITY_RANK[min_severity]


def is_category_enabled(category: str, categories: tuple[str, ...]) -> bool:
    return not categories or category in categories


def _gate(options: CheckOptions) -> RemoteGate:
    return RemoteGate(
        options.url_probe or RequestsUrlProbe(),
        timeout_ms=options.timeout_ms,
        max_concurrency=options.max_remote_concurrency,
    )


async def _no_issues() -> list[CheckIssue]:
    return []


async def check_node(
    node: ContentNode,
    options: CheckOptions,
    *,
    gate: RemoteGate | None = None,
) -> FileCheckResult | None:
    """Check one document.

    Lint, link and image checks run concurrently and their issues are merged,
    then filtered by ``options.min_severity``.

    Args:
        node: Document to check.
        options: Check options.
        gate: Shared remote probe gate; a private one is created when omitted.

    Returns:
        The document's issues, or None for directories and nodes without content.
    """
    if node.is_directory or node.content is None:
        return None

    gate = gate or _gate(options)
    probe = options.existence_probe or FileSystemProbe()
    content_dir = str(options.content_dir)
    root_dir = str(options.root_content_dir or options.content_dir)
    resolve = options.content_tree.resolve_link if options.content_tree is not None else None
    patterns = compile_ignore_patterns(options.ignore_patterns)
    static_dir = str(options.static_dir) if options.static_dir is not None else None

    async def lint() -> list[CheckIssue]:
        return check_lint(node.file_path, node.content or "", options.ignore_rules, linter=options.linter)

    results = await asyncio.gather(
        lint() if is_category_enabled("lint", options.categories) else _no_issues(),
        check_links(
            node,
            content_dir=content_dir,
            root_dir=root_dir,
            probe=probe,
            gate=gate,
            skip_external=options.skip_external,
            ignore_patterns=patterns,
            static_prefix=options.static_prefix,
            static_dir=static_dir,
            resolve=resolve,
        )
        if is_category_enabled("link", options.categories)
        else _no_issues(),
        check_images(
            node,
            content_dir=content_dir,
            root_dir=root_dir,
            probe=probe,
            gate=gate,
            skip_external=options.skip_external,
            ignore_patterns=patterns,
            static_prefix=options.static_prefix,
            static_dir=static_dir,
            resolve=resolve,
        )
        if is_category_enabled("image", options.categories)
        else _no_issues(),
    )

    issues = tuple(
        issue
        for group in results
        for issue in group
        if meets_min_severity(issue.severity, options.min_severity)
    )
    logger.debug("{}: {} issues", node.file_path, len(issues))
    return FileCheckResult(file_path=node.file_path, issues=issues)


async def check_all(nodes: list[ContentNode], options: CheckOptions) -> CheckResult:
    """Check documents concurrently and aggregate their issues in input order."""
    gate = _gate(options)
    results = await asyncio.gather(*(check_node(node, options, gate=gate) for node in nodes))

    files = [r for r in results if r is not None]
    total_errors = sum(1 for f in files for i in f.issues if i.severity == "error")
    total_warnings = sum(1 for f in files for i in f.issues if i.severity != "error")
    return CheckResult(files=tuple(files), total_errors=total_errors, total_warnings=total_warnings)


def find_nodes_by_file(tree: ContentTree, files: list[str]) -> list[ContentNode]:
    """Map source paths to document nodes.

    Raises:
        NodeNotFoundError: If a path is not a document of the tree.
    """
    by_file = {n.file_path.lstrip("/"): n for n in tree.get_flattened_tree()}
    nodes = []
    for file in files:
        node = by_file.get(file.lstrip("/"))
        if node is None:
            msg = f"File not found in content tree: {file}"
            raise NodeNotFoundError(msg)
        nodes.append(node)
    return nodes


async def check_files(tree: ContentTree, files: list[str], options: CheckOptions) -> CheckResult:
    """Check the named documents of a tree; unknown paths are a caller error."""
    return await check_all(find_nodes_by_file(tree, files), options)
