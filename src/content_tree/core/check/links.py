"""Link validity checks."""

import asyncio
import posixpath
import re
from collections.abc import Callable
from urllib.parse import unquote

from content_tree.core.check.probes import RemoteGate
from content_tree.core.check.types import CheckIssue
from content_tree.core.tree.paths import http_url, resolve_static_path, strip_fragment, to_posix
from content_tree.models.node import ContentNode, LinkReference
from content_tree.protocols import ExistenceProbe

ResolveFn = Callable[[str, str], ContentNode | None]


def compile_ignore_patterns(patterns: tuple[str, ...]) -> list[re.Pattern[str]]:
    return [re.compile(p) for p in patterns]


def is_ignored(reference: str, patterns: list[re.Pattern[str]]) -> bool:
    """Match ignore patterns against the raw reference, fragment included."""
    return any(p.search(reference) for p in patterns)


def local_candidate(
    target: str,
    *,
    file_dir: str,
    root_dir: str,
    static_prefix: str | None,
    static_dir: str | None,
) -> str:
    """Physical path a local reference points at, percent-escapes decoded."""
    target = unquote(target)
    if target.startswith("/"):
        static = resolve_static_path(target, static_prefix, static_dir)
        if static is not None:
            return static
        return posixpath.join(root_dir, target.lstrip("/"))
    return posixpath.normpath(posixpath.join(file_dir, target))


def remote_failure(kind: str, url: str, gate: RemoteGate, *, timed_out: bool, status: int | None) -> str:
    if timed_out:
        return f"Remote {kind} timed out after {gate.timeout_ms}ms: {url}"
    if status is not None:
        return f"Remote {kind} returned HTTP {status}: {url}"
    return f"Remote {kind} unreachable: {url}"


def _issue(node: ContentNode, link: LinkReference, rule: str, message: str) -> CheckIssue:
    return CheckIssue(
        file=node.file_path,
        line=link.line,
        severity="error",
        category="link",
        rule=rule,
        message=message,
    )


async def check_links(
    node: ContentNode,
    *,
    content_dir: str,
    root_dir: str,
    probe: ExistenceProbe,
    gate: RemoteGate,
    skip_external: bool = False,
    ignore_patterns: list[re.Pattern[str]] | None = None,
    static_prefix: str | None = None,
    static_dir: str | None = None,
    resolve: ResolveFn | None = None,
) -> list[CheckIssue]:
    """Report broken local and remote links of one document.

    Local links are resolved through the tree first and only then probed on
    disk. Remote http(s) links get one HEAD request each unless
    ``skip_external``; the requests run concurrently through ``gate``.
    Links with other schemes (``mailto:``, ``tel:``) are not checked.
    """
    file_dir = posixpath.dirname(posixpath.join(to_posix(content_dir), node.file_path.lstrip("/")))
    patterns = ignore_patterns or []

    async def check_one(link: LinkReference) -> CheckIssue | None:
        if link.remote:
            url = http_url(link.url)
            if skip_external or url is None:
                return None
            result = await gate.head(url)
            if result.ok:
                return None
            message = remote_failure("link", link.url, gate, timed_out=result.timed_out, status=result.status)
            return _issue(node, link, "broken-remote-link", message)

        target = strip_fragment(link.url)
        if not target:
            return None
        if resolve is not None and resolve(link.url, node.path) is not None:
            return None
        candidate = local_candidate(
            target,
            file_dir=file_dir,
            root_dir=to_posix(root_dir),
            static_prefix=static_prefix,
            static_dir=static_dir,
        )
        if probe.exists(candidate):
            return None
        return _issue(node, link, "broken-link", f"Link target not found: {link.url}")

    checked = [
        link for link in node.links if not link.url.startswith("#") and not is_ignored(link.url, patterns)
    ]
    results = await asyncio.gather(*(check_one(link) for link in checked))
    return [issue for issue in results if issue is not None]
