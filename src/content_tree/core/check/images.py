"""Image validity checks."""

import asyncio
import posixpath
import re

from content_tree.core.check.links import ResolveFn, is_ignored, local_candidate, remote_failure
from content_tree.core.check.probes import RemoteGate
from content_tree.core.check.types import CheckIssue
from content_tree.core.tree.paths import http_url, strip_fragment, to_posix
from content_tree.models.node import ContentNode, ImageReference
from content_tree.protocols import ExistenceProbe


def _issue(node: ContentNode, image: ImageReference, rule: str, message: str) -> CheckIssue:
    return CheckIssue(
        file=node.file_path,
        line=image.line,
        severity="error",
        category="image",
        rule=rule,
        message=message,
    )


async def check_images(
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
    """Report missing local images and unreachable remote images of one document."""
    file_dir = posixpath.dirname(posixpath.join(to_posix(content_dir), node.file_path.lstrip("/")))
    patterns = ignore_patterns or []

    async def check_one(image: ImageReference) -> CheckIssue | None:
        if image.remote:
            url = http_url(image.path)
            if skip_external or url is None:
                return None
            result = await gate.head(url)
            if result.ok:
                return None
            message = remote_failure("image", image.path, gate, timed_out=result.timed_out, status=result.status)
            return _issue(node, image, "broken-remote-image", message)

        target = strip_fragment(image.path)
        if not target:
            return None
        if resolve is not None and resolve(image.path, node.path) is not None:
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
        return _issue(node, image, "missing-image", f"Image not found: {image.path}")

    checked = [
        image for image in node.images if not image.path.startswith("#") and not is_ignored(image.path, patterns)
    ]
    results = await asyncio.gather(*(check_one(image) for image in checked))
    return [issue for issue in results if issue is not None]
