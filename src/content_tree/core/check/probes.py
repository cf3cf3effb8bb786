"""Existence probes for local paths and remote URLs."""

import asyncio
from pathlib import Path

import requests
from loguru import logger

from content_tree.models.node import ProbeResult
from content_tree.protocols import UrlProbe


class FileSystemProbe:
    """Checks local paths on disk."""

    def exists(self, path: str) -> bool:
        return Path(path).exists()


class RequestsUrlProbe:
    """HEAD requests through a shared requests session."""

    def __init__(self, session: requests.Session | None = None) -> None:
        self.sess = session or requests.Session()

    def head(self, url: str, timeout_ms: int) -> ProbeResult:
        """Probe a URL once, following redirects. Never raises for network failures."""
        try:
            r = self.sess.head(url, timeout=timeout_ms / 1000, allow_redirects=True)
        except requests.Timeout:
            logger.debug("HEAD {} timed out", url)
            return ProbeResult(ok=False, timed_out=True)
        except requests.RequestException as e:
            logger.debug("HEAD {} failed: {}", url, e)
            return ProbeResult(ok=False)
        return ProbeResult(ok=r.ok, status=r.status_code)


class RemoteGate:
    """Runs blocking URL probes in threads with a cap on in-flight requests."""

    def __init__(self, probe: UrlProbe, *, timeout_ms: int, max_concurrency: int) -> None:
        self.probe = probe
        self.timeout_ms = timeout_ms
        self._semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def head(self, url: str) -> ProbeResult:
        async with self._semaphore:
            return await asyncio.to_thread(self.probe.head, url, self.timeout_ms)
