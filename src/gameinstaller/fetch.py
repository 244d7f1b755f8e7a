"""
Download port.

Every network access of the installer goes through a Fetcher, one request at
a time. HttpFetcher is the aiohttp implementation; tests substitute an
in-memory one. No retry or backoff is performed: the first failure is final.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import aiohttp

from gameinstaller.errors import FileSystemError, IntegrityMismatchError, NetworkError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class Fetcher(ABC):
    """Abstract download port."""

    def __init__(self, *, verify_sha1: bool = False) -> None:
        """
        Args:
            verify_sha1: Check downloaded content against declared SHA-1 hashes.
        """
        self._verify_sha1 = verify_sha1

    @abstractmethod
    async def fetch_bytes(self, url: str) -> bytes:
        """
        Fetch a remote document.

        Args:
            url: Absolute URL.

        Returns:
            Response body.

        Raises:
            NetworkError: On transport failure or non-success status.
        """
        ...

    async def download_to(self, url: str, path: Path, *, sha1: str | None = None) -> int:
        """
        Download a file, creating parent directories and overwriting any existing file.

        Args:
            url: Absolute URL.
            path: Destination file.
            sha1: Declared SHA-1, checked only when verification is enabled.

        Returns:
            Number of bytes written.

        Raises:
            NetworkError: On transport failure.
            IntegrityMismatchError: If verification is enabled and the hash differs.
            FileSystemError: If the file cannot be written.
        """
        data = await self.fetch_bytes(url)
        if self._verify_sha1 and sha1:
            actual = hashlib.sha1(data).hexdigest()
            if actual != sha1.lower():
                raise IntegrityMismatchError(url, sha1.lower(), actual)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            msg = f"Unable to write {path}: {e}"
            raise FileSystemError(msg) from e
        logger.debug("Downloaded file", extra={"url": url, "size": len(data)})
        return len(data)

    async def close(self) -> None:  # noqa: B027 - optional hook
        """Release any resources held by this fetcher."""


class HttpFetcher(Fetcher):
    """aiohttp-backed Fetcher."""

    def __init__(
        self,
        *,
        timeout_s: float = 60.0,
        headers: dict[str, str] | None = None,
        verify_sha1: bool = False,
    ) -> None:
        """
        Initialize the fetcher.

        Args:
            timeout_s: Total timeout of a single request in seconds.
            headers: Extra request headers.
            verify_sha1: Check downloaded content against declared SHA-1 hashes.
        """
        super().__init__(verify_sha1=verify_sha1)
        self._timeout_s = timeout_s
        self._headers = dict(headers or {})
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._timeout_s)
            self._session = aiohttp.ClientSession(timeout=timeout, headers=self._headers)
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def fetch_bytes(self, url: str) -> bytes:
        try:
            session = await self._get_session()
            async with session.request("GET", url) as response:
                if response.status >= 400:
                    text = await response.text()
                    logger.error(
                        "HTTP error",
                        extra={"url": url, "status": response.status, "body": text[:500]},
                    )
                    msg = f"Failed to download {url}: HTTP {response.status}"
                    raise NetworkError(msg)
                data: bytes = await response.read()
                return data
        except aiohttp.ClientError as e:
            logger.warning("Request failed", extra={"url": url, "error": str(e)})
            msg = f"Failed to download {url}: {e}"
            raise NetworkError(msg) from e
        except asyncio.TimeoutError as e:
            logger.warning("Request timed out", extra={"url": url, "timeout_s": self._timeout_s})
            msg = f"Failed to download {url}: timed out after {self._timeout_s}s"
            raise NetworkError(msg) from e
