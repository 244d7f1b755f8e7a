"""Shared "download unless already present" helpers for installer stages."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gameinstaller.errors import FileSystemError

if TYPE_CHECKING:
    from pathlib import Path

    from gameinstaller.fetch import Fetcher
    from gameinstaller.metrics import InstallMetrics

logger = logging.getLogger(__name__)


def has_size(path: Path, size: int) -> bool:
    """
    Check that a regular file exists with the declared byte length.

    Unreadable metadata counts as "not present" so the caller re-downloads.
    """
    try:
        return path.is_file() and path.stat().st_size == size
    except OSError:
        return False


def ensure_dir(path: Path) -> Path:
    """Create a directory and its parents, wrapping failures in FileSystemError."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        msg = f"Unable to create directory {path}: {e}"
        raise FileSystemError(msg) from e
    return path


async def ensure_sized_file(
    fetcher: Fetcher,
    url: str,
    path: Path,
    size: int,
    *,
    stage: str,
    metrics: InstallMetrics,
    sha1: str | None = None,
) -> bool:
    """
    Download a file unless it already exists with the declared size.

    Args:
        fetcher: Download port.
        url: Source URL.
        path: Destination.
        size: Declared size in bytes.
        stage: Pipeline stage name (metrics label).
        metrics: Metrics sink.
        sha1: Declared SHA-1 (checked only if the fetcher verifies hashes).

    Returns:
        True if a download happened.
    """
    if has_size(path, size):
        metrics.record_skip(stage)
        return False
    written = await fetcher.download_to(url, path, sha1=sha1)
    metrics.record_download(stage, written)
    return True


async def ensure_existing_file(
    fetcher: Fetcher,
    url: str,
    path: Path,
    *,
    stage: str,
    metrics: InstallMetrics,
) -> bool:
    """
    Download a file only if nothing exists at its path (no size check).

    Returns:
        True if a download happened.
    """
    if path.exists():
        metrics.record_skip(stage)
        return False
    written = await fetcher.download_to(url, path)
    metrics.record_download(stage, written)
    return True
