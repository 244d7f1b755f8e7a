"""Client jar and logging configuration installers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gameinstaller.errors import ManifestIncompleteError, NetworkError
from gameinstaller.install.files import ensure_sized_file
from gameinstaller.layout import safe_join

if TYPE_CHECKING:
    from pathlib import Path

    from gameinstaller.fetch import Fetcher
    from gameinstaller.layout import GameLayout
    from gameinstaller.manifest.version import VersionManifest
    from gameinstaller.metrics import InstallMetrics

logger = logging.getLogger(__name__)


async def install_client_jar(
    manifest: VersionManifest,
    layout: GameLayout,
    fetcher: Fetcher,
    metrics: InstallMetrics,
) -> Path:
    """
    Download versions/<id>/<id>.jar unless present with the declared size.

    Returns:
        Path of the client jar.

    Raises:
        ManifestIncompleteError: If the manifest has no downloads section.
    """
    if manifest.downloads is None:
        msg = "No client jar to download in version manifest!"
        raise ManifestIncompleteError(msg)

    client = manifest.downloads.client
    path = layout.client_jar_path(manifest.id)
    downloaded = await ensure_sized_file(
        fetcher,
        client.url,
        path,
        client.size,
        stage="client",
        metrics=metrics,
        sha1=client.sha1,
    )
    logger.info(
        "Client jar ready",
        extra={"version_id": manifest.id, "downloaded": downloaded},
    )
    return path


async def install_logging_config(
    manifest: VersionManifest,
    layout: GameLayout,
    fetcher: Fetcher,
    metrics: InstallMetrics,
) -> Path | None:
    """
    Download the client logging configuration to assets/log_configs/<id>.

    A manifest without logging configuration is valid.

    Returns:
        Path of the configuration file, None if the version declares none.
    """
    if manifest.logging is None or manifest.logging.client is None:
        logger.debug("No logging configuration", extra={"version_id": manifest.id})
        return None

    file = manifest.logging.client.file
    path = safe_join(layout.log_configs_dir, file.id)
    try:
        await ensure_sized_file(
            fetcher,
            file.url,
            path,
            file.size,
            stage="logging",
            metrics=metrics,
            sha1=file.sha1,
        )
    except NetworkError as e:
        msg = f"Unable to download logger file: {e}"
        raise NetworkError(msg) from e
    return path
