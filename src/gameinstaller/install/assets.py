"""Asset index download and content-addressed object synchronization."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gameinstaller.config import RESOURCES_URL
from gameinstaller.errors import FileSystemError
from gameinstaller.install.files import ensure_dir, ensure_sized_file, has_size
from gameinstaller.layout import safe_join
from gameinstaller.manifest.assets import AssetIndex
from gameinstaller.metrics import InstallMetrics
from gameinstaller.progress import NullProgressReporter, ProgressReporter

if TYPE_CHECKING:
    from pathlib import Path

    from gameinstaller.fetch import Fetcher
    from gameinstaller.layout import GameLayout
    from gameinstaller.manifest.version import AssetIndexRef

logger = logging.getLogger(__name__)

STAGE = "assets"


class AssetSynchronizer:
    """
    Synchronizes an asset index and its objects into the game directory.

    Objects are stored by content hash so identical assets are shared
    between versions. Indexes flagged map_to_resources are additionally
    copied by logical name into the legacy resources tree.
    """

    def __init__(
        self,
        layout: GameLayout,
        fetcher: Fetcher,
        *,
        resources_url: str = RESOURCES_URL,
        reporter: ProgressReporter | None = None,
        metrics: InstallMetrics | None = None,
    ) -> None:
        self._layout = layout
        self._fetcher = fetcher
        self._resources_url = resources_url
        self._reporter = reporter or NullProgressReporter()
        self._metrics = metrics or InstallMetrics()

    async def load_index(self, ref: AssetIndexRef) -> AssetIndex:
        """
        Return the asset index, downloading it if missing or of the wrong size.

        Raises:
            NetworkError: If the index download fails.
            FileSystemError: If the cached index cannot be read.
            ParseError: If the index is malformed.
        """
        path = self._layout.asset_index_path(ref.id)
        await ensure_sized_file(
            self._fetcher,
            ref.url,
            path,
            ref.size,
            stage=STAGE,
            metrics=self._metrics,
            sha1=ref.sha1,
        )
        try:
            data = path.read_bytes()
        except OSError as e:
            msg = f"Unable to read asset index {path}: {e}"
            raise FileSystemError(msg) from e
        return AssetIndex.parse(data)

    async def sync_objects(self, index: AssetIndex) -> int:
        """
        Download every missing or size-mismatched object, in index order.

        Returns:
            Number of objects downloaded.
        """
        objects_dir = self._layout.objects_dir
        total = len(index)
        downloaded = 0
        for position, (name, obj) in enumerate(index.objects.items(), start=1):
            self._reporter.sub_sub_step(name, position, total)
            path = obj.object_path(objects_dir)
            if has_size(path, obj.size):
                self._metrics.record_skip(STAGE)
                continue
            ensure_dir(path.parent)
            written = await self._fetcher.download_to(
                obj.download_url(self._resources_url), path, sha1=obj.hash
            )
            self._metrics.record_download(STAGE, written)
            downloaded += 1
        return downloaded

    def copy_to_resources(self, index: AssetIndex) -> None:
        """
        Copy synced objects to resources/<logical path>.

        Raises:
            FileSystemError: If an object is missing or a copy fails.
        """
        objects_dir = self._layout.objects_dir
        resources_dir = self._layout.resources_dir
        total = len(index)
        for position, (name, obj) in enumerate(index.objects.items(), start=1):
            self._reporter.sub_sub_step(name, position, total)
            source = obj.object_path(objects_dir)
            target: Path = safe_join(resources_dir, name)
            try:
                data = source.read_bytes()
            except OSError as e:
                msg = f"Asset object {obj.hash} for {name} is missing: {e}"
                raise FileSystemError(msg) from e
            ensure_dir(target.parent)
            try:
                target.write_bytes(data)
            except OSError as e:
                msg = f"Unable to write resource {target}: {e}"
                raise FileSystemError(msg) from e

    async def sync(self, ref: AssetIndexRef) -> AssetIndex:
        """
        Synchronize the assets of an index reference.

        Args:
            ref: assetIndex entry of the version manifest.

        Returns:
            The parsed asset index.

        Raises:
            NetworkError: If a download fails.
            FileSystemError: If a file cannot be read or written.
            ParseError: If the index is malformed.
        """
        self._reporter.sub_step("Checking asset index", 1, 3)
        index = await self.load_index(ref)

        self._reporter.sub_step("Installing missing assets", 2, 3)
        downloaded = await self.sync_objects(index)
        logger.info(
            "Assets synchronized",
            extra={"index_id": ref.id, "objects": len(index), "downloaded": downloaded},
        )

        if index.map_to_resources:
            self._reporter.sub_step("Relocating to resources folder", 3, 3)
            self.copy_to_resources(index)
            logger.info("Assets copied to resources", extra={"index_id": ref.id})

        return index
