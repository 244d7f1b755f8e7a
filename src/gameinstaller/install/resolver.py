"""
Version manifest resolution and inheritance.

A manifest is read from versions/<id>/<id>.json when present; otherwise it
is located in the top-level version list, downloaded to that path, then
parsed. Manifests declaring "inheritsFrom" are merged with their parent one
hop at a time; resolve_inherited() walks the chain iteratively and rejects
cycles.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gameinstaller.errors import FileSystemError, InheritanceError, ManifestIncompleteError
from gameinstaller.manifest.version import Arguments, VersionManifest
from gameinstaller.manifest.version_list import VersionList
from gameinstaller.metrics import InstallMetrics
from gameinstaller.progress import NullProgressReporter, ProgressReporter

if TYPE_CHECKING:
    from gameinstaller.fetch import Fetcher
    from gameinstaller.layout import GameLayout

logger = logging.getLogger(__name__)

STAGE = "manifest"

# Optional fields where the child's value wins and the parent's fills gaps
_INHERITED_SCALARS = (
    "asset_index",
    "assets",
    "compliance_level",
    "java_version",
    "logging",
    "minimum_launcher_version",
    "minecraft_arguments",
    "time",
)


def _merge_arguments(child: Arguments | None, parent: Arguments | None) -> Arguments | None:
    if child is None:
        return parent
    if parent is None:
        return child
    if child.jvm is None:
        jvm = parent.jvm
    elif parent.jvm is None:
        jvm = child.jvm
    else:
        jvm = [*child.jvm, *parent.jvm]
    return Arguments(game=[*child.game, *parent.game], jvm=jvm)


def merge_manifests(child: VersionManifest, parent: VersionManifest) -> VersionManifest:
    """
    Merge a child manifest with its direct parent.

    Policy:
    - Optional scalars: child value if present, else parent's.
    - libraries: child's followed by parent's (no deduplication).
    - arguments.game / arguments.jvm: concatenated independently, child first.
    - downloads: missing client_mappings/server/server_mappings filled from
      parent; the client entry is never overwritten.
    - inheritsFrom: becomes the parent's, so chains can be walked hop by hop.

    Args:
        child: Manifest declaring inheritsFrom.
        parent: Manifest named by child.inherits_from.

    Returns:
        New merged manifest (inputs are not modified).

    Raises:
        InheritanceError: If child.inherits_from does not name parent.id.
    """
    if child.inherits_from != parent.id:
        msg = (
            f"Version {child.id} inherits from {child.inherits_from!r}, "
            f"cannot merge with {parent.id!r}"
        )
        raise InheritanceError(msg)

    update: dict[str, object] = {}
    for name in _INHERITED_SCALARS:
        if getattr(child, name) is None:
            update[name] = getattr(parent, name)

    update["arguments"] = _merge_arguments(child.arguments, parent.arguments)

    if child.downloads is None:
        update["downloads"] = parent.downloads
    elif parent.downloads is not None:
        fill = {
            name: getattr(parent.downloads, name)
            for name in ("client_mappings", "server", "server_mappings")
            if getattr(child.downloads, name) is None
        }
        update["downloads"] = child.downloads.model_copy(update=fill)

    update["libraries"] = [*child.libraries, *parent.libraries]
    update["inherits_from"] = parent.inherits_from

    return child.model_copy(update=update)


class ManifestResolver:
    """Loads version manifests from the game directory or the version list."""

    def __init__(
        self,
        layout: GameLayout,
        fetcher: Fetcher,
        *,
        version_list_url: str,
        reporter: ProgressReporter | None = None,
        metrics: InstallMetrics | None = None,
    ) -> None:
        """
        Args:
            layout: Game directory layout.
            fetcher: Download port.
            version_list_url: Top-level version list URL.
            reporter: Progress sink (default: discard).
            metrics: Metrics sink (default: private registry).
        """
        self._layout = layout
        self._fetcher = fetcher
        self._version_list_url = version_list_url
        self._reporter = reporter or NullProgressReporter()
        self._metrics = metrics or InstallMetrics()
        self._version_list: VersionList | None = None

    async def version_list(self) -> VersionList:
        """Fetch the top-level version list once per resolver."""
        if self._version_list is None:
            logger.info("Fetching version list")
            data = await self._fetcher.fetch_bytes(self._version_list_url)
            self._version_list = VersionList.parse(data)
        return self._version_list

    async def resolve(self, version_id: str, *, subject: str = "Version") -> VersionManifest:
        """
        Load one manifest, downloading and persisting it if missing locally.

        Args:
            version_id: Version to resolve.
            subject: Name used in the sub-step labels ("parent <id>" for parents).

        Returns:
            Parsed manifest (not merged with any parent).

        Raises:
            ManifestIncompleteError: If the version is neither local nor listed.
            NetworkError: If a download fails.
            FileSystemError: If the manifest cannot be written or read.
            ParseError: If the manifest is malformed.
        """
        self._reporter.sub_step(f"Checking {subject} folder", 1, 3)
        path = self._layout.version_manifest_path(version_id)

        if path.is_file():
            self._metrics.record_skip(STAGE)
        else:
            entry = (await self.version_list()).get(version_id)
            if entry is None:
                msg = f"Version {version_id} is not installed and not in the version list"
                raise ManifestIncompleteError(msg)
            self._reporter.sub_step(f"Downloading {subject} manifest", 2, 3)
            written = await self._fetcher.download_to(entry.url, path, sha1=entry.sha1)
            self._metrics.record_download(STAGE, written)
            logger.info("Downloaded version manifest", extra={"version_id": version_id})

        self._reporter.sub_step(f"Reading {subject} manifest", 3, 3)
        try:
            data = path.read_bytes()
        except OSError as e:
            msg = f"Unable to read version manifest {path}: {e}"
            raise FileSystemError(msg) from e
        return VersionManifest.parse(data)

    async def resolve_inherited(self, version_id: str) -> VersionManifest:
        """
        Load a manifest and merge its whole inheritance chain.

        Raises:
            InheritanceError: On a parent id mismatch or an inheritance cycle.
        """
        manifest = await self.resolve(version_id)
        chain = [manifest.id]
        while manifest.inherits_from is not None:
            parent_id = manifest.inherits_from
            if parent_id in chain:
                msg = f"Inheritance cycle detected: {' -> '.join([*chain, parent_id])}"
                raise InheritanceError(msg)
            chain.append(parent_id)
            logger.info(
                "Merging parent manifest",
                extra={"version_id": manifest.id, "parent_id": parent_id},
            )
            parent = await self.resolve(parent_id, subject=f"parent {parent_id}")
            manifest = merge_manifests(manifest, parent)
        return manifest
