"""
Managed Java runtime provisioning.

The availability manifest lists, per platform key and runtime component,
candidate builds; the first candidate is installed. A ".version" marker in
runtime/<component>/<platform key>/ records the installed build name and a
mismatch (or unreadable marker) triggers a reinstall. When the availability
manifest cannot be fetched, an already installed runtime is accepted as is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from gameinstaller.config import DEFAULT_RUNTIME_COMPONENT, JAVA_RUNTIME_URL
from gameinstaller.errors import (
    FileSystemError,
    ManifestIncompleteError,
    NetworkError,
    ParseError,
    PlatformUnsupportedError,
)
from gameinstaller.install.files import ensure_dir
from gameinstaller.layout import safe_join
from gameinstaller.manifest.java import (
    JavaFilesManifest,
    JavaRuntimeAvailability,
    JavaRuntimeFileEntry,
    RuntimeCandidate,
    RuntimeFileKind,
)
from gameinstaller.metrics import InstallMetrics
from gameinstaller.progress import NullProgressReporter, ProgressReporter

if TYPE_CHECKING:
    from gameinstaller.fetch import Fetcher
    from gameinstaller.layout import GameLayout
    from gameinstaller.manifest.version import VersionManifest
    from gameinstaller.platform_context import PlatformContext

logger = logging.getLogger(__name__)

STAGE = "runtime"

EXECUTABLE_MODE = 0o755

_TOTAL_SUB_STEPS = 5


def component_for(manifest: VersionManifest, default: str = DEFAULT_RUNTIME_COMPONENT) -> str:
    """Runtime component required by a version, defaulting to the legacy runtime."""
    if manifest.java_version is None:
        return default
    return manifest.java_version.component


def link_target(link_path: Path, target: str) -> Path:
    """
    Absolute target of a runtime link entry.

    Resolution starts at the link's own path; each ".." segment removes two
    components (the link's file name and one directory level), any other
    segment is appended.

        link_target(Path("/rt/lib/libjli.so"), "../lib/jli/libjli.so")
        -> Path("/rt/lib/jli/libjli.so")
    """
    resolved = link_path
    for segment in PurePosixPath(target).parts:
        if segment == "..":
            resolved = resolved.parent.parent
        else:
            resolved = resolved / segment
    return resolved


@dataclass(frozen=True)
class JavaRuntime:
    """
    An installed runtime.

    Attributes:
        component: Runtime component name.
        version: Installed build name, None when accepted offline.
        root: Runtime tree root.
        binary: Java executable.
    """

    component: str
    version: str | None
    root: Path
    binary: Path


class JavaRuntimeProvisioner:
    """Installs the Java runtime component a version requires."""

    def __init__(
        self,
        layout: GameLayout,
        fetcher: Fetcher,
        context: PlatformContext,
        *,
        availability_url: str = JAVA_RUNTIME_URL,
        reporter: ProgressReporter | None = None,
        metrics: InstallMetrics | None = None,
    ) -> None:
        self._layout = layout
        self._fetcher = fetcher
        self._context = context
        self._availability_url = availability_url
        self._reporter = reporter or NullProgressReporter()
        self._metrics = metrics or InstallMetrics()

    def _platform_key(self) -> str:
        key = self._context.runtime_key
        if key is None:
            msg = (
                f"No managed Java runtime is distributed for "
                f"{self._context.os_name}/{self._context.arch}"
            )
            raise PlatformUnsupportedError(msg)
        return key

    def _runtime(self, component: str, key: str, version: str | None) -> JavaRuntime:
        root = self._layout.runtime_root(component, key)
        return JavaRuntime(
            component=component,
            version=version,
            root=root,
            binary=root.joinpath(*self._context.java_binary.parts),
        )

    def installed_version(self, component: str) -> str | None:
        """Build name recorded in the marker, None if absent or unreadable."""
        key = self._platform_key()
        marker = self._layout.runtime_marker(component, key)
        try:
            return marker.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return None

    async def _fetch_availability(self) -> JavaRuntimeAvailability:
        data = await self._fetcher.fetch_bytes(self._availability_url)
        self._metrics.record_download(STAGE, len(data))
        return JavaRuntimeAvailability.parse(data)

    def _accept_offline(self, component: str, error: Exception) -> JavaRuntime:
        self._reporter.sub_step("Checking if required version is installed", 3, _TOTAL_SUB_STEPS)
        runtime = self._runtime(component, self._platform_key(), None)
        if not runtime.binary.is_file():
            msg = f"Unable to fetch Java runtime list and no {component} runtime is installed: {error}"
            raise NetworkError(msg) from error
        logger.warning(
            "Java runtime list unavailable, using installed runtime",
            extra={"component": component, "error": str(error)},
        )
        self._metrics.record_skip(STAGE)
        self._reporter.sub_step("Done", 5, _TOTAL_SUB_STEPS)
        return runtime

    def _select(self, availability: JavaRuntimeAvailability, component: str) -> RuntimeCandidate:
        key = self._platform_key()
        candidates = availability.candidates(key, component)
        if not candidates:
            msg = f"No {component} Java runtime available for platform {key}"
            raise ManifestIncompleteError(msg)
        return candidates[0]

    async def ensure(self, component: str) -> JavaRuntime:
        """
        Make sure a runtime component is installed and up to date.

        Args:
            component: Runtime component (see component_for()).

        Returns:
            The installed runtime.

        Raises:
            PlatformUnsupportedError: If no runtime exists for this platform, or a
                link entry is required on a platform without symlinks.
            ManifestIncompleteError: If the component has no candidate build.
            NetworkError: If a download fails, or the runtime list is unavailable
                and nothing is installed.
            FileSystemError: If files or the marker cannot be written.
        """
        self._reporter.sub_step("Downloading java versions manifest", 1, _TOTAL_SUB_STEPS)
        try:
            availability = await self._fetch_availability()
        except (NetworkError, ParseError) as e:
            return self._accept_offline(component, e)

        self._reporter.sub_step("Getting right java version", 2, _TOTAL_SUB_STEPS)
        candidate = self._select(availability, component)
        key = self._platform_key()
        runtime = self._runtime(component, key, candidate.version.name)

        self._reporter.sub_step("Checking if required version is installed", 3, _TOTAL_SUB_STEPS)
        installed = self.installed_version(component) if runtime.root.is_dir() else None
        if installed == candidate.version.name:
            logger.info(
                "Java runtime up to date",
                extra={"component": component, "runtime_version": installed},
            )
            self._metrics.record_skip(STAGE)
        else:
            self._reporter.sub_step("Installing missing files", 4, _TOTAL_SUB_STEPS)
            await self.install(component, key, candidate)

        self._reporter.sub_step("Done", 5, _TOTAL_SUB_STEPS)
        return runtime

    async def install(self, component: str, key: str, candidate: RuntimeCandidate) -> None:
        """Install a candidate build and write its marker."""
        logger.info(
            "Installing Java runtime",
            extra={
                "component": component,
                "platform_key": key,
                "runtime_version": candidate.version.name,
            },
        )
        data = await self._fetcher.fetch_bytes(candidate.manifest.url)
        self._metrics.record_download(STAGE, len(data))
        files = JavaFilesManifest.parse(data)

        root = ensure_dir(self._layout.runtime_root(component, key))
        total = len(files.files) + 1
        for index, (relative, entry) in enumerate(files.files.items(), start=1):
            self._reporter.sub_sub_step(relative, index, total)
            await self._install_entry(root, relative, entry)

        self._reporter.sub_sub_step(".version", total, total)
        marker = self._layout.runtime_marker(component, key)
        try:
            marker.write_text(candidate.version.name, encoding="utf-8")
        except OSError as e:
            msg = f"Unable to write runtime marker {marker}: {e}"
            raise FileSystemError(msg) from e

    async def _install_entry(self, root: Path, relative: str, entry: JavaRuntimeFileEntry) -> None:
        path = safe_join(root, relative)
        kind = entry.kind
        if kind is RuntimeFileKind.DIRECTORY:
            ensure_dir(path)
        elif kind is RuntimeFileKind.FILE:
            if entry.downloads is None:
                msg = f"Runtime file {relative} has no download"
                raise ManifestIncompleteError(msg)
            raw = entry.downloads.raw
            written = await self._fetcher.download_to(raw.url, path, sha1=raw.sha1)
            self._metrics.record_download(STAGE, written)
            if entry.executable:
                self._set_executable(path)
        elif kind is RuntimeFileKind.LINK:
            if entry.target is None:
                msg = f"Runtime link {relative} has no target"
                raise ManifestIncompleteError(msg)
            self._create_link(path, entry.target)
        else:
            logger.warning(
                "Unknown runtime entry type, skipping",
                extra={"entry": relative, "entry_type": entry.type},
            )

    def _set_executable(self, path: Path) -> None:
        if not self._context.supports_exec_bit:
            logger.warning(
                "Executable permission not supported on this platform",
                extra={"runtime_file": path.name, "os": self._context.os_name},
            )
            return
        try:
            path.chmod(EXECUTABLE_MODE)
        except OSError as e:
            msg = f"Unable to set executable permission on {path}: {e}"
            raise FileSystemError(msg) from e

    def _create_link(self, path: Path, target: str) -> None:
        if not self._context.supports_symlinks:
            msg = f"Symbolic links are not supported on {self._context.os_name}: {path}"
            raise PlatformUnsupportedError(msg)
        ensure_dir(path.parent)
        try:
            if path.is_symlink() or path.is_file():
                path.unlink()
            path.symlink_to(link_target(path, target))
        except OSError as e:
            msg = f"Unable to create link {path} -> {target}: {e}"
            raise FileSystemError(msg) from e
