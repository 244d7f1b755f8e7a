"""
Library installation.

Libraries are processed strictly in manifest order and the first fatal
error stops the run; artifacts already written stay on disk. For each
library allowed by its rules:

1. the direct artifact is downloaded unless present with its declared size
2. a native classifier for the current OS is downloaded the same way
3. without any descriptor, the library's own Maven repository is tried
4. failing that, the default repository (fetched only when missing)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from gameinstaller.config import LIBRARIES_URL
from gameinstaller.errors import ManifestIncompleteError
from gameinstaller.install.files import ensure_existing_file, ensure_sized_file
from gameinstaller.metrics import InstallMetrics
from gameinstaller.progress import NullProgressReporter, ProgressReporter
from gameinstaller.manifest.rules import is_allowed

if TYPE_CHECKING:
    from collections.abc import Sequence

    from gameinstaller.fetch import Fetcher
    from gameinstaller.layout import GameLayout
    from gameinstaller.manifest.version import Library, LibraryArtifact
    from gameinstaller.platform_context import PlatformContext

logger = logging.getLogger(__name__)

STAGE = "libraries"


def maven_path(coordinate: str) -> str:
    """
    Repository-relative jar path of a Maven coordinate.

    "org.lwjgl:lwjgl:3.2.1" -> "org/lwjgl/lwjgl/3.2.1/lwjgl-3.2.1.jar"
    "org.lwjgl:lwjgl:3.3.1:natives-linux"
        -> "org/lwjgl/lwjgl/3.3.1/lwjgl-3.3.1-natives-linux.jar"

    Raises:
        ManifestIncompleteError: If the coordinate is not group:artifact:version[:classifier].
    """
    parts = coordinate.split(":")
    if len(parts) not in (3, 4) or not all(parts):
        msg = f"Invalid library coordinate: {coordinate!r}"
        raise ManifestIncompleteError(msg)
    group, name, version = parts[:3]
    suffix = f"-{parts[3]}" if len(parts) == 4 else ""
    return f"{group.replace('.', '/')}/{name}/{version}/{name}-{version}{suffix}.jar"


def repository_url(base_url: str, coordinate: str) -> str:
    """Download URL of a coordinate in a Maven repository."""
    return f"{base_url.rstrip('/')}/{maven_path(coordinate)}"


@dataclass
class InstalledLibraries:
    """
    Result of a library installation, consumed by launch preparation.

    Attributes:
        classpath: Jar paths to put on the class path, in manifest order.
        natives: Native classifier jars to extract, in manifest order.
        skipped: Coordinates excluded by their rules.
    """

    classpath: list[Path] = field(default_factory=list)
    natives: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class LibraryInstaller:
    """Materializes the libraries of a version manifest."""

    def __init__(
        self,
        layout: GameLayout,
        fetcher: Fetcher,
        *,
        default_repository: str = LIBRARIES_URL,
        reporter: ProgressReporter | None = None,
        metrics: InstallMetrics | None = None,
    ) -> None:
        self._layout = layout
        self._fetcher = fetcher
        self._default_repository = default_repository
        self._reporter = reporter or NullProgressReporter()
        self._metrics = metrics or InstallMetrics()

    async def _ensure_artifact(self, artifact: LibraryArtifact) -> Path:
        path = self._layout.library_path(artifact.path)
        await ensure_sized_file(
            self._fetcher,
            artifact.url,
            path,
            artifact.size,
            stage=STAGE,
            metrics=self._metrics,
            sha1=artifact.sha1,
        )
        return path

    async def _ensure_from_repository(self, library: Library, base_url: str) -> Path:
        relative = maven_path(library.name)
        path = self._layout.library_path(relative)
        await ensure_existing_file(
            self._fetcher,
            repository_url(base_url, library.name),
            path,
            stage=STAGE,
            metrics=self._metrics,
        )
        return path

    async def install_one(
        self,
        library: Library,
        context: PlatformContext,
        result: InstalledLibraries,
    ) -> None:
        """
        Install a single library and record its paths into result.

        Raises:
            ManifestIncompleteError: If the OS maps to a native classifier the
                library does not provide.
            NetworkError: If a download fails.
            FileSystemError: If a file cannot be written.
        """
        if not is_allowed(library.rules, context):
            logger.debug("Library disallowed by rules", extra={"library": library.name})
            result.skipped.append(library.name)
            return

        fetched = False
        downloads = library.downloads

        if downloads is not None and downloads.artifact is not None:
            result.classpath.append(await self._ensure_artifact(downloads.artifact))
            fetched = True

        classifiers = (downloads.classifiers if downloads is not None else None) or {}
        native_name = library.native_classifier(context)
        if native_name is not None:
            native = classifiers.get(native_name)
            if native is None:
                msg = (
                    f"Library {library.name} declares native {native_name!r} "
                    f"for {context.os_name} but provides no such classifier"
                )
                raise ManifestIncompleteError(msg)
            result.natives.append(await self._ensure_artifact(native))
            fetched = True

        if not fetched and library.url:
            result.classpath.append(await self._ensure_from_repository(library, library.url))
            fetched = True

        if not fetched:
            result.classpath.append(
                await self._ensure_from_repository(library, self._default_repository)
            )

    async def install(
        self,
        libraries: Sequence[Library],
        context: PlatformContext,
    ) -> InstalledLibraries:
        """
        Install libraries in order, stopping at the first failure.

        Args:
            libraries: Libraries from the (merged) version manifest.
            context: Platform the rules and natives are evaluated for.

        Returns:
            Paths of the installed class-path and native artifacts.
        """
        result = InstalledLibraries()
        total = len(libraries)
        for index, library in enumerate(libraries, start=1):
            self._reporter.sub_step(f"{library.artifact}-{library.version}", index, total)
            await self.install_one(library, context, result)

        logger.info(
            "Libraries installed",
            extra={
                "count": total,
                "classpath": len(result.classpath),
                "natives": len(result.natives),
                "skipped": len(result.skipped),
            },
        )
        return result
