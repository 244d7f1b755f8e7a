"""
Installation pipeline.

Runs the six stages in fixed order, each announced by NewStep(i, 6):

1. version folder and manifest (inheritance chain merged here)
2. Java runtime
3. client jar
4. libraries
5. asset index and objects
6. logging configuration

The first InstallError stops the run with a single InstallFailed event;
nothing written so far is removed. A successful run emits Done and then
invokes the launch hook, if any.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from gameinstaller.errors import InstallError, ManifestIncompleteError
from gameinstaller.fetch import HttpFetcher
from gameinstaller.install.artifacts import install_client_jar, install_logging_config
from gameinstaller.install.assets import AssetSynchronizer
from gameinstaller.install.java import JavaRuntimeProvisioner, component_for
from gameinstaller.install.libraries import LibraryInstaller
from gameinstaller.install.resolver import ManifestResolver
from gameinstaller.metrics import InstallMetrics
from gameinstaller.platform_context import detect
from gameinstaller.progress import NullProgressReporter, ProgressReporter

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from gameinstaller.config import InstallerConfig
    from gameinstaller.fetch import Fetcher
    from gameinstaller.install.java import JavaRuntime
    from gameinstaller.install.libraries import InstalledLibraries
    from gameinstaller.manifest.version import VersionManifest
    from gameinstaller.platform_context import PlatformContext

logger = logging.getLogger(__name__)

TOTAL_STEPS = 6


@dataclass
class InstallOutcome:
    """
    Result of one pipeline run.

    Attributes:
        version_id: Requested version.
        manifest: Fully resolved manifest (None on failure).
        error: Message of the fatal error (None on success).
        runtime: Installed Java runtime.
        client_jar: Client jar path.
        libraries: Installed library paths.
        logging_config: Logging configuration path, if the version has one.
        duration_s: Wall-clock duration of the run.
    """

    version_id: str
    manifest: VersionManifest | None = None
    error: str | None = None
    runtime: JavaRuntime | None = None
    client_jar: Path | None = None
    libraries: InstalledLibraries | None = None
    logging_config: Path | None = None
    duration_s: float = 0.0

    @property
    def success(self) -> bool:
        return self.error is None and self.manifest is not None


class InstallPipeline:
    """Installs one version end to end."""

    def __init__(
        self,
        config: InstallerConfig,
        *,
        fetcher: Fetcher | None = None,
        context: PlatformContext | None = None,
        reporter: ProgressReporter | None = None,
        metrics: InstallMetrics | None = None,
        launch_hook: Callable[[InstallOutcome], None] | None = None,
    ) -> None:
        """
        Args:
            config: Installer configuration.
            fetcher: Download port (default: HttpFetcher owned and closed by the pipeline).
            context: Target platform (default: detected).
            reporter: Progress sink (default: discard).
            metrics: Metrics sink (default: private registry).
            launch_hook: Called with the outcome after a successful run.
        """
        self._config = config
        self._owns_fetcher = fetcher is None
        self._fetcher: Fetcher = fetcher or HttpFetcher(
            timeout_s=config.request_timeout_s,
            headers=config.extra_headers,
            verify_sha1=config.verify_sha1,
        )
        self._context = context or detect()
        self._reporter = reporter or NullProgressReporter()
        self._metrics = metrics or InstallMetrics()
        self._launch_hook = launch_hook
        self._layout = config.layout()

    @property
    def metrics(self) -> InstallMetrics:
        return self._metrics

    async def run(self, version_id: str) -> InstallOutcome:
        """
        Install a version.

        Never raises InstallError: failures are reported through the progress
        sink and the returned outcome.

        Args:
            version_id: Version to install.

        Returns:
            InstallOutcome of the run.
        """
        start = time.monotonic()
        outcome = InstallOutcome(version_id=version_id)
        logger.info(
            "Installation started",
            extra={"version_id": version_id, "game_dir": str(self._layout.root)},
        )
        try:
            await self._run_stages(outcome)
        except InstallError as e:
            outcome.error = str(e) or type(e).__name__
            outcome.duration_s = time.monotonic() - start
            logger.error(
                "Installation failed",
                extra={
                    "version_id": version_id,
                    "error_type": type(e).__name__,
                    "error": outcome.error,
                },
            )
            self._metrics.record_run(success=False)
            self._reporter.error(outcome.error)
            return outcome
        finally:
            if self._owns_fetcher:
                await self._fetcher.close()

        outcome.duration_s = time.monotonic() - start
        assert outcome.manifest is not None  # Set by stage 1
        logger.info(
            "Installation completed",
            extra={"version_id": version_id, "duration_s": round(outcome.duration_s, 3)},
        )
        self._metrics.record_run(success=True)
        self._reporter.done(outcome.manifest)
        if self._launch_hook is not None:
            self._launch_hook(outcome)
        return outcome

    async def _run_stages(self, outcome: InstallOutcome) -> None:
        reporter = self._reporter

        reporter.step(1, TOTAL_STEPS)
        resolver = ManifestResolver(
            self._layout,
            self._fetcher,
            version_list_url=self._config.version_list_url,
            reporter=reporter,
            metrics=self._metrics,
        )
        manifest = await resolver.resolve_inherited(outcome.version_id)

        reporter.step(2, TOTAL_STEPS)
        provisioner = JavaRuntimeProvisioner(
            self._layout,
            self._fetcher,
            self._context,
            availability_url=self._config.java_runtime_url,
            reporter=reporter,
            metrics=self._metrics,
        )
        outcome.runtime = await provisioner.ensure(
            component_for(manifest, self._config.default_runtime_component)
        )

        reporter.step(3, TOTAL_STEPS)
        outcome.client_jar = await install_client_jar(
            manifest, self._layout, self._fetcher, self._metrics
        )

        reporter.step(4, TOTAL_STEPS)
        libraries = LibraryInstaller(
            self._layout,
            self._fetcher,
            default_repository=self._config.libraries_url,
            reporter=reporter,
            metrics=self._metrics,
        )
        outcome.libraries = await libraries.install(manifest.libraries, self._context)

        reporter.step(5, TOTAL_STEPS)
        if manifest.asset_index is None:
            msg = "Version manifest doesn't contain any asset index!"
            raise ManifestIncompleteError(msg)
        assets = AssetSynchronizer(
            self._layout,
            self._fetcher,
            resources_url=self._config.resources_url,
            reporter=reporter,
            metrics=self._metrics,
        )
        await assets.sync(manifest.asset_index)

        reporter.step(6, TOTAL_STEPS)
        outcome.logging_config = await install_logging_config(
            manifest, self._layout, self._fetcher, self._metrics
        )

        outcome.manifest = manifest
