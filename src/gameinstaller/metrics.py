"""
Prometheus metrics for installation runs.

Only low-cardinality labels are used: the stage name and the run outcome.
URLs, paths, version ids and asset names never become labels.
"""

from __future__ import annotations

from prometheus_client import Counter
from prometheus_client.registry import CollectorRegistry

# Forbidden labels that would cause cardinality explosion
FORBIDDEN_LABELS = frozenset({"url", "path", "version", "asset", "library", "hash"})

STAGES = ("manifest", "runtime", "client", "libraries", "assets", "logging")


class InstallMetrics:
    """
    Counters for one installer process.

    Usage:
        registry = CollectorRegistry()
        metrics = InstallMetrics(registry=registry)
        metrics.record_download("assets", 1234)
        # generate_latest(registry) -> bytes for a /metrics endpoint
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """
        Args:
            registry: Prometheus CollectorRegistry. If None, a private one is created.
        """
        self._registry = registry or CollectorRegistry()

        self._files_downloaded = Counter(
            "gameinstaller_files_downloaded",
            "Files downloaded, by pipeline stage",
            ["stage"],
            registry=self._registry,
        )
        self._bytes_downloaded = Counter(
            "gameinstaller_bytes_downloaded",
            "Bytes written by downloads, by pipeline stage",
            ["stage"],
            registry=self._registry,
        )
        self._files_skipped = Counter(
            "gameinstaller_files_skipped",
            "Files already present and up to date, by pipeline stage",
            ["stage"],
            registry=self._registry,
        )
        self._runs = Counter(
            "gameinstaller_runs",
            "Pipeline runs by outcome",
            ["outcome"],
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Get the Prometheus registry."""
        return self._registry

    def record_download(self, stage: str, size: int) -> None:
        """Count one downloaded file of `size` bytes."""
        self._files_downloaded.labels(stage=stage).inc()
        self._bytes_downloaded.labels(stage=stage).inc(size)

    def record_skip(self, stage: str) -> None:
        """Count one file that did not need downloading."""
        self._files_skipped.labels(stage=stage).inc()

    def record_run(self, success: bool) -> None:
        """Count one finished pipeline run."""
        self._runs.labels(outcome="success" if success else "error").inc()

    def downloaded(self, stage: str) -> float:
        """Current downloaded-files count for a stage."""
        value = self._registry.get_sample_value(
            "gameinstaller_files_downloaded_total", {"stage": stage}
        )
        return value or 0.0

    def skipped(self, stage: str) -> float:
        """Current skipped-files count for a stage."""
        value = self._registry.get_sample_value(
            "gameinstaller_files_skipped_total", {"stage": stage}
        )
        return value or 0.0

    def downloaded_bytes(self, stage: str) -> float:
        """Current downloaded-bytes total for a stage."""
        value = self._registry.get_sample_value(
            "gameinstaller_bytes_downloaded_total", {"stage": stage}
        )
        return value or 0.0
