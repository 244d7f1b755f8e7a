"""
Background installation worker.

The pipeline runs on a dedicated thread with its own event loop, so the
caller (typically a UI loop) only consumes progress events, e.g. from a
QueueProgressReporter. There is no cancellation: a run always finishes or
fails on its own.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gameinstaller.install.pipeline import InstallOutcome, InstallPipeline

logger = logging.getLogger(__name__)


class InstallWorker:
    """Runs one InstallPipeline.run() on a background thread."""

    def __init__(self, pipeline: InstallPipeline, version_id: str) -> None:
        self._pipeline = pipeline
        self._version_id = version_id
        self._outcome: InstallOutcome | None = None
        self._exception: BaseException | None = None
        self._thread = threading.Thread(
            target=self._run,
            name=f"install-{version_id}",
            daemon=True,
        )

    @property
    def version_id(self) -> str:
        return self._version_id

    @property
    def outcome(self) -> InstallOutcome | None:
        """Outcome of the run, None while running."""
        return self._outcome

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def start(self) -> None:
        """Start the installation thread."""
        logger.debug("Starting install worker", extra={"version_id": self._version_id})
        self._thread.start()

    def _run(self) -> None:
        try:
            self._outcome = asyncio.run(self._pipeline.run(self._version_id))
        except Exception as e:
            logger.exception(
                "Install worker crashed",
                extra={"version_id": self._version_id, "error": str(e)},
            )
            self._exception = e

    def join(self, timeout: float | None = None) -> InstallOutcome | None:
        """
        Wait for the run to finish.

        Args:
            timeout: Seconds to wait (None waits forever).

        Returns:
            The outcome, or None if the thread is still running after timeout.

        Raises:
            Exception: Whatever unexpected error ended the worker thread
                (installation failures are reported in the outcome instead).
        """
        self._thread.join(timeout)
        if self._thread.is_alive():
            return None
        if self._exception is not None:
            raise self._exception
        return self._outcome
