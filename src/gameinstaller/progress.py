"""
Installation progress events and sinks.

Events are hierarchical: a step (pipeline stage), sub-steps inside it and
sub-sub-steps inside those, followed by exactly one terminal event
(InstallFailed or Done) per pipeline run.

Delivery is one-way and best-effort: a sink that fails or whose observer
went away never blocks or aborts the installation.
"""

from __future__ import annotations

import logging
import queue
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from gameinstaller.manifest.version import VersionManifest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewStep:
    """A pipeline stage started (1-based index)."""

    index: int
    total: int


@dataclass(frozen=True)
class NewSubStep:
    """Progress inside the current stage."""

    label: str
    index: int
    total: int


@dataclass(frozen=True)
class NewSubSubStep:
    """Progress inside the current sub-step (e.g. one asset)."""

    label: str
    index: int
    total: int


@dataclass(frozen=True)
class InstallFailed:
    """Terminal: the run stopped on a fatal error."""

    message: str


@dataclass(frozen=True)
class Done:
    """Terminal: every stage completed."""

    manifest: VersionManifest


ProgressEvent = NewStep | NewSubStep | NewSubSubStep | InstallFailed | Done

TERMINAL_EVENTS = (InstallFailed, Done)


class ProgressReporter(ABC):
    """Abstract progress sink."""

    @abstractmethod
    def _deliver(self, event: ProgressEvent) -> None:
        """Hand one event to the observer. May raise; failures are swallowed."""
        ...

    def report(self, event: ProgressEvent) -> None:
        """Publish an event, best-effort."""
        try:
            self._deliver(event)
        except Exception as e:
            logger.debug(
                "Progress event dropped",
                extra={"event": type(event).__name__, "error": str(e)},
            )

    def step(self, index: int, total: int) -> None:
        self.report(NewStep(index, total))

    def sub_step(self, label: str, index: int, total: int) -> None:
        self.report(NewSubStep(label, index, total))

    def sub_sub_step(self, label: str, index: int, total: int) -> None:
        self.report(NewSubSubStep(label, index, total))

    def error(self, message: str) -> None:
        self.report(InstallFailed(message))

    def done(self, manifest: VersionManifest) -> None:
        self.report(Done(manifest))


class NullProgressReporter(ProgressReporter):
    """Sink that discards every event."""

    def _deliver(self, event: ProgressEvent) -> None:
        return None


class CallbackProgressReporter(ProgressReporter):
    """Sink forwarding each event to a callable."""

    def __init__(self, callback: Callable[[ProgressEvent], None]) -> None:
        self._callback = callback

    def _deliver(self, event: ProgressEvent) -> None:
        self._callback(event)


class ObserverGoneError(RuntimeError):
    """Raised internally when publishing to a closed queue reporter."""


class QueueProgressReporter(ProgressReporter):
    """
    Thread-safe ordered channel to a single consumer.

    Any number of producers may publish; the consumer reads with get() or
    drain(). After close() events are dropped silently.
    """

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[ProgressEvent] = queue.SimpleQueue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Signal that the observer went away."""
        self._closed = True

    def _deliver(self, event: ProgressEvent) -> None:
        if self._closed:
            raise ObserverGoneError("progress observer closed")
        self._queue.put(event)

    def get(self, timeout: float | None = None) -> ProgressEvent | None:
        """
        Wait for the next event.

        Args:
            timeout: Seconds to wait (None waits forever).

        Returns:
            Next event, or None on timeout.
        """
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> list[ProgressEvent]:
        """Return every event currently queued, without waiting."""
        events: list[ProgressEvent] = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events
