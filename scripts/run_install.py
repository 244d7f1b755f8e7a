#!/usr/bin/env python3
"""
Install a game version into a game directory.

Runs the installation pipeline on a background worker and prints progress
as it arrives.

Usage:
    python -m scripts.run_install --version 1.20.1
    python -m scripts.run_install --version 1.8.9 --game-dir /tmp/mc --verify-sha1
    python -m scripts.run_install --version 1.20.1 --json-logs --metrics-file metrics.prom
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TextIO

from prometheus_client import generate_latest

from gameinstaller.config import InstallerConfig
from gameinstaller.install.pipeline import InstallPipeline
from gameinstaller.install.worker import InstallWorker
from gameinstaller.logging_config import setup_logging
from gameinstaller.metrics import InstallMetrics
from gameinstaller.progress import (
    TERMINAL_EVENTS,
    Done,
    InstallFailed,
    NewStep,
    NewSubStep,
    NewSubSubStep,
    ProgressEvent,
    QueueProgressReporter,
)

logger = logging.getLogger(__name__)

STEP_NAMES = {
    1: "Version manifest",
    2: "Java runtime",
    3: "Client jar",
    4: "Libraries",
    5: "Assets",
    6: "Logging configuration",
}


def render_event(event: ProgressEvent, out: TextIO, *, detailed: bool = False) -> None:
    """Print one progress event as a line of text."""
    if isinstance(event, NewStep):
        name = STEP_NAMES.get(event.index, "")
        out.write(f"[{event.index}/{event.total}] {name}\n")
    elif isinstance(event, NewSubStep):
        out.write(f"    ({event.index}/{event.total}) {event.label}\n")
    elif isinstance(event, NewSubSubStep):
        # One line per asset or runtime file is too noisy by default
        if detailed or event.index == event.total:
            out.write(f"        ({event.index}/{event.total}) {event.label}\n")
    elif isinstance(event, InstallFailed):
        out.write(f"Installation failed: {event.message}\n")
    elif isinstance(event, Done):
        out.write(f"Installed {event.manifest.id} ({event.manifest.type.value})\n")
    out.flush()


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Install a game version with its runtime, libraries and assets.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        required=True,
        help="Version id to install (e.g., 1.20.1)",
    )
    parser.add_argument(
        "--game-dir",
        type=Path,
        default=None,
        help="Game directory (default: $GAMEINSTALLER_HOME or the platform default)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging and per-file progress",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit JSON log lines instead of human-readable ones",
    )
    parser.add_argument(
        "--verify-sha1",
        action="store_true",
        help="Verify SHA-1 of downloaded files that declare one",
    )
    parser.add_argument(
        "--legacy-library-layout",
        action="store_true",
        help="Store libraries under assets/ instead of libraries/",
    )
    parser.add_argument(
        "--metrics-file",
        type=Path,
        default=None,
        help="Write Prometheus metrics in text format to this path at exit",
    )

    args = parser.parse_args()

    setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        json_format=args.json_logs,
    )

    try:
        config = InstallerConfig(
            game_dir=args.game_dir,
            verify_sha1=args.verify_sha1,
            legacy_library_layout=args.legacy_library_layout,
        )
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    reporter = QueueProgressReporter()
    metrics = InstallMetrics()
    pipeline = InstallPipeline(config, reporter=reporter, metrics=metrics)
    worker = InstallWorker(pipeline, args.version)

    logger.info("Installing %s into %s", args.version, config.game_dir)
    worker.start()

    while True:
        event = reporter.get(timeout=0.5)
        if event is None:
            if not worker.is_alive():
                break
            continue
        render_event(event, sys.stdout, detailed=args.verbose)
        if isinstance(event, TERMINAL_EVENTS):
            break

    reporter.close()
    outcome = worker.join()

    if args.metrics_file is not None:
        args.metrics_file.write_bytes(generate_latest(metrics.registry))

    return 0 if outcome is not None and outcome.success else 1


if __name__ == "__main__":
    sys.exit(main())
