#!/usr/bin/env python3
"""
List the versions of an artifact published in a Maven repository.

Fetches <repository>/<group path>/<artifact>/maven-metadata.xml and prints
the release version followed by every listed version.

Usage:
    python -m scripts.maven_versions net.fabricmc:fabric-loader
    python -m scripts.maven_versions org.lwjgl:lwjgl --repository https://repo1.maven.org/maven2
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from gameinstaller.config import LIBRARIES_URL
from gameinstaller.errors import InstallError
from gameinstaller.fetch import Fetcher, HttpFetcher
from gameinstaller.logging_config import setup_logging
from gameinstaller.manifest.maven import MavenMetadata, metadata_url

logger = logging.getLogger(__name__)


async def fetch_metadata(fetcher: Fetcher, repository: str, coordinate: str) -> MavenMetadata:
    """
    Fetch and parse the metadata of "group:artifact".

    Raises:
        ValueError: If the coordinate is not group:artifact.
        NetworkError: If the download fails.
        ParseError: If the XML is malformed.
    """
    parts = coordinate.split(":")
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"Expected 'group:artifact', got {coordinate!r}")
    group_id, artifact_id = parts
    data = await fetcher.fetch_bytes(metadata_url(repository, group_id, artifact_id))
    return MavenMetadata.parse_xml(data)


async def run(repository: str, coordinate: str, timeout_s: float) -> int:
    fetcher = HttpFetcher(timeout_s=timeout_s)
    try:
        metadata = await fetch_metadata(fetcher, repository, coordinate)
    except (InstallError, ValueError) as e:
        logger.error("Unable to get Maven metadata: %s", e)
        return 1
    finally:
        await fetcher.close()

    print(f"{metadata.group_id}:{metadata.artifact_id}")
    print(f"release: {metadata.versioning.release}")
    for version in metadata.versioning.versions:
        print(f"  {version}")
    return 0


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="List versions of a Maven artifact.")
    parser.add_argument("coordinate", help="group:artifact (e.g., net.fabricmc:fabric-loader)")
    parser.add_argument(
        "--repository",
        default=LIBRARIES_URL,
        help=f"Maven repository base URL (default: {LIBRARIES_URL})",
    )
    parser.add_argument(
        "--timeout-s",
        type=float,
        default=30.0,
        help="Request timeout in seconds (default: 30)",
    )
    args = parser.parse_args()

    setup_logging(json_format=False)
    return asyncio.run(run(args.repository, args.coordinate, args.timeout_s))


if __name__ == "__main__":
    sys.exit(main())
