"""In-memory fetcher and manifest documents for installer tests."""

from tests.fixtures.installer.documents import (
    LINUX,
    OSX,
    WINDOWS,
    asset_index_doc,
    dumps,
    java_availability_doc,
    java_files_doc,
    version_list_doc,
    version_manifest_doc,
)
from tests.fixtures.installer.fakes import FakeFetcher, RecordingReporter
from tests.fixtures.installer.world import installer_config, release_fetcher

__all__ = [
    "LINUX",
    "OSX",
    "WINDOWS",
    "FakeFetcher",
    "RecordingReporter",
    "asset_index_doc",
    "dumps",
    "installer_config",
    "java_availability_doc",
    "java_files_doc",
    "release_fetcher",
    "version_list_doc",
    "version_manifest_doc",
]
