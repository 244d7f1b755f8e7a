"""
Top-level version list.

Only the lookup of a version's manifest URL is used by the installer;
rendering the list is left to the presentation layer.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - used at runtime by pydantic
from enum import Enum

from pydantic import Field

from gameinstaller.manifest.base import ManifestModel


class VersionType(str, Enum):
    """Release channel of a version."""

    RELEASE = "release"
    SNAPSHOT = "snapshot"
    OLD_BETA = "old_beta"
    OLD_ALPHA = "old_alpha"
    PENDING = "pending"


class LatestVersions(ManifestModel):
    """Latest release and snapshot ids."""

    release: str
    snapshot: str


class VersionListEntry(ManifestModel):
    """Single version advertised by the version list."""

    id: str = Field(..., min_length=1)
    type: VersionType
    url: str = Field(..., min_length=1, description="Version manifest URL")
    time: datetime
    release_time: datetime = Field(alias="releaseTime")
    sha1: str | None = None
    compliance_level: int | None = Field(default=None, alias="complianceLevel")


class VersionList(ManifestModel):
    """Top-level list of available versions."""

    latest: LatestVersions
    versions: list[VersionListEntry] = Field(default_factory=list)

    def get(self, version_id: str) -> VersionListEntry | None:
        """Find a version by id."""
        for entry in self.versions:
            if entry.id == version_id:
                return entry
        return None


class VersionSummary(ManifestModel):
    """Compact description of a version, installed or remote."""

    id: str
    type: VersionType
    release_time: datetime
    installed: bool = False
