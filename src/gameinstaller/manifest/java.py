"""
Java runtime manifests.

Two independent documents:

Availability manifest (platform -> component -> ordered candidate builds):
    {"linux": {"java-runtime-gamma": [
        {"version": {"name": "17.0.8", "released": "..."},
         "manifest": {"url": "...", "sha1": "...", "size": 123}}
    ]}}

Per-build files manifest (relative path -> entry, in manifest order):
    {"files": {
        "bin": {"type": "directory"},
        "bin/java": {"type": "file", "executable": true,
                     "downloads": {"raw": {"url": "...", "size": 999, "sha1": "..."}}},
        "lib/libjli.so": {"type": "link", "target": "../lib/jli/libjli.so"}
    }}
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field, model_validator

from gameinstaller.manifest.base import DownloadEntry, ManifestModel


class RuntimeBuildVersion(ManifestModel):
    """Version information of a runtime build."""

    name: str = Field(..., min_length=1)
    released: str | None = None


class RuntimeBuildManifestRef(ManifestModel):
    """Pointer to a per-build files manifest."""

    url: str = Field(..., min_length=1)
    size: int | None = None
    sha1: str | None = None


class RuntimeCandidate(ManifestModel):
    """Candidate build for a runtime component."""

    version: RuntimeBuildVersion
    manifest: RuntimeBuildManifestRef
    availability: dict[str, Any] | None = None


class JavaRuntimeAvailability(ManifestModel):
    """Global runtime availability manifest, keyed by platform then component."""

    platforms: dict[str, dict[str, list[RuntimeCandidate]]] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def wrap_platforms(cls, data: Any) -> Any:
        """The remote document is the bare platform mapping."""
        if isinstance(data, dict) and "platforms" not in data:
            return {"platforms": data}
        return data

    def candidates(self, platform_key: str, component: str) -> list[RuntimeCandidate]:
        """Ordered candidate builds for a platform and component (may be empty)."""
        return list(self.platforms.get(platform_key, {}).get(component, []))


class RuntimeFileKind(str, Enum):
    """Kind of a runtime file entry."""

    FILE = "file"
    DIRECTORY = "directory"
    LINK = "link"


class RuntimeFileDownloads(ManifestModel):
    """Download variants of a runtime file (only "raw" is used)."""

    raw: DownloadEntry
    lzma: DownloadEntry | None = None


class JavaRuntimeFileEntry(ManifestModel):
    """Single entry of a runtime file tree."""

    type: str = Field(..., description="file, directory or link")
    executable: bool = False
    downloads: RuntimeFileDownloads | None = None
    target: str | None = None

    @property
    def kind(self) -> RuntimeFileKind | None:
        """Known entry kind, None for kinds this installer does not handle."""
        try:
            return RuntimeFileKind(self.type)
        except ValueError:
            return None


class JavaFilesManifest(ManifestModel):
    """Per-build files manifest."""

    files: dict[str, JavaRuntimeFileEntry] = Field(default_factory=dict)
