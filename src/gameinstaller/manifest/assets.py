"""
Asset index.

Format:
    {
        "objects": {
            "minecraft/sounds/random/click.ogg": {"hash": "abcd...", "size": 10},
            ...
        },
        "map_to_resources": true
    }

Objects are content addressed: stored at objects/<hash[0:2]>/<hash> and
downloaded from <resources base>/<hash[0:2]>/<hash>. Index order is kept.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field, field_validator

from gameinstaller.manifest.base import ManifestModel

if TYPE_CHECKING:
    from pathlib import Path


class AssetObject(ManifestModel):
    """Single content-addressed asset."""

    hash: str = Field(..., min_length=3, description="SHA-1 hex digest of the content")
    size: int = Field(..., ge=0, description="Size in bytes")

    @field_validator("hash")
    @classmethod
    def validate_hash(cls, v: str) -> str:
        """Ensure the hash is a lowercase hex string."""
        v = v.lower()
        if any(c not in "0123456789abcdef" for c in v):
            msg = f"Asset hash must be hexadecimal, got {v!r}"
            raise ValueError(msg)
        return v

    @property
    def prefix(self) -> str:
        """Two-character directory bucket."""
        return self.hash[:2]

    def object_path(self, objects_dir: Path) -> Path:
        """Physical location of this object under an objects directory."""
        return objects_dir / self.prefix / self.hash

    def download_url(self, resources_url: str) -> str:
        """Hash-derived download URL."""
        return f"{resources_url.rstrip('/')}/{self.prefix}/{self.hash}"


class AssetIndex(ManifestModel):
    """Ordered mapping of logical asset path to content-addressed object."""

    objects: dict[str, AssetObject] = Field(default_factory=dict)
    map_to_resources: bool = False
    virtual: bool = False

    def __len__(self) -> int:
        return len(self.objects)
