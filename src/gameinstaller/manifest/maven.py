"""
Maven repository metadata (maven-metadata.xml).

Consumed by the version lookup utility, not by the installation pipeline.

Format:
    <metadata>
      <groupId>net.fabricmc</groupId>
      <artifactId>fabric-loader</artifactId>
      <versioning>
        <release>0.15.0</release>
        <latest>0.15.0</latest>
        <lastUpdated>20231201000000</lastUpdated>
        <versions><version>0.14.0</version><version>0.15.0</version></versions>
      </versioning>
    </metadata>
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from pydantic import Field

from gameinstaller.errors import ParseError
from gameinstaller.manifest.base import ManifestModel


class MavenVersioning(ManifestModel):
    """Versioning block of Maven metadata."""

    release: str
    latest: str | None = None
    last_updated: str | None = Field(default=None, alias="lastUpdated")
    versions: list[str] = Field(default_factory=list)


class MavenMetadata(ManifestModel):
    """Parsed maven-metadata.xml."""

    group_id: str = Field(..., alias="groupId")
    artifact_id: str = Field(..., alias="artifactId")
    versioning: MavenVersioning

    @classmethod
    def parse_xml(cls, data: bytes | str) -> MavenMetadata:
        """
        Parse Maven metadata XML.

        Args:
            data: Raw XML content.

        Returns:
            MavenMetadata.

        Raises:
            ParseError: If the XML is malformed or required elements are missing.
        """
        try:
            root = ET.fromstring(data)
        except ET.ParseError as e:
            msg = f"Malformed Maven metadata XML: {e}"
            raise ParseError(msg) from e

        versioning = root.find("versioning")
        raw_versioning = None
        if versioning is not None:
            raw_versioning = {
                "release": versioning.findtext("release"),
                "latest": versioning.findtext("latest"),
                "lastUpdated": versioning.findtext("lastUpdated"),
                "versions": [
                    (v.text or "").strip() for v in versioning.findall("versions/version")
                ],
            }
        return cls.from_raw(
            {
                "groupId": root.findtext("groupId"),
                "artifactId": root.findtext("artifactId"),
                "versioning": raw_versioning,
            }
        )

    @property
    def metadata_path(self) -> str:
        """Repository-relative location of this metadata file."""
        return f"{self.group_id.replace('.', '/')}/{self.artifact_id}/maven-metadata.xml"


def metadata_url(repository_url: str, group_id: str, artifact_id: str) -> str:
    """URL of maven-metadata.xml for an artifact in a repository."""
    group_path = group_id.replace(".", "/")
    return f"{repository_url.rstrip('/')}/{group_path}/{artifact_id}/maven-metadata.xml"
