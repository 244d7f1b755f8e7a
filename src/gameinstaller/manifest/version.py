"""
Per-version manifest.

Describes everything a version needs: client jar, libraries (with natives),
asset index, Java runtime component, logging configuration and launch
arguments. A manifest may inherit from a parent through "inheritsFrom";
merging is done by gameinstaller.install.resolver.

Launch arguments are a tagged variant instead of a "string or object" union:
- LiteralArgument: a bare string, always applied
- ConditionalArgument: values applied only when its rules allow
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - used at runtime by pydantic
from typing import TYPE_CHECKING, Any, Literal

from pydantic import Field, field_validator, model_serializer

from gameinstaller.manifest.base import DownloadEntry, ManifestModel
from gameinstaller.manifest.version_list import VersionSummary, VersionType
from gameinstaller.manifest.rules import Rule, is_allowed

if TYPE_CHECKING:
    from collections.abc import Sequence

    from gameinstaller.platform_context import PlatformContext

# Substrings identifying third-party loaders in a version id
MODDED_MARKERS = ("fabric", "forge", "liteloader", "rift", "optifine")


class LiteralArgument(ManifestModel):
    """Unconditional launch argument."""

    kind: Literal["literal"] = "literal"
    value: str

    @model_serializer
    def _serialize(self) -> str:
        return self.value


class ConditionalArgument(ManifestModel):
    """Launch argument(s) gated by rules."""

    kind: Literal["conditional"] = "conditional"
    rules: list[Rule] = Field(default_factory=list)
    values: list[str] = Field(default_factory=list)

    @model_serializer
    def _serialize(self) -> dict[str, Any]:
        value: str | list[str] = self.values[0] if len(self.values) == 1 else list(self.values)
        return {
            "rules": [rule.model_dump(mode="json", exclude_none=True) for rule in self.rules],
            "value": value,
        }


Argument = LiteralArgument | ConditionalArgument


def parse_argument(raw: Any) -> Argument:
    """
    Decode one raw argument entry.

    Args:
        raw: A string, a {"rules", "value"} object, or an already built Argument.

    Returns:
        LiteralArgument or ConditionalArgument.

    Raises:
        ValueError: If the entry has neither shape.
    """
    if isinstance(raw, (LiteralArgument, ConditionalArgument)):
        return raw
    if isinstance(raw, str):
        return LiteralArgument(value=raw)
    if isinstance(raw, dict) and "value" in raw:
        value = raw["value"]
        if isinstance(value, str):
            values = [value]
        elif isinstance(value, list) and all(isinstance(v, str) for v in value):
            values = list(value)
        else:
            msg = f"Argument value must be a string or a list of strings, got {value!r}"
            raise ValueError(msg)
        return ConditionalArgument(rules=raw.get("rules") or [], values=values)
    msg = f"Argument must be a string or an object with a value, got {raw!r}"
    raise ValueError(msg)


def resolve_arguments(
    arguments: Sequence[Argument],
    context: PlatformContext,
) -> list[str]:
    """Flatten arguments for a platform, dropping disallowed conditional ones."""
    resolved: list[str] = []
    for argument in arguments:
        if isinstance(argument, LiteralArgument):
            resolved.append(argument.value)
        elif is_allowed(argument.rules, context):
            resolved.extend(argument.values)
    return resolved


class Arguments(ManifestModel):
    """Modern (1.13+) game and JVM argument lists."""

    game: list[Argument] = Field(default_factory=list)
    jvm: list[Argument] | None = None

    @field_validator("game", "jvm", mode="before")
    @classmethod
    def decode_arguments(cls, v: Any) -> Any:
        """Map raw entries to the tagged argument variants."""
        if v is None:
            return v
        if not isinstance(v, list):
            msg = f"Arguments must be a list, got {type(v).__name__}"
            raise ValueError(msg)
        return [parse_argument(item) for item in v]


class AssetIndexRef(ManifestModel):
    """Reference to the asset index used by a version."""

    id: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    size: int = Field(..., ge=0)
    sha1: str | None = None
    total_size: int | None = Field(default=None, alias="totalSize")


class Downloads(ManifestModel):
    """Version-level downloads. The client entry is mandatory."""

    client: DownloadEntry
    client_mappings: DownloadEntry | None = None
    server: DownloadEntry | None = None
    server_mappings: DownloadEntry | None = None


class JavaVersion(ManifestModel):
    """Java runtime required by a version."""

    component: str = Field(..., min_length=1)
    major_version: int | None = Field(default=None, alias="majorVersion")


class LibraryArtifact(DownloadEntry):
    """Library file with its repository-relative path."""

    path: str = Field(..., min_length=1, description="Maven-style relative path")


class LibraryDownloads(ManifestModel):
    """Direct artifact and native classifiers of a library."""

    artifact: LibraryArtifact | None = None
    classifiers: dict[str, LibraryArtifact] | None = None


class LibraryExtract(ManifestModel):
    """Native extraction options (consumed at launch preparation)."""

    exclude: list[str] = Field(default_factory=list)


class Library(ManifestModel):
    """
    Library dependency of a version.

    Attributes:
        name: Maven coordinate "group:artifact:version[:classifier]".
        downloads: Direct artifact and classifiers (optional).
        natives: OS name to classifier name (optional).
        rules: Platform rules (optional).
        url: Alternate Maven repository base URL (optional).
        extract: Native extraction options (optional).
    """

    name: str
    downloads: LibraryDownloads | None = None
    natives: dict[str, str] | None = None
    rules: list[Rule] | None = None
    url: str | None = None
    extract: LibraryExtract | None = None

    @field_validator("name")
    @classmethod
    def validate_coordinate(cls, v: str) -> str:
        """Ensure the coordinate has group, artifact, version and an optional classifier."""
        parts = v.split(":")
        if len(parts) not in (3, 4) or not all(parts):
            msg = f"Library coordinate must be 'group:artifact:version[:classifier]', got {v!r}"
            raise ValueError(msg)
        return v

    @property
    def group(self) -> str:
        return self.name.split(":")[0]

    @property
    def artifact(self) -> str:
        return self.name.split(":")[1]

    @property
    def version(self) -> str:
        return self.name.split(":")[2]

    @property
    def classifier(self) -> str | None:
        parts = self.name.split(":")
        return parts[3] if len(parts) == 4 else None

    def native_classifier(self, context: PlatformContext) -> str | None:
        """Classifier name holding this library's natives for a platform."""
        if not self.natives:
            return None
        classifier = self.natives.get(context.os_name)
        if classifier is None:
            return None
        return classifier.replace("${arch}", context.arch_bits)


class LoggingFile(ManifestModel):
    """Logging configuration file."""

    id: str = Field(..., min_length=1, description="File name")
    url: str = Field(..., min_length=1)
    size: int = Field(..., ge=0)
    sha1: str | None = None


class ClientLogging(ManifestModel):
    """Client logging configuration."""

    argument: str
    file: LoggingFile
    type: str


class LoggingConfig(ManifestModel):
    """Logging section of a version manifest."""

    client: ClientLogging | None = None


class VersionManifest(ManifestModel):
    """Per-version manifest."""

    id: str = Field(..., min_length=1)
    inherits_from: str | None = Field(default=None, alias="inheritsFrom")
    arguments: Arguments | None = None
    minecraft_arguments: str | None = Field(default=None, alias="minecraftArguments")
    asset_index: AssetIndexRef | None = Field(default=None, alias="assetIndex")
    assets: str | None = None
    compliance_level: int | None = Field(default=None, alias="complianceLevel")
    downloads: Downloads | None = None
    java_version: JavaVersion | None = Field(default=None, alias="javaVersion")
    libraries: list[Library] = Field(default_factory=list)
    logging: LoggingConfig | None = None
    main_class: str = Field(..., alias="mainClass")
    minimum_launcher_version: int | None = Field(default=None, alias="minimumLauncherVersion")
    release_time: datetime = Field(..., alias="releaseTime")
    time: datetime | None = None
    type: VersionType

    @property
    def is_modded(self) -> bool:
        """True when the id names a third-party loader."""
        lowered = self.id.lower()
        return any(marker in lowered for marker in MODDED_MARKERS)

    def to_summary(self) -> VersionSummary:
        """Summary of this locally installed version."""
        return VersionSummary(
            id=self.id,
            type=self.type,
            release_time=self.release_time,
            installed=True,
        )
