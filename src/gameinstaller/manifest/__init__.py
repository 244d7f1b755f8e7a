"""Remote manifest models.

Modules:
- base: shared pydantic configuration and JSON parsing
- rules: platform rules gating libraries and arguments
- version_list: top-level list of available versions
- version: per-version manifest (libraries, downloads, arguments)
- assets: asset index
- java: Java runtime availability and per-build file manifests
- maven: Maven repository metadata
"""

from gameinstaller.manifest.assets import AssetIndex, AssetObject
from gameinstaller.manifest.base import DownloadEntry, ManifestModel
from gameinstaller.manifest.java import (
    JavaFilesManifest,
    JavaRuntimeAvailability,
    JavaRuntimeFileEntry,
    RuntimeCandidate,
    RuntimeFileKind,
)
from gameinstaller.manifest.maven import MavenMetadata, MavenVersioning, metadata_url
from gameinstaller.manifest.rules import (
    OsConstraint,
    Rule,
    RuleAction,
    evaluate_rules,
    is_allowed,
)
from gameinstaller.manifest.version import (
    Arguments,
    AssetIndexRef,
    ConditionalArgument,
    Downloads,
    JavaVersion,
    Library,
    LibraryArtifact,
    LiteralArgument,
    LoggingConfig,
    VersionManifest,
    parse_argument,
    resolve_arguments,
)
from gameinstaller.manifest.version_list import (
    VersionList,
    VersionListEntry,
    VersionSummary,
    VersionType,
)

__all__ = [
    "Arguments",
    "AssetIndex",
    "AssetIndexRef",
    "AssetObject",
    "ConditionalArgument",
    "DownloadEntry",
    "Downloads",
    "JavaFilesManifest",
    "JavaRuntimeAvailability",
    "JavaRuntimeFileEntry",
    "JavaVersion",
    "Library",
    "LibraryArtifact",
    "LiteralArgument",
    "LoggingConfig",
    "ManifestModel",
    "MavenMetadata",
    "MavenVersioning",
    "OsConstraint",
    "Rule",
    "RuleAction",
    "RuntimeCandidate",
    "RuntimeFileKind",
    "VersionList",
    "VersionListEntry",
    "VersionManifest",
    "VersionSummary",
    "VersionType",
    "evaluate_rules",
    "is_allowed",
    "metadata_url",
    "parse_argument",
    "resolve_arguments",
]
