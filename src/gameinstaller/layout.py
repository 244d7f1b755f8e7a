"""
Deterministic on-disk layout of a game directory.

    <root>/versions/<id>/<id>.json          version manifest
    <root>/versions/<id>/<id>.jar           client jar
    <root>/assets/indexes/<index>.json      asset index
    <root>/assets/objects/<hh>/<hash>       content-addressed assets
    <root>/assets/log_configs/<file>        client logging configuration
    <root>/resources/<logical path>         legacy flat resource tree
    <root>/runtime/<component>/<key>/.version          runtime marker
    <root>/runtime/<component>/<key>/<component>/...   runtime file tree
    <root>/libraries/<maven path>           libraries (assets/ in legacy mode)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from gameinstaller.errors import FileSystemError

RUNTIME_MARKER = ".version"


def safe_join(base: Path, relative: str) -> Path:
    """
    Join a manifest-provided "/"-separated relative path onto a base directory.

    Args:
        base: Directory the result must stay inside.
        relative: Relative path from a remote document.

    Returns:
        Joined path.

    Raises:
        FileSystemError: If the path is empty, absolute, or escapes base.
    """
    pure = PurePosixPath(relative)
    if not relative or relative.isspace() or pure.is_absolute() or ".." in pure.parts:
        msg = f"Refusing unsafe relative path: {relative!r}"
        raise FileSystemError(msg)
    return base.joinpath(*pure.parts)


@dataclass(frozen=True)
class GameLayout:
    """
    Paths of one game directory.

    Attributes:
        root: Game directory.
        legacy_library_layout: Store libraries under assets/ instead of libraries/.
    """

    root: Path
    legacy_library_layout: bool = False

    @property
    def versions_dir(self) -> Path:
        return self.root / "versions"

    def version_dir(self, version_id: str) -> Path:
        return safe_join(self.versions_dir, version_id)

    def version_manifest_path(self, version_id: str) -> Path:
        return self.version_dir(version_id) / f"{version_id}.json"

    def client_jar_path(self, version_id: str) -> Path:
        return self.version_dir(version_id) / f"{version_id}.jar"

    @property
    def assets_dir(self) -> Path:
        return self.root / "assets"

    @property
    def indexes_dir(self) -> Path:
        return self.assets_dir / "indexes"

    def asset_index_path(self, index_id: str) -> Path:
        return safe_join(self.indexes_dir, f"{index_id}.json")

    @property
    def objects_dir(self) -> Path:
        return self.assets_dir / "objects"

    @property
    def log_configs_dir(self) -> Path:
        return self.assets_dir / "log_configs"

    @property
    def resources_dir(self) -> Path:
        return self.root / "resources"

    @property
    def libraries_dir(self) -> Path:
        return self.assets_dir if self.legacy_library_layout else self.root / "libraries"

    def library_path(self, relative: str) -> Path:
        """Location of a library artifact given its repository-relative path."""
        return safe_join(self.libraries_dir, relative)

    @property
    def runtime_dir(self) -> Path:
        return self.root / "runtime"

    def runtime_platform_dir(self, component: str, platform_key: str) -> Path:
        """Per-platform directory of a runtime component (holds the marker)."""
        return safe_join(self.runtime_dir, f"{component}/{platform_key}")

    def runtime_root(self, component: str, platform_key: str) -> Path:
        """Root of the runtime file tree."""
        return self.runtime_platform_dir(component, platform_key) / component

    def runtime_marker(self, component: str, platform_key: str) -> Path:
        return self.runtime_platform_dir(component, platform_key) / RUNTIME_MARKER
