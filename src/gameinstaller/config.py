"""
Installer configuration.

Values fall back to environment variables when not given explicitly:
- GAMEINSTALLER_HOME: game directory
- GAMEINSTALLER_VERSION_LIST_URL: top-level version list
- GAMEINSTALLER_JAVA_RUNTIME_URL: Java runtime availability manifest
"""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass, field
from pathlib import Path

from gameinstaller.layout import GameLayout

VERSION_LIST_URL = "https://piston-meta.mojang.com/mc/game/version_manifest_v2.json"
JAVA_RUNTIME_URL = (
    "https://launchermeta.mojang.com/v1/products/java-runtime/"
    "2ec0cc96c44e5a76b9c8b7c39df7210883d12871/all.json"
)
RESOURCES_URL = "https://resources.download.minecraft.net"
LIBRARIES_URL = "https://libraries.minecraft.net"

# Runtime component used when a version does not declare one
DEFAULT_RUNTIME_COMPONENT = "jre-legacy"


def default_game_dir(system: str | None = None, home: Path | None = None) -> Path:
    """
    Platform-specific default game directory.

    Args:
        system: platform.system() value (default: running system).
        home: Home directory (default: Path.home()).

    Returns:
        %APPDATA%/.minecraft on Windows, ~/Library/Application Support/minecraft
        on macOS, ~/.minecraft elsewhere.
    """
    system = system or platform.system()
    home = home or Path.home()
    if system == "Windows":
        appdata = os.environ.get("APPDATA")
        base = Path(appdata) if appdata else home / "AppData" / "Roaming"
        return base / ".minecraft"
    if system == "Darwin":
        return home / "Library" / "Application Support" / "minecraft"
    return home / ".minecraft"


@dataclass
class InstallerConfig:
    """Main installer configuration."""

    game_dir: Path | None = None  # From GAMEINSTALLER_HOME env var
    version_list_url: str = ""  # From GAMEINSTALLER_VERSION_LIST_URL env var
    java_runtime_url: str = ""  # From GAMEINSTALLER_JAVA_RUNTIME_URL env var
    resources_url: str = RESOURCES_URL
    libraries_url: str = LIBRARIES_URL
    default_runtime_component: str = DEFAULT_RUNTIME_COMPONENT

    # HTTP request timeout (whole request, seconds)
    request_timeout_s: float = 60.0

    # Verify SHA-1 of freshly downloaded files that declare one
    verify_sha1: bool = False

    # Store libraries under assets/ instead of libraries/
    legacy_library_layout: bool = False

    extra_headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.game_dir is None:
            env_home = os.environ.get("GAMEINSTALLER_HOME", "")
            self.game_dir = Path(env_home) if env_home else default_game_dir()
        self.game_dir = Path(self.game_dir).expanduser()
        if not self.version_list_url:
            self.version_list_url = os.environ.get(
                "GAMEINSTALLER_VERSION_LIST_URL", VERSION_LIST_URL
            )
        if not self.java_runtime_url:
            self.java_runtime_url = os.environ.get(
                "GAMEINSTALLER_JAVA_RUNTIME_URL", JAVA_RUNTIME_URL
            )
        for name in ("version_list_url", "java_runtime_url", "resources_url", "libraries_url"):
            value = getattr(self, name)
            if not value.startswith(("http://", "https://")):
                raise ValueError(f"{name} must be an http(s) URL, got {value!r}")
        if self.request_timeout_s <= 0:
            raise ValueError(f"request_timeout_s must be > 0, got {self.request_timeout_s}")
        if not self.default_runtime_component:
            raise ValueError("default_runtime_component cannot be empty")

    def layout(self) -> GameLayout:
        """Filesystem layout rooted at the game directory."""
        assert self.game_dir is not None  # Set in __post_init__
        return GameLayout(root=self.game_dir, legacy_library_layout=self.legacy_library_layout)
