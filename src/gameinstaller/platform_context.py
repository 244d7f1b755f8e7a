"""
Platform context injected into rule evaluation and runtime selection.

The context is a plain value so that tests can simulate any platform without
touching the running interpreter.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass, field
from pathlib import PurePosixPath

# Manifest OS names, keyed by platform.system()
_OS_NAMES: dict[str, str] = {
    "Linux": "linux",
    "Windows": "windows",
    "Darwin": "osx",
    "FreeBSD": "freebsd",
}

# Manifest architecture names, keyed by platform.machine().lower()
_ARCH_NAMES: dict[str, str] = {
    "i386": "x86",
    "i686": "x86",
    "x86": "x86",
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "arm64": "arm64",
    "aarch64": "arm64",
    "armv7l": "arm32",
    "armv6l": "arm32",
}

# Java runtime platform keys, keyed by (os name, arch)
_RUNTIME_KEYS: dict[tuple[str, str], str] = {
    ("windows", "x86"): "windows-x86",
    ("windows", "x86_64"): "windows-x64",
    ("windows", "arm64"): "windows-arm64",
    ("osx", "x86_64"): "mac-os",
    ("osx", "arm64"): "mac-os-arm64",
    ("linux", "x86"): "linux-i386",
    ("linux", "x86_64"): "linux",
}


@dataclass(frozen=True)
class PlatformContext:
    """
    Description of the machine an installation targets.

    Attributes:
        os_name: Manifest OS name ("windows", "osx", "linux", ...).
        arch: Manifest architecture name ("x86", "x86_64", "arm64", "arm32").
        os_version: Free-form OS version string, matched by rule regexes.
        features: Launcher feature flags (missing flags count as False).
    """

    os_name: str
    arch: str
    os_version: str = ""
    features: dict[str, bool] = field(default_factory=dict)

    @property
    def arch_bits(self) -> str:
        """Pointer width as used by the "${arch}" natives placeholder."""
        return "32" if self.arch in ("x86", "arm32") else "64"

    @property
    def runtime_key(self) -> str | None:
        """
        Java runtime availability key, None if no runtime is distributed.

        Linux on any architecture other than x86 uses the generic "linux" key.
        """
        key = _RUNTIME_KEYS.get((self.os_name, self.arch))
        if key is None and self.os_name == "linux":
            return "linux"
        return key

    @property
    def java_binary(self) -> PurePosixPath:
        """Java executable path relative to a runtime tree root."""
        if self.os_name == "osx":
            return PurePosixPath("jre.bundle/Contents/Home/bin/java")
        if self.os_name == "windows":
            return PurePosixPath("bin/java.exe")
        return PurePosixPath("bin/java")

    @property
    def supports_symlinks(self) -> bool:
        return self.os_name != "windows"

    @property
    def supports_exec_bit(self) -> bool:
        return self.os_name != "windows"

    def feature(self, name: str) -> bool:
        """Get a feature flag value."""
        return self.features.get(name, False)


def detect(features: dict[str, bool] | None = None) -> PlatformContext:
    """
    Build a PlatformContext for the running interpreter.

    Args:
        features: Launcher feature flags to attach (default: none set).

    Returns:
        PlatformContext for this machine. Unknown systems and machines keep
        their lowercased raw names so that no rule accidentally matches them.
    """
    system = platform.system()
    machine = platform.machine().lower()
    return PlatformContext(
        os_name=_OS_NAMES.get(system, system.lower()),
        arch=_ARCH_NAMES.get(machine, machine),
        os_version=platform.version(),
        features=dict(features or {}),
    )
