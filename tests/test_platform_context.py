"""Tests for PlatformContext and platform detection."""

from __future__ import annotations

from pathlib import PurePosixPath
from unittest.mock import patch

import pytest

from gameinstaller.platform_context import PlatformContext, detect


class TestRuntimeKey:
    """Java runtime availability keys."""

    @pytest.mark.parametrize(
        ("os_name", "arch", "expected"),
        [
            ("windows", "x86", "windows-x86"),
            ("windows", "x86_64", "windows-x64"),
            ("windows", "arm64", "windows-arm64"),
            ("osx", "x86_64", "mac-os"),
            ("osx", "arm64", "mac-os-arm64"),
            ("linux", "x86", "linux-i386"),
            ("linux", "x86_64", "linux"),
        ],
    )
    def test_known_platforms(self, os_name: str, arch: str, expected: str) -> None:
        assert PlatformContext(os_name=os_name, arch=arch).runtime_key == expected

    @pytest.mark.parametrize("arch", ["arm64", "arm32", "riscv64"])
    def test_other_linux_arch_uses_generic_key(self, arch: str) -> None:
        assert PlatformContext(os_name="linux", arch=arch).runtime_key == "linux"

    def test_unknown_platform(self) -> None:
        assert PlatformContext(os_name="windows", arch="arm32").runtime_key is None
        assert PlatformContext(os_name="freebsd", arch="x86_64").runtime_key is None


class TestDerivedValues:
    """Bitness, binary path and capabilities."""

    def test_arch_bits(self) -> None:
        assert PlatformContext(os_name="windows", arch="x86").arch_bits == "32"
        assert PlatformContext(os_name="linux", arch="x86_64").arch_bits == "64"
        assert PlatformContext(os_name="osx", arch="arm64").arch_bits == "64"

    def test_java_binary(self) -> None:
        assert PlatformContext(os_name="linux", arch="x86_64").java_binary == PurePosixPath("bin/java")
        assert PlatformContext(os_name="windows", arch="x86_64").java_binary == PurePosixPath(
            "bin/java.exe"
        )
        assert PlatformContext(os_name="osx", arch="arm64").java_binary == PurePosixPath(
            "jre.bundle/Contents/Home/bin/java"
        )

    def test_windows_capabilities(self) -> None:
        windows = PlatformContext(os_name="windows", arch="x86_64")
        assert windows.supports_symlinks is False
        assert windows.supports_exec_bit is False
        linux = PlatformContext(os_name="linux", arch="x86_64")
        assert linux.supports_symlinks is True
        assert linux.supports_exec_bit is True

    def test_missing_feature_is_false(self) -> None:
        ctx = PlatformContext(os_name="linux", arch="x86_64", features={"is_demo_user": True})
        assert ctx.feature("is_demo_user") is True
        assert ctx.feature("has_custom_resolution") is False


class TestDetect:
    """Detection from the platform module."""

    def test_detect_linux(self) -> None:
        with (
            patch("platform.system", return_value="Linux"),
            patch("platform.machine", return_value="x86_64"),
            patch("platform.version", return_value="#1 SMP"),
        ):
            ctx = detect()
        assert ctx.os_name == "linux"
        assert ctx.arch == "x86_64"
        assert ctx.os_version == "#1 SMP"
        assert ctx.features == {}

    def test_detect_macos_arm(self) -> None:
        with (
            patch("platform.system", return_value="Darwin"),
            patch("platform.machine", return_value="arm64"),
            patch("platform.version", return_value="Darwin Kernel"),
        ):
            ctx = detect(features={"is_demo_user": False})
        assert ctx.os_name == "osx"
        assert ctx.arch == "arm64"
        assert ctx.runtime_key == "mac-os-arm64"
        assert ctx.features == {"is_demo_user": False}

    def test_detect_windows_amd64(self) -> None:
        with (
            patch("platform.system", return_value="Windows"),
            patch("platform.machine", return_value="AMD64"),
            patch("platform.version", return_value="10.0.19045"),
        ):
            ctx = detect()
        assert ctx.os_name == "windows"
        assert ctx.arch == "x86_64"
