"""Tests for Java runtime provisioning."""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Any

import pytest

from gameinstaller.errors import (
    FileSystemError,
    ManifestIncompleteError,
    NetworkError,
    PlatformUnsupportedError,
)
from gameinstaller.install.java import JavaRuntimeProvisioner, component_for, link_target
from gameinstaller.layout import GameLayout
from gameinstaller.manifest.version import VersionManifest
from gameinstaller.platform_context import PlatformContext
from gameinstaller.progress import NewSubStep, NewSubSubStep
from tests.fixtures.installer import (
    LINUX,
    WINDOWS,
    FakeFetcher,
    RecordingReporter,
    dumps,
    java_availability_doc,
    java_files_doc,
    version_manifest_doc,
)

AVAILABILITY_URL = "https://meta.test/java/all.json"
FILES_URL = "https://meta.test/java/manifest.json"
JAVA_URL = "https://meta.test/java/bin/java"
COMPONENT = "java-runtime-gamma"

SCENARIO_FILES: dict[str, dict[str, Any]] = {
    "lib": {"type": "directory"},
    "bin/java": {
        "type": "file",
        "executable": True,
        "downloads": {"raw": {"url": JAVA_URL, "size": 999}},
    },
}


@pytest.fixture
def layout(tmp_path: Path) -> GameLayout:
    return GameLayout(root=tmp_path)


def runtime_fetcher(
    files: dict[str, dict[str, Any]],
    *,
    version_name: str = "17.0.8",
    platform_key: str = "linux",
) -> FakeFetcher:
    return FakeFetcher(
        {
            AVAILABILITY_URL: dumps(
                java_availability_doc(platform_key, COMPONENT, version_name, FILES_URL)
            ),
            FILES_URL: dumps(java_files_doc(files)),
            JAVA_URL: b"j" * 999,
        }
    )


def provisioner(
    layout: GameLayout,
    fetcher: FakeFetcher,
    context: PlatformContext = LINUX,
    **kwargs: Any,
) -> JavaRuntimeProvisioner:
    return JavaRuntimeProvisioner(
        layout, fetcher, context, availability_url=AVAILABILITY_URL, **kwargs
    )


def write_marker(layout: GameLayout, value: str, key: str = "linux") -> None:
    marker = layout.runtime_marker(COMPONENT, key)
    marker.parent.mkdir(parents=True, exist_ok=True)
    marker.write_text(value)


class TestComponentFor:
    """Required component selection."""

    def test_declared_component(self) -> None:
        manifest = VersionManifest.parse(dumps(version_manifest_doc()))
        assert component_for(manifest) == "java-runtime-gamma"

    def test_default_legacy(self) -> None:
        manifest = VersionManifest.parse(dumps(version_manifest_doc(javaVersion=None)))
        assert component_for(manifest) == "jre-legacy"
        assert component_for(manifest, "jre-custom") == "jre-custom"


class TestLinkTarget:
    """Double-pop resolution of ".." segments."""

    def test_parent_segment_pops_two(self) -> None:
        assert link_target(Path("/rt/lib/libjli.so"), "../lib/jli/libjli.so") == Path("/rt/lib/jli/libjli.so")

    def test_plain_segments_append_to_link_path(self) -> None:
        assert link_target(Path("/rt/bin/java"), "real") == Path("/rt/bin/java/real")

    def test_two_parent_segments(self) -> None:
        assert link_target(Path("/rt/a/b/c/link"), "../../x") == Path("/rt/x")


class TestEnsure:
    """Install, reinstall and reuse."""

    @pytest.mark.asyncio
    async def test_install_over_outdated_marker(self, layout: GameLayout) -> None:
        write_marker(layout, "8u51")
        fetcher = runtime_fetcher(SCENARIO_FILES, version_name="17.0.8")

        runtime = await provisioner(layout, fetcher).ensure(COMPONENT)

        root = layout.runtime_root(COMPONENT, "linux")
        assert (root / "lib").is_dir()
        java = root / "bin" / "java"
        assert java.stat().st_size == 999
        if os.name == "posix":
            assert java.stat().st_mode & stat.S_IXUSR
            assert stat.S_IMODE(java.stat().st_mode) == 0o755
        assert layout.runtime_marker(COMPONENT, "linux").read_text() == "17.0.8"
        assert runtime.binary == java
        assert runtime.version == "17.0.8"

    @pytest.mark.asyncio
    async def test_fresh_install(self, layout: GameLayout) -> None:
        fetcher = runtime_fetcher(SCENARIO_FILES)
        await provisioner(layout, fetcher).ensure(COMPONENT)
        assert fetcher.requests == [AVAILABILITY_URL, FILES_URL, JAVA_URL]
        assert layout.runtime_marker(COMPONENT, "linux").read_text() == "17.0.8"

    @pytest.mark.asyncio
    async def test_up_to_date_runtime_not_reinstalled(self, layout: GameLayout) -> None:
        fetcher = runtime_fetcher(SCENARIO_FILES)
        await provisioner(layout, fetcher).ensure(COMPONENT)
        fetcher.requests.clear()
        reporter = RecordingReporter()

        await provisioner(layout, fetcher, reporter=reporter).ensure(COMPONENT)

        assert fetcher.requests == [AVAILABILITY_URL]
        labels = [e.label for e in reporter.of_type(NewSubStep)]
        assert labels == [
            "Downloading java versions manifest",
            "Getting right java version",
            "Checking if required version is installed",
            "Done",
        ]

    @pytest.mark.asyncio
    async def test_first_candidate_selected(self, layout: GameLayout) -> None:
        doc = java_availability_doc("linux", COMPONENT, "17.0.8", FILES_URL)
        doc["linux"][COMPONENT].append(
            {"manifest": {"url": "https://meta.test/other.json"}, "version": {"name": "17.0.1"}}
        )
        fetcher = runtime_fetcher(SCENARIO_FILES)
        fetcher.add(AVAILABILITY_URL, dumps(doc))

        await provisioner(layout, fetcher).ensure(COMPONENT)

        assert "https://meta.test/other.json" not in fetcher.requests
        assert layout.runtime_marker(COMPONENT, "linux").read_text() == "17.0.8"

    @pytest.mark.asyncio
    async def test_progress_per_file(self, layout: GameLayout) -> None:
        reporter = RecordingReporter()
        await provisioner(layout, runtime_fetcher(SCENARIO_FILES), reporter=reporter).ensure(COMPONENT)

        assert reporter.of_type(NewSubSubStep) == [
            NewSubSubStep("lib", 1, 3),
            NewSubSubStep("bin/java", 2, 3),
            NewSubSubStep(".version", 3, 3),
        ]
        assert NewSubStep("Installing missing files", 4, 5) in reporter.events
        assert reporter.events[-1] == NewSubStep("Done", 5, 5)

    @pytest.mark.asyncio
    async def test_component_missing_for_platform(self, layout: GameLayout) -> None:
        fetcher = runtime_fetcher(SCENARIO_FILES, platform_key="mac-os")
        with pytest.raises(ManifestIncompleteError, match="linux"):
            await provisioner(layout, fetcher).ensure(COMPONENT)

    @pytest.mark.asyncio
    async def test_unsupported_platform(self, layout: GameLayout) -> None:
        freebsd = PlatformContext(os_name="freebsd", arch="x86_64")
        with pytest.raises(PlatformUnsupportedError):
            await provisioner(layout, runtime_fetcher(SCENARIO_FILES), freebsd).ensure(COMPONENT)

    @pytest.mark.asyncio
    async def test_arm_linux_uses_generic_linux_runtime(self, layout: GameLayout) -> None:
        arm64 = PlatformContext(os_name="linux", arch="arm64")

        runtime = await provisioner(layout, runtime_fetcher(SCENARIO_FILES), arm64).ensure(COMPONENT)

        assert runtime.root == layout.runtime_root(COMPONENT, "linux")
        assert runtime.binary.stat().st_size == 999

    @pytest.mark.asyncio
    async def test_unreadable_marker_triggers_reinstall(self, layout: GameLayout) -> None:
        layout.runtime_root(COMPONENT, "linux").mkdir(parents=True)
        layout.runtime_marker(COMPONENT, "linux").write_bytes(b"\xff\xfe\x00")
        fetcher = runtime_fetcher(SCENARIO_FILES)

        await provisioner(layout, fetcher).ensure(COMPONENT)

        assert FILES_URL in fetcher.requests
        assert layout.runtime_marker(COMPONENT, "linux").read_text() == "17.0.8"

    @pytest.mark.asyncio
    async def test_marker_write_failure_is_fatal(self, layout: GameLayout) -> None:
        layout.runtime_marker(COMPONENT, "linux").mkdir(parents=True)

        with pytest.raises(FileSystemError, match="Unable to write runtime marker"):
            await provisioner(layout, runtime_fetcher(SCENARIO_FILES)).ensure(COMPONENT)

        assert (layout.runtime_root(COMPONENT, "linux") / "bin" / "java").is_file()

    @pytest.mark.asyncio
    async def test_file_failure_aborts_without_marker(self, layout: GameLayout) -> None:
        fetcher = runtime_fetcher(SCENARIO_FILES)
        del fetcher.responses[JAVA_URL]

        with pytest.raises(NetworkError):
            await provisioner(layout, fetcher).ensure(COMPONENT)

        assert not layout.runtime_marker(COMPONENT, "linux").exists()

    @pytest.mark.asyncio
    async def test_unknown_entry_kind_skipped(self, layout: GameLayout) -> None:
        files = {"legal/fifo": {"type": "socket"}, **SCENARIO_FILES}
        await provisioner(layout, runtime_fetcher(files)).ensure(COMPONENT)
        root = layout.runtime_root(COMPONENT, "linux")
        assert not (root / "legal" / "fifo").exists()
        assert (root / "bin" / "java").is_file()


@pytest.mark.skipif(os.name != "posix", reason="symbolic links need POSIX")
class TestLinks:
    """Link entries."""

    @pytest.mark.asyncio
    async def test_link_created_with_double_pop_target(self, layout: GameLayout) -> None:
        files = {
            "lib/jli": {"type": "directory"},
            "lib/jli/libjli.so": {
                "type": "file",
                "downloads": {"raw": {"url": JAVA_URL, "size": 999}},
            },
            "lib/libjli.so": {"type": "link", "target": "../lib/jli/libjli.so"},
        }

        await provisioner(layout, runtime_fetcher(files)).ensure(COMPONENT)

        root = layout.runtime_root(COMPONENT, "linux")
        link = root / "lib" / "libjli.so"
        assert link.is_symlink()
        assert Path(os.readlink(link)) == root / "lib" / "jli" / "libjli.so"
        assert link.resolve() == (root / "lib" / "jli" / "libjli.so").resolve()

    @pytest.mark.asyncio
    async def test_reinstall_replaces_existing_link(self, layout: GameLayout) -> None:
        files = {"bin/java": SCENARIO_FILES["bin/java"], "bin/jre": {"type": "link", "target": "../bin/java"}}
        await provisioner(layout, runtime_fetcher(files, version_name="17.0.7")).ensure(COMPONENT)

        await provisioner(layout, runtime_fetcher(files, version_name="17.0.8")).ensure(COMPONENT)

        assert layout.runtime_marker(COMPONENT, "linux").read_text() == "17.0.8"
        assert (layout.runtime_root(COMPONENT, "linux") / "bin" / "jre").is_symlink()


class TestWindows:
    """Platform limitations are reported, not silently ignored."""

    @pytest.mark.asyncio
    async def test_link_unsupported(self, layout: GameLayout) -> None:
        files = {"lib/libjli.so": {"type": "link", "target": "../lib/jli/libjli.so"}}
        fetcher = runtime_fetcher(files, platform_key="windows-x64")

        with pytest.raises(PlatformUnsupportedError, match="Symbolic links"):
            await provisioner(layout, fetcher, WINDOWS).ensure(COMPONENT)

        assert not layout.runtime_marker(COMPONENT, "windows-x64").exists()

    @pytest.mark.asyncio
    async def test_executable_bit_skipped_with_warning(
        self, layout: GameLayout, caplog: pytest.LogCaptureFixture
    ) -> None:
        fetcher = runtime_fetcher(SCENARIO_FILES, platform_key="windows-x64")

        with caplog.at_level("WARNING", logger="gameinstaller.install.java"):
            await provisioner(layout, fetcher, WINDOWS).ensure(COMPONENT)

        assert "Executable permission not supported" in caplog.text
        assert layout.runtime_marker(COMPONENT, "windows-x64").read_text() == "17.0.8"


class TestOffline:
    """Availability manifest unreachable."""

    @pytest.mark.asyncio
    async def test_installed_runtime_accepted(self, layout: GameLayout) -> None:
        java = layout.runtime_root(COMPONENT, "linux") / "bin" / "java"
        java.parent.mkdir(parents=True)
        java.write_bytes(b"java")
        reporter = RecordingReporter()

        runtime = await provisioner(layout, FakeFetcher(), reporter=reporter).ensure(COMPONENT)

        assert runtime.binary == java
        assert runtime.version is None
        assert [e.label for e in reporter.of_type(NewSubStep)] == [
            "Downloading java versions manifest",
            "Checking if required version is installed",
            "Done",
        ]

    @pytest.mark.asyncio
    async def test_nothing_installed_is_fatal(self, layout: GameLayout) -> None:
        with pytest.raises(NetworkError, match="no java-runtime-gamma runtime is installed"):
            await provisioner(layout, FakeFetcher()).ensure(COMPONENT)

    @pytest.mark.asyncio
    async def test_malformed_availability_treated_as_offline(self, layout: GameLayout) -> None:
        java = layout.runtime_root(COMPONENT, "linux") / "bin" / "java"
        java.parent.mkdir(parents=True)
        java.write_bytes(b"java")

        runtime = await provisioner(
            layout, FakeFetcher({AVAILABILITY_URL: b"<html>"})
        ).ensure(COMPONENT)

        assert runtime.binary == java

    @pytest.mark.asyncio
    async def test_installed_runtime_accepted_on_arm_linux(self, layout: GameLayout) -> None:
        java = layout.runtime_root(COMPONENT, "linux") / "bin" / "java"
        java.parent.mkdir(parents=True)
        java.write_bytes(b"java")
        arm64 = PlatformContext(os_name="linux", arch="arm64")

        runtime = await provisioner(layout, FakeFetcher(), arm64).ensure(COMPONENT)

        assert runtime.binary == java
