"""Tests for the Java runtime manifests."""

from __future__ import annotations

from gameinstaller.manifest.java import (
    JavaFilesManifest,
    JavaRuntimeAvailability,
    RuntimeFileKind,
)
from tests.fixtures.installer import dumps, java_availability_doc, java_files_doc


class TestJavaRuntimeAvailability:
    """Platform -> component -> candidates."""

    def test_candidates(self) -> None:
        availability = JavaRuntimeAvailability.parse(dumps(java_availability_doc()))
        candidates = availability.candidates("linux", "java-runtime-gamma")
        assert len(candidates) == 1
        assert candidates[0].version.name == "17.0.8"
        assert candidates[0].manifest.url == "https://meta.test/java/manifest.json"

    def test_missing_platform_or_component(self) -> None:
        availability = JavaRuntimeAvailability.parse(dumps(java_availability_doc()))
        assert availability.candidates("mac-os", "java-runtime-gamma") == []
        assert availability.candidates("linux", "jre-legacy") == []

    def test_empty_component_list(self) -> None:
        availability = JavaRuntimeAvailability.parse(b'{"linux": {"jre-legacy": []}, "gamecore": {}}')
        assert availability.candidates("linux", "jre-legacy") == []


class TestJavaFilesManifest:
    """Per-build file tree."""

    def test_entry_kinds_in_order(self) -> None:
        doc = java_files_doc(
            {
                "bin": {"type": "directory"},
                "bin/java": {
                    "type": "file",
                    "executable": True,
                    "downloads": {
                        "raw": {"url": "https://meta.test/java", "size": 999, "sha1": "aa"},
                        "lzma": {"url": "https://meta.test/java.lzma", "size": 300, "sha1": "bb"},
                    },
                },
                "lib/libjli.so": {"type": "link", "target": "../lib/jli/libjli.so"},
                "legal": {"type": "socket"},
            }
        )
        files = JavaFilesManifest.parse(dumps(doc)).files
        assert list(files) == ["bin", "bin/java", "lib/libjli.so", "legal"]
        assert files["bin"].kind is RuntimeFileKind.DIRECTORY
        assert files["bin/java"].kind is RuntimeFileKind.FILE
        assert files["bin/java"].executable is True
        assert files["bin/java"].downloads is not None
        assert files["bin/java"].downloads.raw.size == 999
        assert files["lib/libjli.so"].kind is RuntimeFileKind.LINK
        assert files["lib/libjli.so"].target == "../lib/jli/libjli.so"
        assert files["legal"].kind is None

    def test_executable_defaults_false(self) -> None:
        files = JavaFilesManifest.parse(
            dumps(java_files_doc({"a": {"type": "file", "downloads": {"raw": {"url": "u", "size": 1}}}}))
        ).files
        assert files["a"].executable is False
