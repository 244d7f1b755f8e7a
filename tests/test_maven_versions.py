"""Tests for scripts/maven_versions.py."""

from __future__ import annotations

import pytest

from gameinstaller.errors import NetworkError
from scripts.maven_versions import fetch_metadata, run
from tests.fixtures.installer import FakeFetcher

METADATA_URL = "https://maven.test/net/fabricmc/fabric-loader/maven-metadata.xml"
METADATA_XML = b"""<metadata>
  <groupId>net.fabricmc</groupId>
  <artifactId>fabric-loader</artifactId>
  <versioning>
    <release>0.15.0</release>
    <versions><version>0.14.21</version><version>0.15.0</version></versions>
  </versioning>
</metadata>"""


class TestFetchMetadata:
    """Metadata lookup by group:artifact."""

    @pytest.mark.asyncio
    async def test_fetch(self) -> None:
        fetcher = FakeFetcher({METADATA_URL: METADATA_XML})
        metadata = await fetch_metadata(fetcher, "https://maven.test/", "net.fabricmc:fabric-loader")
        assert metadata.versioning.versions == ["0.14.21", "0.15.0"]
        assert fetcher.requests == [METADATA_URL]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("coordinate", ["net.fabricmc", "a:b:c", ":b"])
    async def test_bad_coordinate(self, coordinate: str) -> None:
        with pytest.raises(ValueError, match="group:artifact"):
            await fetch_metadata(FakeFetcher(), "https://maven.test", coordinate)

    @pytest.mark.asyncio
    async def test_not_found(self) -> None:
        with pytest.raises(NetworkError):
            await fetch_metadata(FakeFetcher(), "https://maven.test", "a:b")


class TestRun:
    """Printed listing and exit codes."""

    @pytest.mark.asyncio
    async def test_prints_versions(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        fetcher = FakeFetcher({METADATA_URL: METADATA_XML})
        monkeypatch.setattr("scripts.maven_versions.HttpFetcher", lambda **kwargs: fetcher)

        code = await run("https://maven.test", "net.fabricmc:fabric-loader", 5.0)

        assert code == 0
        assert capsys.readouterr().out.splitlines() == [
            "net.fabricmc:fabric-loader",
            "release: 0.15.0",
            "  0.14.21",
            "  0.15.0",
        ]
        assert fetcher.closed

    @pytest.mark.asyncio
    async def test_failure_exit_code(self, monkeypatch: pytest.MonkeyPatch) -> None:
        fetcher = FakeFetcher()
        monkeypatch.setattr("scripts.maven_versions.HttpFetcher", lambda **kwargs: fetcher)

        assert await run("https://maven.test", "a:b", 5.0) == 1
        assert fetcher.closed
