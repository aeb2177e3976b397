"""Tests for the manifest schema and the manifest maintenance tool."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from storyshelf.catalog.manifest import (
    MANIFEST_NAME,
    Manifest,
    ManifestLoader,
    build_manifest,
    fallback_entries,
    parse_manifest,
    resolve_entry_path,
    update_manifest,
    write_manifest,
)
from storyshelf.models import FetchError, ManifestError
from tests.conftest import FIXED_ISO, FakeFetcher, fixed_clock

SAMPLE = {
    "folderPath": "./",
    "generatedAt": FIXED_ISO,
    "textFiles": [
        {"path": "./a.txt", "title": "A", "info": "Short story with 2 lines (2 words)"},
        {"path": "./b.txt"},
    ],
    "totalFiles": 2,
    "somethingElse": True,
}


class TestParseManifest:
    """Test parse_manifest function."""

    def test_parse_valid(self) -> None:
        manifest = parse_manifest(json.dumps(SAMPLE))

        assert manifest.folder_path == "./"
        assert manifest.total_files == 2
        assert [entry.path for entry in manifest.entries()] == ["./a.txt", "./b.txt"]
        assert manifest.entries()[1].title == ""

    def test_parse_invalid_json(self) -> None:
        with pytest.raises(ManifestError):
            parse_manifest("{not json")

    def test_parse_missing_fields(self) -> None:
        with pytest.raises(ManifestError):
            parse_manifest(json.dumps({"textFiles": []}))

    def test_parse_negative_total(self) -> None:
        data = dict(SAMPLE, totalFiles=-1)
        with pytest.raises(ManifestError):
            parse_manifest(json.dumps(data))

    def test_round_trip_keeps_wire_names(self) -> None:
        data = json.loads(parse_manifest(json.dumps(SAMPLE)).to_json())

        assert set(data) == {
            "folderPath",
            "generatedAt",
            "textFiles",
            "totalFiles",
            "scanMethod",
            "version",
        }


class TestFallbackEntries:
    """Test fallback_entries function."""

    def test_single_example(self) -> None:
        entries = fallback_entries("./stories")

        assert len(entries) == 1
        assert entries[0].path == "./stories/example.txt"
        assert entries[0].title == "Example Text File"


class TestResolveEntryPath:
    """Test resolve_entry_path function."""

    @pytest.mark.parametrize(
        ("folder", "path", "expected"),
        [
            ("./", "./a.txt", "./a.txt"),
            ("./", "a.txt", "./a.txt"),
            ("stories/", "./a.txt", "stories/a.txt"),
            ("stories", "a.txt", "stories/a.txt"),
            ("stories/", "stories/a.txt", "stories/a.txt"),
            ("stories/", "./nested/a.txt", "stories/nested/a.txt"),
            ("stories/", "/abs/a.txt", "/abs/a.txt"),
            ("stories/", "https://cdn.example.com/a.txt", "https://cdn.example.com/a.txt"),
        ],
    )
    def test_resolution(self, folder: str, path: str, expected: str) -> None:
        assert resolve_entry_path(folder, path) == expected


class TestManifestLoader:
    """Test ManifestLoader."""

    @pytest.mark.asyncio
    async def test_loads_through_fetcher(self) -> None:
        fetcher = FakeFetcher({"./file-manifest.json": json.dumps(SAMPLE)})

        manifest = await ManifestLoader(fetcher)("./file-manifest.json")

        assert isinstance(manifest, Manifest)
        assert fetcher.requested == ["./file-manifest.json"]

    @pytest.mark.asyncio
    async def test_missing_manifest_raises_fetch_error(self) -> None:
        with pytest.raises(FetchError):
            await ManifestLoader(FakeFetcher())("./file-manifest.json")


class TestBuildManifest:
    """Test the manifest maintenance tool."""

    def test_build_skips_admin_and_short_files(self, story_dir: Path) -> None:
        """Should keep only multi-line, non-administrative .txt files."""
        manifest = build_manifest(story_dir, clock=fixed_clock)

        paths = [entry.path for entry in manifest.text_files]
        assert paths == ["./quiet_orbit.txt", "./the-long-night.txt"]
        assert manifest.total_files == 2
        assert manifest.generated_at == FIXED_ISO
        assert manifest.folder_path == "./"

    def test_build_titles_and_info(self, story_dir: Path) -> None:
        manifest = build_manifest(story_dir, clock=fixed_clock)
        by_path = {entry.path: entry for entry in manifest.text_files}

        assert by_path["./the-long-night.txt"].title == "The Long Night"
        assert by_path["./quiet_orbit.txt"].title == "Quiet Orbit"
        assert by_path["./the-long-night.txt"].info == "Short story with 4 lines (10 words)"

    def test_build_custom_folder(self, story_dir: Path) -> None:
        manifest = build_manifest(story_dir, folder_path="/stories", clock=fixed_clock)

        assert manifest.folder_path == "/stories/"
        assert manifest.text_files[0].path.startswith("/stories/")

    def test_build_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(ManifestError):
            build_manifest(tmp_path / "missing")

    def test_build_skips_undecodable_file(self, tmp_path: Path) -> None:
        (tmp_path / "binary.txt").write_bytes(b"\xff\xfe\x00bad\nbytes\n")
        (tmp_path / "good.txt").write_text("Good\nStory\n", encoding="utf-8")

        manifest = build_manifest(tmp_path, clock=fixed_clock)

        assert [entry.path for entry in manifest.text_files] == ["./good.txt"]


class TestWriteManifest:
    """Test writing manifests to disk."""

    def test_update_writes_file(self, story_dir: Path) -> None:
        manifest = update_manifest(story_dir, clock=fixed_clock)

        written = json.loads((story_dir / MANIFEST_NAME).read_text(encoding="utf-8"))
        assert written["totalFiles"] == manifest.total_files == 2
        assert written["generatedAt"] == FIXED_ISO

    def test_update_is_idempotent_apart_from_timestamp(self, story_dir: Path) -> None:
        first = update_manifest(story_dir, clock=fixed_clock)
        second = update_manifest(story_dir)

        assert first.text_files == second.text_files
        assert first.generated_at != second.generated_at

    def test_manifest_file_is_not_listed(self, story_dir: Path) -> None:
        """A regenerated manifest should not pick up itself or other admin files."""
        update_manifest(story_dir, clock=fixed_clock)
        manifest = update_manifest(story_dir, clock=fixed_clock)

        assert all("manifest" not in entry.path for entry in manifest.text_files)

    def test_write_to_missing_directory(self, tmp_path: Path) -> None:
        manifest = Manifest(folder_path="./", generated_at=FIXED_ISO)
        with pytest.raises(ManifestError):
            write_manifest(manifest, tmp_path / "missing" / MANIFEST_NAME)
