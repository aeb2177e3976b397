"""Pytest fixtures for StoryShelf tests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Iterable

import pytest

from storyshelf.models import FetchError

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc)
FIXED_ISO = "2024-05-01T12:30:00.000Z"


class FakeFetcher:
    """In-memory content fetcher; unknown locations raise a 404 FetchError."""

    def __init__(
        self,
        files: Dict[str, str] | None = None,
        *,
        failing: Iterable[str] = (),
        status: int | None = 500,
    ) -> None:
        self.files = dict(files or {})
        self.failing = set(failing)
        self.status = status
        self.requested: list[str] = []

    async def fetch_text(self, location: str) -> str:
        self.requested.append(location)
        if location in self.failing:
            raise FetchError(f"Failed to fetch {location}: boom", status=self.status)
        if location not in self.files:
            raise FetchError(f"Failed to fetch {location}: 404 Not Found", status=404)
        return self.files[location]


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock():
    return fixed_clock


@pytest.fixture
def story_dir(tmp_path):
    """A content directory with two stories, a README and a one-line note."""
    (tmp_path / "the-long-night.txt").write_text(
        "The Long Night\nIt was dark.\nThen it was darker.\n", encoding="utf-8"
    )
    (tmp_path / "quiet_orbit.txt").write_text(
        "once upon an orbit\nnothing happened\n", encoding="utf-8"
    )
    (tmp_path / "README.txt").write_text("Docs\nMore docs\n", encoding="utf-8")
    (tmp_path / "note.txt").write_text("just one line", encoding="utf-8")
    (tmp_path / "cover.md").write_text("# Cover\nMarkdown\n", encoding="utf-8")
    return tmp_path
