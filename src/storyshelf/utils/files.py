"""Utility helpers for working with story files."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from storyshelf.utils.text import has_text_extension

ADMIN_MARKERS = ("readme", "manifest", "license", "changelog", "contributing")


def is_admin_file(path: str) -> bool:
    """True for documentation-style files that should never be listed as stories."""
    lowered = path.lower()
    return any(marker in lowered for marker in ADMIN_MARKERS)


def is_story_path(path: str) -> bool:
    return not is_admin_file(path) and has_text_extension(path)


def iter_text_paths(directory: Path) -> Iterator[Path]:
    """Yield text files directly inside ``directory``, sorted by name."""
    for child in sorted(directory.iterdir(), key=lambda item: item.name):
        if child.is_file() and has_text_extension(child.name):
            yield child
