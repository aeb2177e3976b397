"""Schema, loading and generation of ``file-manifest.json``.

The manifest is produced offline by :func:`update_manifest` (exposed as the
``storyshelf manifest`` command) and read at request time by the catalog.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from storyshelf.catalog.fetchers import ContentFetcher
from storyshelf.models import Clock, DocumentEntry, ManifestError, isoformat, utc_now
from storyshelf.utils.files import is_admin_file, iter_text_paths
from storyshelf.utils.text import (
    extract_title,
    file_name_from_path,
    first_line,
    generate_info,
    looks_like_story,
)

LOGGER = logging.getLogger(__name__)

MANIFEST_NAME = "file-manifest.json"
MANIFEST_VERSION = "1.1.0"
DEFAULT_FOLDER = "./"

FALLBACK_FILE = "example.txt"
FALLBACK_TITLE = "Example Text File"
FALLBACK_INFO = "Sample text file shown when no manifest is available"


class ManifestEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    path: str
    title: str = ""
    info: str = ""


class Manifest(BaseModel):
    """On-disk manifest layout; field aliases match the JSON keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    folder_path: str = Field(alias="folderPath")
    generated_at: str = Field(alias="generatedAt")
    text_files: List[ManifestEntry] = Field(default_factory=list, alias="textFiles")
    total_files: int = Field(default=0, ge=0, alias="totalFiles")
    scan_method: str = Field(default="auto-updated", alias="scanMethod")
    version: str = MANIFEST_VERSION

    def entries(self) -> List[DocumentEntry]:
        return [
            DocumentEntry(path=item.path, title=item.title, info=item.info)
            for item in self.text_files
        ]

    def to_json(self) -> str:
        return json.dumps(self.model_dump(by_alias=True), indent=2, ensure_ascii=False)


def normalize_folder(folder_path: str) -> str:
    return folder_path if folder_path.endswith("/") else folder_path + "/"


def resolve_entry_path(folder_path: str, path: str) -> str:
    """Resolve a manifest entry path against the folder holding the manifest.

    Absolute paths, URLs and paths already carrying the folder prefix are kept
    as they are. Anything else (``./tale.txt``, ``tale.txt``) is taken to be
    relative to ``folder_path``.
    """
    folder = normalize_folder(folder_path)
    if path.startswith("/") or "://" in path:
        return path
    if folder != DEFAULT_FOLDER and path.startswith(folder):
        return path

    relative = path
    while relative.startswith("./"):
        relative = relative[2:]
    return f"{folder}{relative}"


def fallback_entries(folder_path: str) -> List[DocumentEntry]:
    """The single well-known sample story used when no manifest can be read."""
    return [
        DocumentEntry(
            path=f"{normalize_folder(folder_path)}{FALLBACK_FILE}",
            title=FALLBACK_TITLE,
            info=FALLBACK_INFO,
        )
    ]


def parse_manifest(raw: str | bytes) -> Manifest:
    try:
        return Manifest.model_validate(json.loads(raw))
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Manifest is not valid JSON: {exc}") from exc
    except ValidationError as exc:
        raise ManifestError(f"Manifest does not match the expected layout: {exc}") from exc


class ManifestLoader:
    """Fetch and validate a manifest through a content fetcher."""

    def __init__(self, fetcher: ContentFetcher) -> None:
        self.fetcher = fetcher

    async def __call__(self, location: str) -> Manifest:
        raw = await self.fetcher.fetch_text(location)
        return parse_manifest(raw)


def describe_file(path: Path, folder_path: str) -> DocumentEntry | None:
    """Build the manifest entry for one file, or ``None`` when it is not a story."""
    if is_admin_file(path.name):
        LOGGER.debug("Skipping administrative file %s", path.name)
        return None

    content = path.read_text(encoding="utf-8")
    if not looks_like_story(content):
        LOGGER.debug("Skipping %s: fewer than two non-blank lines", path.name)
        return None

    return DocumentEntry(
        path=f"{folder_path}{path.name}",
        title=extract_title(first_line(content), file_name_from_path(path.name)),
        info=generate_info(content, path.name),
    )


def build_manifest(
    directory: Path,
    *,
    folder_path: str | None = None,
    clock: Clock = utc_now,
) -> Manifest:
    """Scan ``directory`` for story files and describe them.

    Entry paths are ``folder_path`` joined with the file name; by default they
    are relative to the directory holding the manifest (``./``).
    """
    if not directory.is_dir():
        raise ManifestError(f"Not a directory: {directory}")

    prefix = normalize_folder(folder_path if folder_path is not None else DEFAULT_FOLDER)
    entries: List[ManifestEntry] = []
    try:
        paths = list(iter_text_paths(directory))
    except OSError as exc:
        raise ManifestError(f"Unable to read directory {directory}: {exc}") from exc

    for path in paths:
        try:
            entry = describe_file(path, prefix)
        except (OSError, UnicodeDecodeError) as exc:
            LOGGER.warning("Skipping unreadable file %s: %s", path, exc)
            continue
        if entry is not None:
            entries.append(ManifestEntry(**entry.to_dict()))

    return Manifest(
        folder_path=prefix,
        generated_at=isoformat(clock()),
        text_files=entries,
        total_files=len(entries),
    )


def write_manifest(manifest: Manifest, target: Path) -> Path:
    try:
        target.write_text(manifest.to_json(), encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"Failed to write manifest: {exc}") from exc
    return target


def update_manifest(
    directory: Path,
    *,
    folder_path: str | None = None,
    clock: Clock = utc_now,
) -> Manifest:
    """Regenerate ``directory/file-manifest.json`` from the files on disk."""
    manifest = build_manifest(directory, folder_path=folder_path, clock=clock)
    target = write_manifest(manifest, directory / MANIFEST_NAME)
    LOGGER.info("Manifest written to %s with %d stories", target, manifest.total_files)
    return manifest
