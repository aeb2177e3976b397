"""Document catalog: manifest lookup, filtering and per-story enrichment."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Awaitable, Callable, List, Sequence

from storyshelf.catalog.fetchers import ContentFetcher
from storyshelf.catalog.manifest import (
    MANIFEST_NAME,
    Manifest,
    ManifestLoader,
    fallback_entries,
    normalize_folder,
    resolve_entry_path,
)
from storyshelf.models import (
    CatalogResult,
    Clock,
    DocumentEntry,
    DocumentRecord,
    ErrorKind,
    FailedItem,
    FetchError,
    FolderScan,
    LineFormat,
    ManifestError,
    ReadReport,
    ScanReport,
    isoformat,
    utc_now,
)
from storyshelf.utils.files import is_story_path
from storyshelf.utils.text import (
    count_lines,
    count_words,
    extract_title,
    file_name_from_path,
    first_line,
    format_lines,
    generate_info,
    has_text_extension,
    slugify,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 10.0

ManifestSource = Callable[[str], Awaitable[Manifest]]


def analyze(path: str, content: str, *, timestamp: str) -> DocumentRecord:
    """Combine raw content with the text heuristics into a record."""
    file_name = file_name_from_path(path)
    opening = first_line(content)
    return DocumentRecord(
        path=path,
        title=extract_title(opening, file_name),
        info=generate_info(content, file_name),
        file_name=file_name,
        file_size=len(content),
        line_count=count_lines(content),
        word_count=count_words(content),
        character_count=len(content),
        first_line=opening,
        timestamp=timestamp,
        content=content,
    )


def filter_entries(entries: Sequence[DocumentEntry]) -> List[DocumentEntry]:
    """Drop administrative files and anything that is not a text file."""
    return [entry for entry in entries if is_story_path(entry.path)]


class CatalogService:
    """Stateless access to the stories described by a manifest.

    Every public coroutine returns a :class:`CatalogResult`; failures are
    reported in the result rather than raised.
    """

    def __init__(
        self,
        content_fetcher: ContentFetcher,
        manifest_loader: ManifestSource | None = None,
        *,
        clock: Clock = utc_now,
        fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
        manifest_name: str = MANIFEST_NAME,
    ) -> None:
        self.content_fetcher = content_fetcher
        self.manifest_loader = manifest_loader or ManifestLoader(content_fetcher)
        self.clock = clock
        self.fetch_timeout = fetch_timeout
        self.manifest_name = manifest_name

    def _now(self) -> str:
        return isoformat(self.clock())

    def _fail(self, kind: ErrorKind, message: str, status: int | None = None) -> CatalogResult:
        return CatalogResult.fail(kind, message, clock=self.clock, status=status)

    async def _fetch(self, location: str) -> str:
        try:
            return await asyncio.wait_for(
                self.content_fetcher.fetch_text(location), timeout=self.fetch_timeout
            )
        except FetchError:
            raise
        except asyncio.TimeoutError as exc:
            raise FetchError(f"Timed out after {self.fetch_timeout}s fetching {location}") from exc
        except Exception as exc:
            LOGGER.debug("Fetcher raised for %s", location, exc_info=True)
            raise FetchError(f"Failed to fetch {location}: {exc}") from exc

    async def _load_entries(self, folder: str) -> List[DocumentEntry]:
        location = f"{folder}{self.manifest_name}"
        try:
            manifest = await asyncio.wait_for(
                self.manifest_loader(location), timeout=self.fetch_timeout
            )
        except (FetchError, ManifestError, asyncio.TimeoutError) as exc:
            LOGGER.warning("Could not load manifest %s, using default list: %s", location, exc)
            return fallback_entries(folder)
        except Exception as exc:
            LOGGER.warning(
                "Unexpected error loading manifest %s, using default list: %s", location, exc
            )
            return fallback_entries(folder)

        LOGGER.info("Loaded manifest with %d files", len(manifest.text_files))
        entries = [
            DocumentEntry(
                path=resolve_entry_path(folder, entry.path), title=entry.title, info=entry.info
            )
            for entry in manifest.entries()
        ]
        return filter_entries(entries)

    async def _describe(self, entry: DocumentEntry, timestamp: str) -> DocumentRecord:
        content = await self._fetch(entry.path)
        return analyze(entry.path, content, timestamp=timestamp)

    async def list_documents(
        self, base_path: str | os.PathLike[str], *, include_content: bool = False
    ) -> CatalogResult[List[DocumentRecord]]:
        """Describe every story listed in ``base_path``'s manifest.

        Stories whose content cannot be fetched are left out; the listing as a
        whole still succeeds.
        """
        if isinstance(base_path, os.PathLike):
            base_path = os.fspath(base_path)
        if not base_path or not isinstance(base_path, str):
            return self._fail(ErrorKind.INVALID_INPUT, "Invalid folder path provided")

        folder = normalize_folder(base_path)
        entries = await self._load_entries(folder)

        timestamp = self._now()
        outcomes = await asyncio.gather(
            *(self._describe(entry, timestamp) for entry in entries),
            return_exceptions=True,
        )

        records: List[DocumentRecord] = []
        failed = 0
        for entry, outcome in zip(entries, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                LOGGER.warning("Excluding %s: %s", entry.path, outcome)
                failed += 1
                continue
            if not include_content:
                outcome.content = ""
            records.append(outcome)

        return CatalogResult.ok(
            records,
            folderPath=folder,
            totalFiles=len(records),
            failedFiles=failed,
            scanTimestamp=timestamp,
        )

    async def get_document(
        self, path: str, *, line_format: LineFormat | None = None
    ) -> CatalogResult[DocumentRecord]:
        """Fetch and describe a single story, content included.

        With ``line_format`` the returned ``content`` is the cleaned-up text;
        the counters still describe the text as stored and the stored text is
        kept in ``original_content``.
        """
        if not path or not isinstance(path, str):
            return self._fail(ErrorKind.INVALID_INPUT, "Invalid file path provided")
        if not has_text_extension(path):
            return self._fail(ErrorKind.INVALID_EXTENSION, "File must have .txt extension")
        if line_format is not None and not line_format.line_separator:
            return self._fail(ErrorKind.INVALID_INPUT, "Line separator must not be empty")

        try:
            content = await self._fetch(path)
        except FetchError as exc:
            kind = ErrorKind.NOT_FOUND if exc.status == 404 else ErrorKind.FETCH_ERROR
            return self._fail(kind, exc.message, status=exc.status)

        record = analyze(path, content, timestamp=self._now())
        if line_format is not None:
            lines = format_lines(
                content,
                remove_empty_lines=line_format.remove_empty_lines,
                trim_whitespace=line_format.trim_whitespace,
                line_separator=line_format.line_separator,
            )
            record.original_content = content
            record.content = line_format.line_separator.join(lines)
            record.formatting = line_format
            record.formatted_line_count = len(lines)
        return CatalogResult.ok(record)

    async def read_many(self, paths: Sequence[str]) -> CatalogResult[ReadReport]:
        """Read several stories concurrently; one failure never sinks the batch."""
        if isinstance(paths, str) or not isinstance(paths, (list, tuple)):
            return self._fail(ErrorKind.INVALID_INPUT, "Paths must be a list of file paths")

        results = await asyncio.gather(*(self.get_document(path) for path in paths))

        report = ReadReport()
        for path, result in zip(paths, results):
            if result.success and result.data is not None:
                report.records.append(result.data)
            else:
                message = result.error.message if result.error else "Unknown failure"
                report.failures.append(FailedItem(location=str(path), message=message))

        LOGGER.info("Read %d of %d stories", len(report.records), report.total)
        return CatalogResult.ok(report, timestamp=self._now())

    async def scan_folders(
        self, base_paths: Sequence[str | os.PathLike[str]]
    ) -> CatalogResult[ScanReport]:
        """List several folders concurrently and report each one separately."""
        if isinstance(base_paths, str) or not isinstance(base_paths, (list, tuple)):
            return self._fail(ErrorKind.INVALID_INPUT, "Folder paths must be a list")

        results = await asyncio.gather(*(self.list_documents(path) for path in base_paths))

        report = ScanReport(timestamp=self._now())
        for path, result in zip(base_paths, results):
            if result.success:
                report.scans.append(
                    FolderScan(
                        folder_path=result.metadata["folderPath"],
                        records=result.data or [],
                        failed_files=result.metadata.get("failedFiles", 0),
                    )
                )
            else:
                message = result.error.message if result.error else "Unknown failure"
                report.failures.append(FailedItem(location=str(path), message=message))

        return CatalogResult.ok(report)

    async def find_by_slug(
        self, base_path: str | os.PathLike[str], slug: str
    ) -> CatalogResult[DocumentRecord]:
        """Resolve a route slug to the first story whose title slugifies to it."""
        listing = await self.list_documents(base_path, include_content=True)
        if not listing.success:
            return CatalogResult(success=False, error=listing.error)

        for record in listing.data or []:
            if slugify(record.title) == slug:
                return CatalogResult.ok(record)
        return self._fail(ErrorKind.NOT_FOUND, "Story not found")
