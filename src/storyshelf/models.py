"""Core StoryShelf data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from storyshelf.utils.text import slugify

T = TypeVar("T")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(moment: datetime) -> str:
    """Render a timestamp as ISO-8601 with millisecond precision and a ``Z`` suffix."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment.isoformat(timespec="milliseconds") + "Z"


class StoryShelfError(Exception):
    """Base exception for StoryShelf."""


class FetchError(StoryShelfError):
    """Raised by content fetchers when a location cannot be retrieved."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class ManifestError(StoryShelfError):
    """Raised when a manifest cannot be read, validated or written."""


class ErrorKind(str, Enum):
    INVALID_INPUT = "InvalidInput"
    INVALID_EXTENSION = "InvalidExtension"
    NOT_FOUND = "NotFound"
    FETCH_ERROR = "FetchError"


@dataclass(slots=True)
class DocumentEntry:
    """Manifest record pointing at a story file."""

    path: str
    title: str = ""
    info: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "title": self.title, "info": self.info}


@dataclass(slots=True, frozen=True)
class LineFormat:
    """Clean-ups applied to a story's text before it is returned."""

    remove_empty_lines: bool = False
    trim_whitespace: bool = False
    line_separator: str = "\n"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "removeEmptyLines": self.remove_empty_lines,
            "trimWhitespace": self.trim_whitespace,
            "lineSeparator": self.line_separator,
        }


@dataclass(slots=True)
class DocumentRecord:
    """A manifest entry enriched with the analysis of its content."""

    path: str
    title: str
    info: str
    file_name: str
    file_size: int
    line_count: int
    word_count: int
    character_count: int
    first_line: str
    timestamp: str
    content: str = ""
    original_content: Optional[str] = None
    formatting: Optional[LineFormat] = None
    formatted_line_count: Optional[int] = None

    @property
    def slug(self) -> str:
        return slugify(self.title)

    def to_dict(self, *, include_content: bool = True) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "path": self.path,
            "title": self.title,
            "info": self.info,
            "fileName": self.file_name,
            "fileSize": self.file_size,
            "lineCount": self.line_count,
            "wordCount": self.word_count,
            "characterCount": self.character_count,
            "firstLine": self.first_line,
            "slug": self.slug,
            "timestamp": self.timestamp,
        }
        if include_content:
            data["content"] = self.content
            if self.original_content is not None:
                data["originalContent"] = self.original_content
        if self.formatting is not None:
            data["formattingApplied"] = self.formatting.to_dict()
            data["formattedLineCount"] = self.formatted_line_count
        return data


@dataclass(slots=True)
class FailedItem:
    """A path or folder that could not be processed, with the reason."""

    location: str
    message: str


@dataclass(slots=True)
class ReadReport:
    """Outcome of reading several stories at once."""

    records: List[DocumentRecord] = field(default_factory=list)
    failures: List[FailedItem] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.records) + len(self.failures)

    def to_dict(self, *, include_content: bool = True) -> Dict[str, Any]:
        return {
            "successfulReads": [r.to_dict(include_content=include_content) for r in self.records],
            "failedReads": [{"filePath": f.location, "error": f.message} for f in self.failures],
            "totalFiles": self.total,
            "successfulCount": len(self.records),
            "failedCount": len(self.failures),
        }


@dataclass(slots=True)
class FolderScan:
    folder_path: str
    records: List[DocumentRecord]
    failed_files: int = 0


@dataclass(slots=True)
class ScanReport:
    """Outcome of listing several folders at once."""

    scans: List[FolderScan] = field(default_factory=list)
    failures: List[FailedItem] = field(default_factory=list)
    timestamp: str = ""

    @property
    def total_files(self) -> int:
        return sum(len(scan.records) for scan in self.scans)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "successfulScans": [
                {
                    "folderPath": scan.folder_path,
                    "totalFiles": len(scan.records),
                    "files": [r.to_dict(include_content=False) for r in scan.records],
                }
                for scan in self.scans
            ],
            "failedScans": [{"folderPath": f.location, "error": f.message} for f in self.failures],
            "totalFolders": len(self.scans) + len(self.failures),
            "successfulFolders": len(self.scans),
            "failedFolders": len(self.failures),
            "totalFiles": self.total_files,
            "scanTimestamp": self.timestamp,
        }


@dataclass(slots=True)
class CatalogError:
    """Failure payload carried by a :class:`CatalogResult`."""

    message: str
    kind: ErrorKind
    timestamp: str
    status: int | None = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "message": self.message,
            "type": self.kind.value,
            "timestamp": self.timestamp,
        }
        if self.status is not None:
            data["status"] = self.status
        return data


@dataclass(slots=True)
class CatalogResult(Generic[T]):
    """Tagged success/failure outcome of a catalog operation."""

    success: bool
    data: Optional[T] = None
    error: Optional[CatalogError] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: T, **metadata: Any) -> "CatalogResult[T]":
        return cls(success=True, data=data, metadata=dict(metadata))

    @classmethod
    def fail(
        cls,
        kind: ErrorKind,
        message: str,
        *,
        clock: Clock = utc_now,
        status: int | None = None,
    ) -> "CatalogResult[T]":
        error = CatalogError(
            message=message, kind=kind, timestamp=isoformat(clock()), status=status
        )
        return cls(success=False, error=error)
