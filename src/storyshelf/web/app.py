"""FastAPI application backing the StoryShelf site."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from storyshelf import __version__
from storyshelf.catalog.service import CatalogService
from storyshelf.models import CatalogError, ErrorKind, LineFormat
from storyshelf.web.deps import get_base_path, get_service
from storyshelf.web.frontend import router as frontend_router

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="StoryShelf", version=__version__)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)
app.include_router(frontend_router)

_STATUS_BY_KIND = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.INVALID_EXTENSION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.FETCH_ERROR: 502,
}


def _raise_for_error(error: CatalogError | None) -> None:
    if error is None:
        raise HTTPException(status_code=500, detail="Unknown catalog failure")
    raise HTTPException(status_code=_STATUS_BY_KIND.get(error.kind, 500), detail=error.to_dict())


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.get("/api/stories")
async def list_stories(
    service: CatalogService = Depends(get_service),
    base_path: str = Depends(get_base_path),
) -> dict[str, Any]:
    """List every story with its metadata, without the full text."""
    result = await service.list_documents(base_path)
    if not result.success:
        _raise_for_error(result.error)

    records = result.data or []
    return {
        "success": True,
        "data": {
            "folderPath": result.metadata.get("folderPath"),
            "totalFiles": len(records),
            "files": [record.to_dict(include_content=False) for record in records],
            "scanTimestamp": result.metadata.get("scanTimestamp"),
        },
    }


@app.get("/api/stories/{slug}")
async def get_story(
    slug: str,
    service: CatalogService = Depends(get_service),
    base_path: str = Depends(get_base_path),
) -> dict[str, Any]:
    result = await service.find_by_slug(base_path, slug)
    if not result.success or result.data is None:
        _raise_for_error(result.error)
    return {"success": True, "data": result.data.to_dict()}


@app.get("/api/document")
async def get_document(
    path: str = Query(..., description="Location of the story file"),
    remove_empty_lines: bool = Query(False, alias="removeEmptyLines"),
    trim_whitespace: bool = Query(False, alias="trimWhitespace"),
    line_separator: Optional[str] = Query(None, alias="lineSeparator"),
    service: CatalogService = Depends(get_service),
) -> dict[str, Any]:
    """Describe a single story file by its location, optionally cleaning up its lines."""
    line_format = None
    if remove_empty_lines or trim_whitespace or line_separator is not None:
        line_format = LineFormat(
            remove_empty_lines=remove_empty_lines,
            trim_whitespace=trim_whitespace,
            line_separator="\n" if line_separator is None else line_separator,
        )

    result = await service.get_document(path, line_format=line_format)
    if not result.success or result.data is None:
        LOGGER.info("Document lookup failed for %s: %s", path, result.error)
        _raise_for_error(result.error)
    return {"success": True, "data": result.data.to_dict()}


@app.get("/api/documents")
async def read_documents(
    paths: List[str] = Query(..., alias="path", description="Story locations, repeatable"),
    service: CatalogService = Depends(get_service),
) -> dict[str, Any]:
    """Read several story files; failures are listed next to the successes."""
    result = await service.read_many(paths)
    if not result.success or result.data is None:
        _raise_for_error(result.error)
    return {
        "success": True,
        "data": result.data.to_dict(),
        "timestamp": result.metadata.get("timestamp"),
    }


@app.get("/api/folders")
async def scan_folders(
    folders: List[str] = Query(..., alias="folder", description="Folder paths, repeatable"),
    service: CatalogService = Depends(get_service),
) -> dict[str, Any]:
    """List the stories of several folders at once."""
    result = await service.scan_folders(folders)
    if not result.success or result.data is None:
        _raise_for_error(result.error)
    return {"success": True, "data": result.data.to_dict()}
