"""Server-rendered HTML pages: home, story grid, story reader and games."""

from __future__ import annotations

from html import escape
from importlib.resources import files
from string import Template
from typing import Iterable

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from storyshelf import __version__
from storyshelf.catalog.service import CatalogService
from storyshelf.models import DocumentRecord, ErrorKind, utc_now
from storyshelf.utils.text import preview, split_lines
from storyshelf.web.deps import get_base_path, get_service

router = APIRouter()


def _load_template(name: str) -> str:
    template = files("storyshelf.web").joinpath("templates", name)
    return template.read_text(encoding="utf-8")


def render_page(page_title: str, content: str) -> str:
    layout = Template(_load_template("layout.html"))
    return layout.substitute(
        page_title=escape(page_title),
        content=content,
        year=utc_now().year,
        version=__version__,
    )


def render_story_card(record: DocumentRecord) -> str:
    return (
        f'<a class="story-terminal" href="/story/{escape(record.slug)}">'
        '<div class="terminal-header">'
        f'<span class="file-path">/{escape(record.file_name)}.txt</span>'
        f'<span class="file-size">{record.file_size} bytes</span>'
        "</div>"
        '<div class="terminal-content">'
        f'<div class="story-title">{escape(record.title)}</div>'
        '<div class="story-stats">'
        f'<span class="stat">LINES: {record.line_count}</span>'
        f'<span class="stat">WORDS: {record.word_count}</span>'
        "</div>"
        f'<div class="story-preview">{escape(preview(record.first_line))}</div>'
        f'<div class="story-info">{escape(record.info)}</div>'
        "</div>"
        '<div class="terminal-footer"><span class="access-code">ACCESS_READ</span></div>'
        "</a>"
    )


def render_story_grid(records: Iterable[DocumentRecord]) -> str:
    cards = "\n".join(render_story_card(record) for record in records)
    if not cards:
        cards = '<div class="empty-state">No stories available yet.</div>'
    return (
        '<div class="stories-container">'
        '<div class="stories-page-heading"><h1>Stories</h1></div>'
        f'<div class="stories-grid">{cards}</div>'
        "</div>"
    )


def render_story_detail(record: DocumentRecord) -> str:
    lines = "\n".join(
        f'<div class="text-line">{escape(line)}</div>' for line in split_lines(record.content)
    )
    return (
        '<div class="story-container">'
        '<div class="story-header">'
        '<a href="/stories" class="back-button">&larr; BACK TO STORIES</a>'
        '<div class="story-title-section">'
        f'<h1 class="story-title">{escape(record.title)}</h1>'
        '<div class="story-file-info">'
        f'<div class="metadata-line">{record.file_size} bytes</div>'
        f'<div class="metadata-line">LINES: {record.line_count}</div>'
        f'<div class="metadata-line">WORDS: {record.word_count}</div>'
        f'<div class="metadata-line">CHARACTERS: {record.character_count}</div>'
        "</div></div></div>"
        f'<div class="story-text">{lines}</div>'
        "</div>"
    )


def render_error(message: str) -> str:
    return (
        '<div class="error-state">'
        f"<h2>{escape(message)}</h2>"
        '<p><a href="/stories" class="back-button">&larr; BACK TO STORIES</a></p>'
        "</div>"
    )


@router.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    return HTMLResponse(content=render_page("Home", _load_template("home.html")))


@router.get("/games", response_class=HTMLResponse)
async def games() -> HTMLResponse:
    return HTMLResponse(content=render_page("Games", _load_template("games.html")))


@router.get("/stories", response_class=HTMLResponse)
async def stories(
    service: CatalogService = Depends(get_service),
    base_path: str = Depends(get_base_path),
) -> HTMLResponse:
    result = await service.list_documents(base_path)
    if not result.success:
        body = render_error(result.error.message if result.error else "Unable to load stories")
        return HTMLResponse(content=render_page("Stories", body), status_code=500)
    return HTMLResponse(content=render_page("Stories", render_story_grid(result.data or [])))


@router.get("/story/{title}", response_class=HTMLResponse)
async def story(
    title: str,
    service: CatalogService = Depends(get_service),
    base_path: str = Depends(get_base_path),
) -> HTMLResponse:
    result = await service.find_by_slug(base_path, title)
    if not result.success or result.data is None:
        message = result.error.message if result.error else "Story not found"
        status = 404 if result.error is None or result.error.kind == ErrorKind.NOT_FOUND else 500
        return HTMLResponse(content=render_page("Story", render_error(message)), status_code=status)
    record = result.data
    return HTMLResponse(content=render_page(record.title, render_story_detail(record)))
