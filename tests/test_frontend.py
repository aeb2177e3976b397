"""Tests for the HTML rendering helpers."""

from __future__ import annotations

from storyshelf.models import DocumentRecord
from storyshelf.web.frontend import (
    _load_template,
    render_error,
    render_page,
    render_story_card,
    render_story_detail,
    render_story_grid,
    router,
)
from tests.conftest import FIXED_ISO


def _record(title: str = "The <Long> Night", content: str = "The <Long> Night\nline two") -> DocumentRecord:
    return DocumentRecord(
        path="./night.txt",
        title=title,
        info="Short story with 2 lines (5 words)",
        file_name="night",
        file_size=len(content),
        line_count=2,
        word_count=5,
        character_count=len(content),
        first_line=content.split("\n")[0],
        timestamp=FIXED_ISO,
        content=content,
    )


class TestLoadTemplate:
    """Tests for _load_template function."""

    def test_layout_is_html(self) -> None:
        result = _load_template("layout.html")
        assert "<!doctype html>" in result.lower()
        assert "</html>" in result.lower()

    def test_layout_has_transition_overlay(self) -> None:
        assert "blackhole-overlay" in _load_template("layout.html")


class TestRenderPage:
    """Tests for render_page."""

    def test_page_contains_navigation(self) -> None:
        html = render_page("Home", "<p>body</p>")

        assert "<p>body</p>" in html
        assert 'href="/stories"' in html
        assert 'href="/games"' in html
        assert "Home | StoryShelf" in html

    def test_page_title_is_escaped(self) -> None:
        assert "&lt;b&gt; | StoryShelf" in render_page("<b>", "")


class TestRenderStories:
    """Tests for story rendering."""

    def test_card_links_to_slug(self) -> None:
        html = render_story_card(_record())

        assert 'href="/story/the-long-night"' in html
        assert "The &lt;Long&gt; Night" in html
        assert "/night.txt" in html
        assert "LINES: 2" in html

    def test_card_preview_is_truncated(self) -> None:
        long_line = "A" * 120
        html = render_story_card(_record(title="Long", content=long_line))
        assert "A" * 80 + "..." in html

    def test_empty_grid(self) -> None:
        assert "No stories available yet." in render_story_grid([])

    def test_detail_renders_each_line(self) -> None:
        html = render_story_detail(_record())

        assert html.count('class="text-line"') == 2
        assert "CHARACTERS: 25" in html

    def test_error(self) -> None:
        assert "Story not found" in render_error("Story not found")


class TestRouter:
    """Tests for the frontend router."""

    def test_routes(self) -> None:
        routes = {route.path for route in router.routes}
        assert {"/", "/stories", "/story/{title}", "/games"} <= routes
