"""Text heuristics used to describe story files.

Everything here is pure: the functions take raw content or names and never
touch the filesystem or the network.
"""

from __future__ import annotations

import re
from typing import List

TEXT_EXTENSION = ".txt"
TITLE_MAX_CHARS = 100

_TITLE_START = re.compile(r"^[A-Z]")
_NAME_SEPARATORS = re.compile(r"[-_\s]+")
_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
_SLUG_STRIP = re.compile(r"[^a-zA-Z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def split_lines(content: str) -> List[str]:
    return content.split("\n")


def split_words(content: str) -> List[str]:
    return [word for word in _WHITESPACE.split(content.strip()) if word]


def count_lines(content: str) -> int:
    """Number of ``\\n``-separated lines; an empty string still counts as one line."""
    return len(split_lines(content))


def count_words(content: str) -> int:
    return len(split_words(content))


def first_line(content: str) -> str:
    return split_lines(content)[0].strip()


def has_text_extension(path: str) -> bool:
    return path.lower().endswith(TEXT_EXTENSION)


def file_name_from_path(path: str) -> str:
    """Final path segment with the text extension removed."""
    name = path.replace("\\", "/").split("/")[-1]
    if has_text_extension(name):
        name = name[: -len(TEXT_EXTENSION)]
    return name


def extract_title(first_line: str, file_name: str) -> str:
    """Use the first line as title when it looks like one, else prettify the file name.

    A first line qualifies when it is non-empty, shorter than 100 characters,
    starts with an uppercase letter and mentions neither ``http`` nor ``www``.
    """
    if (
        first_line
        and len(first_line) < TITLE_MAX_CHARS
        and _TITLE_START.match(first_line)
        and "http" not in first_line
        and "www" not in first_line
    ):
        return first_line

    words = _NAME_SEPARATORS.split(file_name)
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


def generate_info(content: str, file_name: str = "") -> str:
    """Build the one-line blurb shown under a story.

    The blurb is a length bucket (1 / 10 / 50 line thresholds), the word count,
    then any content hints in a fixed order: links, email addresses, dates.
    """
    line_count = count_lines(content)
    word_count = count_words(content)

    if line_count <= 1:
        info = "Single line text file"
    elif line_count <= 10:
        info = f"Short story with {line_count} lines"
    elif line_count <= 50:
        info = f"Medium story with {line_count} lines"
    else:
        info = f"Long story with {line_count} lines"

    info += f" ({word_count} words)"

    if "http" in content or "www" in content:
        info += " - Contains links/URLs"
    if "@" in content:
        info += " - Contains email addresses"
    if _DATE_PATTERN.search(content):
        info += " - Contains dates"

    return info


def looks_like_story(content: str) -> bool:
    """True when the content has at least two non-blank lines."""
    return sum(1 for line in split_lines(content) if line.strip()) >= 2


def slugify(title: str) -> str:
    """URL-safe identifier: alphanumerics only, whitespace runs become ``-``, lower-cased."""
    stripped = _SLUG_STRIP.sub("", title)
    return _WHITESPACE.sub("-", stripped).lower()


def preview(line: str, limit: int = 80) -> str:
    if len(line) > limit:
        return line[:limit] + "..."
    return line


def format_lines(
    content: str,
    *,
    remove_empty_lines: bool = False,
    trim_whitespace: bool = False,
    line_separator: str = "\n",
) -> List[str]:
    """Split ``content`` on ``line_separator`` and apply the requested clean-ups.

    With ``trim_whitespace`` the whole text is stripped before splitting and
    every line is stripped afterwards. Blank lines are judged after stripping.
    """
    if not line_separator:
        raise ValueError("line_separator must not be empty")
    if trim_whitespace:
        content = content.strip()
    lines = content.split(line_separator)
    if remove_empty_lines:
        lines = [line for line in lines if line.strip()]
    if trim_whitespace:
        lines = [line.strip() for line in lines]
    return lines
