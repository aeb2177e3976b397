"""Application configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from storyshelf.catalog.fetchers import ContentFetcher, FileSystemFetcher, HttpFetcher
from storyshelf.catalog.manifest import DEFAULT_FOLDER, MANIFEST_NAME
from storyshelf.catalog.service import DEFAULT_FETCH_TIMEOUT, CatalogService
from storyshelf.models import Clock, utc_now

CONTENT_DIR_ENV = "STORYSHELF_CONTENT_DIR"
REMOTE_URL_ENV = "STORYSHELF_REMOTE_URL"


def _get_default_content_dir() -> Path:
    """Content directory from the environment, else ``./stories``."""
    configured = os.environ.get(CONTENT_DIR_ENV)
    if configured:
        return Path(configured).expanduser()
    return Path("stories")


@dataclass(slots=True)
class AppConfig:
    content_dir: Path | None = None
    base_path: str = DEFAULT_FOLDER
    manifest_name: str = MANIFEST_NAME
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    remote_url: str | None = None

    def __post_init__(self) -> None:
        if self.content_dir is None:
            self.content_dir = _get_default_content_dir()
        if self.remote_url is None:
            self.remote_url = os.environ.get(REMOTE_URL_ENV) or None

    def resolve_content_dir(self, base_dir: Path | None = None) -> Path:
        if self.content_dir is None:
            self.content_dir = _get_default_content_dir()
        if Path(self.content_dir).is_absolute() or base_dir is None:
            return Path(self.content_dir)
        return base_dir / self.content_dir


def build_fetcher(config: AppConfig, base_dir: Path | None = None) -> ContentFetcher:
    """Pick the HTTP fetcher when a remote URL is configured, else read locally."""
    if config.remote_url:
        return HttpFetcher(config.remote_url, timeout=config.fetch_timeout)
    return FileSystemFetcher(config.resolve_content_dir(base_dir))


def build_service(
    config: AppConfig, base_dir: Path | None = None, *, clock: Clock = utc_now
) -> CatalogService:
    return CatalogService(
        build_fetcher(config, base_dir),
        clock=clock,
        fetch_timeout=config.fetch_timeout,
        manifest_name=config.manifest_name,
    )
