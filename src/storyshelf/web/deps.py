"""FastAPI dependencies shared by the HTML pages and the JSON API."""

from __future__ import annotations

from pathlib import Path

from storyshelf.catalog.service import CatalogService
from storyshelf.config import AppConfig, build_service

_config: AppConfig | None = None


def set_config(config: AppConfig | None) -> None:
    """Install the configuration used by request handlers (``None`` resets to defaults)."""
    global _config
    _config = config


def get_config() -> AppConfig:
    global _config
    if _config is None:
        _config = AppConfig()
    return _config


def get_service() -> CatalogService:
    return build_service(get_config(), Path.cwd())


def get_base_path() -> str:
    return get_config().base_path
