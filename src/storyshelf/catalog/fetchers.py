"""Content fetchers: given a location, return raw text or raise ``FetchError``."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Protocol
from urllib.parse import urljoin

import httpx

from storyshelf.models import FetchError

LOGGER = logging.getLogger(__name__)


class ContentFetcher(Protocol):
    """Anything able to turn a location into text."""

    async def fetch_text(self, location: str) -> str: ...


class FileSystemFetcher:
    """Serve locations from a local directory, never outside of it."""

    def __init__(self, root: Path) -> None:
        self.root = Path(os.path.realpath(str(root)))

    def resolve(self, location: str) -> Path:
        if "\0" in location:
            raise FetchError(f"Invalid location: {location!r}", status=400)

        relative = location.replace("\\", "/").lstrip("/")
        while relative.startswith("./"):
            relative = relative[2:]

        real_path = os.path.realpath(str(self.root / relative))
        # Separator suffix so /stories2 is not accepted for root /stories
        if not (real_path + os.sep).startswith(str(self.root) + os.sep):
            raise FetchError(f"Access denied: {location} is outside the content root", status=403)
        return Path(real_path)

    def _read(self, path: Path) -> str:
        return path.read_bytes().decode("utf-8", errors="replace")

    async def fetch_text(self, location: str) -> str:
        try:
            path = self.resolve(location)
            if not path.is_file():
                raise FetchError(f"Failed to fetch {location}: 404 Not Found", status=404)
            LOGGER.debug("Reading %s", path)
            return await asyncio.to_thread(self._read, path)
        except FetchError:
            raise
        except ValueError as exc:
            raise FetchError(f"Invalid location {location!r}: {exc}", status=400) from exc
        except OSError as exc:
            # ENAMETOOLONG and friends surface here as well as read failures
            raise FetchError(f"Failed to read {location}: {exc}", status=500) from exc


class HttpFetcher:
    """Fetch locations with HTTP GET relative to a base URL."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout
        self.transport = transport

    def resolve(self, location: str) -> str:
        return urljoin(self.base_url, location)

    async def fetch_text(self, location: str) -> str:
        try:
            url = self.resolve(location)
        except ValueError as exc:
            raise FetchError(f"Invalid location {location!r}: {exc}", status=400) from exc

        LOGGER.debug("GET %s", url)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(url)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol, ValueError) as exc:
            raise FetchError(f"Invalid URL {url!r}: {exc}", status=400) from exc
        except httpx.TimeoutException as exc:
            raise FetchError(f"Request timeout for {url}") from exc
        except httpx.RequestError as exc:
            raise FetchError(f"Request error for {url}: {exc}") from exc

        if not response.is_success:
            raise FetchError(
                f"Failed to fetch {url}: {response.status_code} {response.reason_phrase}",
                status=response.status_code,
            )
        return response.text
