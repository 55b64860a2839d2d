"""Read or download stylesheet sources referenced by `@import`."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, TypeVar
from urllib.parse import unquote, urlsplit

import httpx

from themecord.errors import FetchError, OperationCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_local_locator(locator: str) -> bool:
    """True for filesystem paths and ``file://`` URLs."""
    scheme = urlsplit(locator).scheme
    # A single letter is a Windows drive ("C:\\themes\\a.css"), not a scheme.
    return scheme in ("", "file") or len(scheme) == 1


def locator_to_path(locator: str) -> Path:
    parts = urlsplit(locator)
    if parts.scheme == "file":
        return Path(unquote(parts.path))
    return Path(locator)


class ContentFetcher:
    """Fetch raw bytes for a locator; local paths are read, anything else downloaded.

    There is no caching: every call reads the file or issues one request.
    """

    def __init__(self, client: httpx.AsyncClient | None = None, *, timeout: float = 15.0) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    async def fetch(self, locator: str, cancel: asyncio.Event | None = None) -> bytes:
        if is_local_locator(locator):
            operation = self._read(locator_to_path(locator))
        else:
            operation = self._download(locator)
        try:
            return await _cancellable(operation, cancel, what=locator)
        except (OSError, httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(locator, str(exc) or type(exc).__name__) from exc

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _read(self, path: Path) -> bytes:
        return await asyncio.to_thread(path.read_bytes)

    async def _download(self, url: str) -> bytes:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, follow_redirects=True)
        response = await self._client.get(url)
        response.raise_for_status()
        logger.debug("downloaded %s (%d bytes)", url, len(response.content))
        return response.content


async def _cancellable(operation: Awaitable[T], cancel: asyncio.Event | None, *, what: str) -> T:
    """Await ``operation`` unless ``cancel`` gets set first."""
    if cancel is None:
        return await operation
    if cancel.is_set():
        if asyncio.iscoroutine(operation):
            operation.close()
        raise OperationCancelledError(what)

    task = asyncio.ensure_future(operation)
    waiter = asyncio.ensure_future(cancel.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        raise
    finally:
        waiter.cancel()
    if not task.done():
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        raise OperationCancelledError(what)
    return task.result()
