"""Load unpacked Chromium extensions into the browser session."""

from __future__ import annotations

import asyncio
import inspect
import logging
from pathlib import Path

from themecord.errors import ExtensionLoadError
from themecord.themes.models import ExtensionSession

logger = logging.getLogger(__name__)


async def load_chromium_extensions(session: ExtensionSession, extensions_dir: Path) -> list[Path]:
    """Load every subdirectory of ``extensions_dir`` as an unpacked extension.

    A missing directory is created and nothing is loaded. Extensions are only
    loaded into persistent sessions. Failures are logged and skipped; the paths
    that loaded are returned.
    """
    if not extensions_dir.exists():
        extensions_dir.mkdir(parents=True, exist_ok=True)
        return []

    entries = await asyncio.to_thread(lambda: sorted(extensions_dir.iterdir()))
    candidates = [path for path in entries if path.is_dir()]
    if not candidates or not session.is_persistent():
        return []

    results = await asyncio.gather(
        *(_load_one(session, path) for path in candidates),
        return_exceptions=True,
    )
    loaded: list[Path] = []
    for path, result in zip(candidates, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.error("failed to load extension %s: %s", path.name, result)
            continue
        loaded.append(path)
    return loaded


async def _load_one(session: ExtensionSession, path: Path) -> None:
    try:
        result = session.load_extension(path)
        if inspect.isawaitable(result):
            await result
    except ExtensionLoadError:
        raise
    except Exception as exc:
        raise ExtensionLoadError(path, str(exc)) from exc
    logger.info("loaded extension %s", path.name)
