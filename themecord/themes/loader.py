"""Load user stylesheets from the theme directory into a render target."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable

from themecord.themes.crypto import EncryptionGate
from themecord.themes.imports import ImportResolver
from themecord.themes.models import THEME_MODULE_SUFFIX, LoadReport, RenderTarget, ThemeFile
from themecord.themes.transform import importantize
from themecord.themes.watcher import OneShotDirectoryWatcher

logger = logging.getLogger(__name__)


WatcherFactory = Callable[[Path, Callable[[], None]], object]


def is_theme_module(name: str) -> bool:
    """`.theme.css` files are fragments meant for `@import` only."""
    return name.endswith(THEME_MODULE_SUFFIX)


class ThemeLoader:
    """Decrypt, resolve, transform and inject every theme of a directory.

    Each ``load()`` also arms a one-shot watcher: the first change in the
    directory reloads the render target, which is expected to call ``load()``
    again once the page is back.
    """

    def __init__(
        self,
        themes_dir: Path,
        gate: EncryptionGate,
        resolver: ImportResolver,
        *,
        watcher_factory: WatcherFactory = OneShotDirectoryWatcher,
    ) -> None:
        self._themes_dir = themes_dir
        self._gate = gate
        self._resolver = resolver
        self._watcher_factory = watcher_factory
        self._watcher: object | None = None

    @property
    def themes_dir(self) -> Path:
        return self._themes_dir

    async def load(self, target: RenderTarget) -> LoadReport:
        themes_dir = self.ensure_themes_dir()
        self._install_watcher(target)
        return await self.load_pass(target, themes_dir)

    def ensure_themes_dir(self) -> Path:
        self._themes_dir.mkdir(parents=True, exist_ok=True)
        return self._themes_dir

    async def load_pass(self, target: RenderTarget, themes_dir: Path | None = None) -> LoadReport:
        themes_dir = themes_dir or self._themes_dir
        report = LoadReport()
        files = await self._read_theme_files(themes_dir, report)

        results = await asyncio.gather(
            *(self._prepare(theme) for theme in files),
            return_exceptions=True,
        )
        for theme, result in zip(files, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.error("failed to load theme %s: %s", theme.path.name, result)
                report.failed[theme.path] = result
                continue
            try:
                target.insert_css(result)
            except Exception as exc:
                logger.error("failed to inject theme %s: %s", theme.path.name, exc)
                report.failed[theme.path] = exc
                continue
            report.injected.append(theme.path)

        logger.info("loaded %d theme(s), %d failed", len(report.injected), len(report.failed))
        return report

    async def _prepare(self, theme: ThemeFile) -> str:
        css = await self._gate.decrypt(theme.raw, theme.path)
        css = await self._resolver.resolve(css, [str(theme.path)])
        return importantize(css)

    async def _read_theme_files(self, themes_dir: Path, report: LoadReport) -> list[ThemeFile]:
        entries = await asyncio.to_thread(lambda: sorted(themes_dir.iterdir()))
        candidates = [path for path in entries if not is_theme_module(path.name) and path.is_file()]

        contents = await asyncio.gather(
            *(asyncio.to_thread(path.read_bytes) for path in candidates),
            return_exceptions=True,
        )
        files: list[ThemeFile] = []
        for path, data in zip(candidates, contents):
            if isinstance(data, BaseException):
                if not isinstance(data, Exception):
                    raise data
                logger.error("failed to read theme %s: %s", path.name, data)
                report.failed[path.resolve()] = data
                continue
            files.append(ThemeFile(path=path.resolve(), raw=data))
        return files

    def _install_watcher(self, target: RenderTarget) -> None:
        previous = self._watcher
        if previous is not None and hasattr(previous, "stop"):
            previous.stop()
        self._watcher = self._watcher_factory(self._themes_dir, target.reload)
