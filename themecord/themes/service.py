"""Runtime theme loading and import service."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import QObject, Signal

from themecord.config.settings import AppSettings
from themecord.themes.crypto import AesGcmSafeStorage, EncryptionGate
from themecord.themes.extensions import load_chromium_extensions
from themecord.themes.fetcher import ContentFetcher
from themecord.themes.importer import ThemeImporter, qt_file_selector
from themecord.themes.imports import ImportResolver
from themecord.themes.loader import ThemeLoader
from themecord.themes.models import ExtensionSession, FileSelector, LoadReport, RenderTarget, SafeStorage


class StyleService(QObject):
    """Load themes into a render target and add new ones from disk."""

    themes_loaded = Signal(int, int)   # injected, failed
    themes_added = Signal(object)      # list of written paths

    def __init__(
        self,
        settings: AppSettings,
        *,
        storage: SafeStorage | None = None,
        fetcher: ContentFetcher | None = None,
        select_files: FileSelector = qt_file_selector,
    ) -> None:
        super().__init__()
        self._settings = settings
        self._storage = storage or AesGcmSafeStorage(
            settings.safe_storage_key_path,
            enabled=settings.encrypt_themes,
        )
        self._fetcher = fetcher or ContentFetcher(timeout=settings.fetch_timeout)
        self._gate = EncryptionGate(self._storage)
        self._resolver = ImportResolver(
            self._fetcher,
            max_tries=settings.import_max_retries,
            retry_delay=settings.import_retry_delay,
        )
        self._loader = ThemeLoader(settings.themes_dir, self._gate, self._resolver)
        self._importer = ThemeImporter(settings.themes_dir, self._gate, select_files=select_files)

    @property
    def themes_dir(self) -> Path:
        return self._loader.themes_dir

    @property
    def loader(self) -> ThemeLoader:
        return self._loader

    async def load(self, target: RenderTarget) -> LoadReport:
        report = await self._loader.load(target)
        self.themes_loaded.emit(len(report.injected), len(report.failed))
        return report

    async def add(self, parent: object | None = None) -> list[Path]:
        written = await self._importer.add(parent)
        if written:
            self.themes_added.emit(written)
        return written

    async def load_extensions(self, session: ExtensionSession) -> list[Path]:
        return await load_chromium_extensions(session, self._settings.extensions_dir)

    async def aclose(self) -> None:
        await self._fetcher.aclose()
