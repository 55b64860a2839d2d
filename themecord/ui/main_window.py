"""Main application window: a web view with user themes layered on top."""

from __future__ import annotations

import asyncio
import logging

from PySide6.QtCore import QUrl
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import QMainWindow, QMessageBox

from themecord.config.settings import AppSettings
from themecord.errors import format_error_for_user
from themecord.themes.service import StyleService
from themecord.ui.web_target import ProfileSession, WebPageTarget

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Hosts the web view and re-applies themes after every page load."""

    def __init__(self, settings: AppSettings, style_service: StyleService) -> None:
        super().__init__()
        self._settings = settings
        self._styles = style_service
        self._tasks: set[asyncio.Task] = set()

        self.setWindowTitle("Themecord")
        self._view = QWebEngineView(self)
        self.setCentralWidget(self._view)
        self._target = WebPageTarget(self._view.page())
        self._session = ProfileSession(self._view.page().profile())

        self._setup_menu()
        self._view.loadFinished.connect(self._on_load_finished)

        geometry = settings.window_geometry
        if geometry:
            self.restoreGeometry(geometry)
        else:
            self.resize(1200, 800)

    def start(self) -> None:
        self._spawn(self._styles.load_extensions(self._session))
        self._view.load(QUrl(self._settings.home_url))

    def _setup_menu(self) -> None:
        menu = self.menuBar().addMenu("&Themes")

        add_action = QAction("&Add theme...", self)
        add_action.triggered.connect(self._on_add_theme)
        menu.addAction(add_action)

        reload_action = QAction("&Reload page", self)
        reload_action.setShortcut(QKeySequence.StandardKey.Refresh)
        reload_action.triggered.connect(self._target.reload)
        menu.addAction(reload_action)

    def _on_load_finished(self, ok: bool) -> None:
        if not ok:
            logger.warning("page failed to load: %s", self._view.url().toString())
            return
        self._spawn(self._styles.load(self._target))

    def _on_add_theme(self) -> None:
        self._spawn(self._add_theme())

    async def _add_theme(self) -> None:
        try:
            await self._styles.add(self)
        except Exception as exc:
            logger.error("adding theme failed: %s", exc)
            QMessageBox.warning(self, "Add theme", format_error_for_user(exc))

    def _spawn(self, coro) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("background task failed", exc_info=task.exception())

    def closeEvent(self, event) -> None:
        self._settings.window_geometry = self.saveGeometry()
        super().closeEvent(event)
