"""QApplication bootstrap."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import sys

from PySide6 import QtAsyncio
from PySide6.QtWidgets import QApplication

from themecord.config.settings import AppSettings
from themecord.runtime_paths import is_frozen
from themecord.themes.service import StyleService
from themecord.ui.main_window import MainWindow


def _configure_logging(settings: AppSettings) -> logging.Logger:
    root = logging.getLogger("themecord")
    if root.handlers:
        return root

    root.setLevel(logging.INFO)
    handler = RotatingFileHandler(
        settings.log_dir / "themecord.log",
        maxBytes=512_000,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    root.addHandler(handler)
    root.propagate = False
    return root


async def _start(window: MainWindow) -> None:
    window.start()


def run_app() -> int:
    """Initialize and run the application."""
    app = QApplication(sys.argv)
    app.setApplicationName("Themecord")
    app.setOrganizationName("Themecord")
    settings = AppSettings()
    logger = _configure_logging(settings)
    logger.info("startup frozen=%s user_data_dir=%s", is_frozen(), settings.user_data_dir)

    style_service = StyleService(settings)
    window = MainWindow(settings, style_service)
    window.show()

    QtAsyncio.run(_start(window), keep_running=True, handle_sigint=True)
    return 0
