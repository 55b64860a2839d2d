"""Qt WebEngine adapters for the theme pipeline."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from PySide6.QtWebEngineCore import QWebEnginePage, QWebEngineProfile

from themecord.errors import ExtensionLoadError

logger = logging.getLogger(__name__)

_INSERT_CSS_JS = """(() => {{
  const style = document.createElement("style");
  style.dataset.themecord = "";
  style.textContent = {css};
  (document.head || document.documentElement).appendChild(style);
}})();"""


class WebPageTarget:
    """Render target that appends ``<style>`` elements to a web page."""

    def __init__(self, page: QWebEnginePage) -> None:
        self._page = page

    def insert_css(self, css: str) -> None:
        self._page.runJavaScript(_INSERT_CSS_JS.format(css=json.dumps(css)))

    def reload(self) -> None:
        self._page.triggerAction(QWebEnginePage.WebAction.Reload)


class ProfileSession:
    """Extension host session backed by a ``QWebEngineProfile``."""

    def __init__(self, profile: QWebEngineProfile) -> None:
        self._profile = profile

    def is_persistent(self) -> bool:
        return not self._profile.isOffTheRecord()

    def load_extension(self, path: Path) -> None:
        manager_getter = getattr(self._profile, "extensionManager", None)
        if manager_getter is None:
            raise ExtensionLoadError(path, "this Qt WebEngine build has no extension support")
        manager_getter().loadExtension(str(path))
