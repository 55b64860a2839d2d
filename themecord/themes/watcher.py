"""One-shot filesystem watcher for the theme directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from PySide6.QtCore import QFileSystemWatcher, QObject, Signal

logger = logging.getLogger(__name__)


class OneShotDirectoryWatcher(QObject):
    """Call ``callback`` on the first change inside ``directory``, then stop watching.

    The directory itself is watched for added, removed and renamed entries; the
    files in it are watched for content changes.
    """

    triggered = Signal(str)

    def __init__(self, directory: Path, callback: Callable[[], None], parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._directory = directory
        self._callback = callback
        self._fired = False
        self._watcher = QFileSystemWatcher(self)

        paths = [str(directory)]
        paths.extend(str(entry) for entry in sorted(directory.iterdir()) if entry.is_file())
        failed = self._watcher.addPaths(paths)
        if str(directory) in failed:
            raise OSError(f"Unable to watch theme directory: {directory}")
        if failed:
            logger.warning("not watching %d theme file(s): %s", len(failed), ", ".join(failed))

        self._watcher.directoryChanged.connect(self._on_change)
        self._watcher.fileChanged.connect(self._on_change)

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def active(self) -> bool:
        return not self._fired

    def stop(self) -> None:
        if self._fired:
            return
        self._fired = True
        self._watcher.directoryChanged.disconnect(self._on_change)
        self._watcher.fileChanged.disconnect(self._on_change)
        watched = self._watcher.directories() + self._watcher.files()
        if watched:
            self._watcher.removePaths(watched)

    def _on_change(self, path: str) -> None:
        if not self.active:
            return
        self.stop()
        logger.info("theme directory changed (%s), reloading", path)
        self.triggered.emit(path)
        self._callback()
