"""The "Add theme" action: copy stylesheets into the theme directory."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Sequence

from themecord.themes.crypto import EncryptionGate
from themecord.themes.models import FileSelector

logger = logging.getLogger(__name__)

DIALOG_TITLE = "Select a theme to add"
DIALOG_FILTER = "CSS stylesheet theme (*.theme.css)"


async def qt_file_selector(parent: object | None = None) -> Sequence[str]:
    """Ask the user for `.theme.css` files with a native file dialog."""
    from PySide6.QtWidgets import QFileDialog

    paths, _selected_filter = QFileDialog.getOpenFileNames(parent, DIALOG_TITLE, "", DIALOG_FILTER)
    return paths


def destination_for(source: Path, themes_dir: Path) -> Path:
    """``dark.theme.css`` is stored as ``dark.theme`` so the loader picks it up."""
    name = source.name
    if name.endswith(".css"):
        name = name[: -len(".css")]
    return (themes_dir / name).resolve()


class ThemeImporter:
    def __init__(
        self,
        themes_dir: Path,
        gate: EncryptionGate,
        *,
        select_files: FileSelector = qt_file_selector,
    ) -> None:
        self._themes_dir = themes_dir
        self._gate = gate
        self._select_files = select_files

    async def add(self, parent: object | None = None) -> list[Path]:
        """Import the selected files; returns the paths written.

        A failing file raises once every copy has been started; copies of the
        other files are not rolled back.
        """
        selected = await self._select_files(parent)
        if not selected:
            return []
        self._themes_dir.mkdir(parents=True, exist_ok=True)

        jobs: list[tuple[Path, Path]] = []
        for raw_path in selected:
            source = Path(raw_path).resolve()
            dest = destination_for(source, self._themes_dir)
            if dest == source:
                logger.info("skipping %s, it is already in the theme directory", source)
                continue
            jobs.append((source, dest))

        written = await asyncio.gather(*(self._copy(source, dest) for source, dest in jobs))
        return list(written)

    async def _copy(self, source: Path, dest: Path) -> Path:
        data = await asyncio.to_thread(source.read_bytes)
        stored = await self._gate.encrypt(data.decode("utf-8", errors="replace"))
        await asyncio.to_thread(dest.write_bytes, stored)
        logger.info("added theme %s as %s", source.name, dest.name)
        return dest
