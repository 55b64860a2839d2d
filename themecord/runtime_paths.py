"""Runtime path helpers for the user data directory layout."""

from __future__ import annotations

import os
from pathlib import Path
import sys

APP_DIR_NAME = "themecord"
THEMES_DIR_NAME = "Themes"
EXTENSIONS_DIR_PARTS: tuple[str, ...] = ("Extensions", "Chrome")


def is_frozen() -> bool:
    """Return True when running from a PyInstaller bundle."""
    return bool(getattr(sys, "frozen", False))


def default_user_data_dir() -> Path:
    """Return the per-user data root, honoring ``THEMECORD_DATA_DIR``."""
    override = os.environ.get("THEMECORD_DATA_DIR", "").strip()
    if override:
        return Path(override).expanduser()
    base = Path(os.environ.get("APPDATA", Path.home() / ".config"))
    return base / APP_DIR_NAME


def themes_dir(user_data_dir: Path) -> Path:
    """Managed theme directory: ``<root>/Themes``."""
    return user_data_dir / THEMES_DIR_NAME


def extensions_dir(user_data_dir: Path) -> Path:
    """Unpacked Chromium extensions: ``<root>/Extensions/Chrome``."""
    return user_data_dir.joinpath(*EXTENSIONS_DIR_PARTS)
