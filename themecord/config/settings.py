"""Application settings via QSettings."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import QSettings

from themecord.runtime_paths import default_user_data_dir, extensions_dir, themes_dir

DEFAULT_HOME_URL = "https://discord.com/app"
DEFAULT_IMPORT_MAX_RETRIES = 5
DEFAULT_FETCH_TIMEOUT = 15.0


class AppSettings:
    """Wraps QSettings for persistent app configuration."""

    def __init__(self, qsettings: QSettings | None = None, *, user_data_dir: Path | None = None) -> None:
        self._qs = qsettings if qsettings is not None else QSettings("Themecord", "Themecord")
        self._user_data_dir = user_data_dir

    # -- web view --

    @property
    def home_url(self) -> str:
        raw = self._qs.value("web/home_url", DEFAULT_HOME_URL, type=str)
        value = (raw or "").strip()
        return value or DEFAULT_HOME_URL

    @home_url.setter
    def home_url(self, value: str) -> None:
        self._qs.setValue("web/home_url", (value or "").strip() or DEFAULT_HOME_URL)

    # -- theme imports --

    @property
    def import_max_retries(self) -> int:
        value = self._qs.value("themes/import_max_retries", DEFAULT_IMPORT_MAX_RETRIES, type=int)
        return max(0, value)

    @import_max_retries.setter
    def import_max_retries(self, value: int) -> None:
        self._qs.setValue("themes/import_max_retries", max(0, int(value)))

    @property
    def import_retry_delay(self) -> float:
        value = self._qs.value("themes/import_retry_delay", 0.0, type=float)
        return max(0.0, value)

    @import_retry_delay.setter
    def import_retry_delay(self, value: float) -> None:
        self._qs.setValue("themes/import_retry_delay", max(0.0, float(value)))

    @property
    def fetch_timeout(self) -> float:
        value = self._qs.value("themes/fetch_timeout", DEFAULT_FETCH_TIMEOUT, type=float)
        return value if value > 0 else DEFAULT_FETCH_TIMEOUT

    @fetch_timeout.setter
    def fetch_timeout(self, value: float) -> None:
        self._qs.setValue("themes/fetch_timeout", float(value))

    # -- encryption --

    @property
    def encrypt_themes(self) -> bool:
        return self._qs.value("themes/encrypt", True, type=bool)

    @encrypt_themes.setter
    def encrypt_themes(self, value: bool) -> None:
        self._qs.setValue("themes/encrypt", bool(value))

    # -- window geometry --

    @property
    def window_geometry(self) -> bytes | None:
        return self._qs.value("ui/window_geometry")

    @window_geometry.setter
    def window_geometry(self, value: bytes) -> None:
        self._qs.setValue("ui/window_geometry", value)

    # -- helpers --

    @property
    def user_data_dir(self) -> Path:
        path = self._user_data_dir or default_user_data_dir()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def themes_dir(self) -> Path:
        return themes_dir(self.user_data_dir)

    @property
    def extensions_dir(self) -> Path:
        return extensions_dir(self.user_data_dir)

    @property
    def log_dir(self) -> Path:
        path = self.user_data_dir / "logs"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def safe_storage_key_path(self) -> Path:
        return self.user_data_dir / "safe-storage.key"
