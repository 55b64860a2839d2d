"""Theme pipeline models and the collaborator interfaces it calls through."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Protocol, Sequence

THEME_MODULE_SUFFIX = ".theme.css"


class RenderTarget(Protocol):
    """Something CSS can be injected into, e.g. a web page."""

    def insert_css(self, css: str) -> object: ...

    def reload(self) -> None: ...


class ExtensionSession(Protocol):
    """Browser session able to host unpacked extensions."""

    def is_persistent(self) -> bool: ...

    def load_extension(self, path: Path) -> object: ...


class SafeStorage(Protocol):
    """Platform encryption capability."""

    def is_available(self) -> bool: ...

    def is_ready(self) -> bool: ...

    async def when_ready(self) -> None: ...

    def encrypt(self, text: str) -> bytes: ...

    def decrypt(self, data: bytes) -> str: ...


FileSelector = Callable[[object | None], Awaitable[Sequence[str]]]


@dataclass(frozen=True, slots=True)
class ThemeFile:
    """A stylesheet found in the managed theme directory."""

    path: Path
    raw: bytes


@dataclass(slots=True)
class LoadReport:
    """Outcome of one theme load pass."""

    injected: list[Path] = field(default_factory=list)
    failed: dict[Path, BaseException] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed
