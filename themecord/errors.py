"""Error codes and error handling utilities for Themecord."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for Themecord operations."""

    # File system errors
    FILE_NOT_FOUND = auto()
    FILE_ACCESS_DENIED = auto()
    PATH_INVALID = auto()

    # Theme errors
    CSS_IMPORT_CIRCULAR = auto()
    CSS_IMPORT_FETCH_FAILED = auto()
    THEME_NOT_ENCRYPTED = auto()
    THEME_DECRYPT_FAILED = auto()

    # Network errors
    NETWORK_TIMEOUT = auto()
    NETWORK_UNAVAILABLE = auto()
    NETWORK_NOT_FOUND = auto()

    # Extension errors
    EXTENSION_LOAD_FAILED = auto()

    # Operation errors
    OPERATION_CANCELLED = auto()
    OPERATION_FAILED = auto()


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.FILE_NOT_FOUND: "The file was not found. It may have been moved or deleted.",
    ErrorCode.FILE_ACCESS_DENIED: "Access denied. Check file permissions.",
    ErrorCode.PATH_INVALID: "The specified path is invalid or inaccessible.",

    ErrorCode.CSS_IMPORT_CIRCULAR: "Circular reference in CSS imports are disallowed.",
    ErrorCode.CSS_IMPORT_FETCH_FAILED: "A stylesheet imported by a theme could not be fetched.",
    ErrorCode.THEME_NOT_ENCRYPTED: "One of loaded styles was not encrypted and could not be loaded.",
    ErrorCode.THEME_DECRYPT_FAILED: "A theme could not be decrypted. Re-add it from its original file.",

    ErrorCode.NETWORK_TIMEOUT: "Network request timed out. Check your internet connection.",
    ErrorCode.NETWORK_UNAVAILABLE: "Network unavailable. Check your internet connection.",
    ErrorCode.NETWORK_NOT_FOUND: "The requested resource does not exist on the server.",

    ErrorCode.EXTENSION_LOAD_FAILED: "An unpacked extension could not be loaded.",

    ErrorCode.OPERATION_CANCELLED: "Operation was cancelled.",
    ErrorCode.OPERATION_FAILED: "Operation failed. See details for more information.",
}


@dataclass(eq=False)
class ThemecordError(Exception):
    """Base exception for Themecord with error code and context."""

    code: ErrorCode
    message: str = ""
    path: Path | None = None
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = ERROR_MESSAGES.get(self.code, "An unexpected error occurred.")
        if not self.suggestion and self.code in ERROR_MESSAGES:
            self.suggestion = ERROR_MESSAGES[self.code]

    def __str__(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f"\nFile: {self.path}")
        if self.details:
            details_str = " | ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"\nDetails: {details_str}")
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging or UI display."""
        return {
            "code": self.code.name,
            "message": self.message,
            "path": str(self.path) if self.path else None,
            "details": self.details,
            "suggestion": self.suggestion,
        }


class CircularImportError(ThemecordError):
    """An `@import` points back at a stylesheet already in the resolution chain."""

    def __init__(self, locator: str) -> None:
        super().__init__(
            ErrorCode.CSS_IMPORT_CIRCULAR,
            message=f"Circular reference in CSS imports are disallowed: {locator}",
            details={"locator": locator},
        )
        self.locator = locator


class FetchError(ThemecordError):
    """Reading or downloading an import target failed."""

    def __init__(self, locator: str, reason: str = "") -> None:
        message = f"Could not fetch {locator}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            ErrorCode.CSS_IMPORT_FETCH_FAILED,
            message=message,
            details={"locator": locator},
        )
        self.locator = locator


class UnencryptedThemeError(ThemecordError):
    """Plain text was found where an encrypted theme was required."""

    def __init__(self, path: Path | None = None) -> None:
        super().__init__(ErrorCode.THEME_NOT_ENCRYPTED, path=path)


class OperationCancelledError(ThemecordError):
    """A cancellable operation was aborted through its cancel event."""

    def __init__(self, what: str = "") -> None:
        super().__init__(
            ErrorCode.OPERATION_CANCELLED,
            details={"operation": what} if what else {},
        )


class ExtensionLoadError(ThemecordError):
    """The host session refused or failed to load an unpacked extension."""

    def __init__(self, path: Path, reason: str = "") -> None:
        super().__init__(
            ErrorCode.EXTENSION_LOAD_FAILED,
            path=path,
            details={"reason": reason} if reason else {},
        )


def classify_exception(exc: Exception, path: Path | None = None) -> ThemecordError:
    """Classify a generic exception into a ThemecordError with appropriate code."""
    if isinstance(exc, ThemecordError):
        return exc

    exc_name = type(exc).__name__
    exc_str = str(exc).lower()

    # File system errors
    if isinstance(exc, FileNotFoundError) or "no such file" in exc_str:
        return ThemecordError(ErrorCode.FILE_NOT_FOUND, path=path, details={"original": exc_str})
    if isinstance(exc, PermissionError) or "permission denied" in exc_str:
        return ThemecordError(ErrorCode.FILE_ACCESS_DENIED, path=path, details={"original": exc_str})

    # Network errors
    if "timeout" in exc_str or "timed out" in exc_str:
        return ThemecordError(ErrorCode.NETWORK_TIMEOUT, details={"original": exc_str})
    if "404" in exc_str or "not found" in exc_str:
        return ThemecordError(ErrorCode.NETWORK_NOT_FOUND, details={"original": exc_str})
    if "network" in exc_str or "connection" in exc_str or "unreachable" in exc_str:
        return ThemecordError(ErrorCode.NETWORK_UNAVAILABLE, details={"original": exc_str})

    # Default
    return ThemecordError(
        ErrorCode.OPERATION_FAILED,
        message=f"{exc_name}: {exc}",
        path=path,
        details={"original": exc_str},
    )


def format_error_for_user(error: ThemecordError | Exception) -> str:
    """Format an error for display to the user with actionable suggestions."""
    if isinstance(error, ThemecordError):
        parts = [error.message]
        if error.suggestion and error.suggestion != error.message:
            parts.append(f"\n\n{error.suggestion}")
        if error.path:
            parts.append(f"\n\nFile: {error.path.name}")
        return "".join(parts)

    classified = classify_exception(error)
    return format_error_for_user(classified)
