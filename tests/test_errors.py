"""Tests for themecord error types and classification."""

from __future__ import annotations

from pathlib import Path

from themecord.errors import (
    CircularImportError,
    ErrorCode,
    FetchError,
    ThemecordError,
    UnencryptedThemeError,
    classify_exception,
    format_error_for_user,
)


def test_circular_import_error_names_locator() -> None:
    error = CircularImportError("/themes/a.css")
    assert error.code is ErrorCode.CSS_IMPORT_CIRCULAR
    assert "/themes/a.css" in str(error)
    assert error.to_dict()["code"] == "CSS_IMPORT_CIRCULAR"


def test_fetch_error_message() -> None:
    error = FetchError("https://cdn.example/a.css", "timed out")
    assert error.message == "Could not fetch https://cdn.example/a.css: timed out"
    assert error.locator == "https://cdn.example/a.css"


def test_unencrypted_theme_error_default_message() -> None:
    error = UnencryptedThemeError(Path("/themes/a.css"))
    assert "not encrypted" in error.message
    assert error.path == Path("/themes/a.css")


def test_classify_exception() -> None:
    assert classify_exception(FileNotFoundError("x")).code is ErrorCode.FILE_NOT_FOUND
    assert classify_exception(PermissionError("x")).code is ErrorCode.FILE_ACCESS_DENIED
    assert classify_exception(RuntimeError("request timed out")).code is ErrorCode.NETWORK_TIMEOUT
    assert classify_exception(RuntimeError("boom")).code is ErrorCode.OPERATION_FAILED

    existing = FetchError("a.css")
    assert classify_exception(existing) is existing


def test_format_error_for_user() -> None:
    text = format_error_for_user(ThemecordError(ErrorCode.FILE_NOT_FOUND, path=Path("/t/dark.theme.css")))
    assert "dark.theme.css" in text
    assert format_error_for_user(PermissionError("denied")).startswith("Access denied")
