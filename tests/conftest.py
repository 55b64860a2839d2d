"""Shared fixtures for themecord tests."""

from __future__ import annotations

import pytest
from PySide6.QtCore import QCoreApplication

from tests.fakes import FakeTarget


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


@pytest.fixture
def fake_target() -> FakeTarget:
    return FakeTarget()
