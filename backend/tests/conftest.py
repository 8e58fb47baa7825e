"""Pytest configuration and fixtures."""
import os

import pytest

from gateway.core.config import reset_settings
from gateway.core.translator import IdProvider, new_stream_state


class FixedIds(IdProvider):
    """Deterministic ids and clock for assertions."""

    def uuid(self) -> str:
        return "00000000-0000-4000-8000-000000000000"

    def now(self) -> int:
        return 1700000000

    def now_ms(self) -> int:
        return 1700000000123

    def session_id(self) -> str:
        return "-123456789012345678"

    def project_id(self) -> str:
        return "useful-fuze-abcde"


@pytest.fixture
def ids():
    return FixedIds()


@pytest.fixture
def state(ids):
    """A fresh stream state per test."""
    return new_stream_state(ids)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Make every test start from default settings."""
    for name in list(os.environ):
        if name.startswith("AG_"):
            monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()
