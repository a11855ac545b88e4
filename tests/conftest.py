import os
from datetime import datetime, timezone
from pathlib import Path

import pytest

from macscan_core.config import get_config

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _default_env(monkeypatch: pytest.MonkeyPatch):
    def set_default(name: str, value: str) -> None:
        if not os.getenv(name):
            monkeypatch.setenv(name, value)

    set_default("ENV", "test")
    set_default("LOG_LEVEL", "INFO")
    set_default("ADVISOR_EMAIL", "advisor@example.com")
    set_default("EMAIL_BACKEND", "log")
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 1, 27, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixture_path():
    def _path(name: str) -> Path:
        return FIXTURES / name

    return _path
