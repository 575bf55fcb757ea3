"""Shared test fixtures for the puzzle input tools."""

import sys
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import requests
from pydantic import SecretStr

# Ensure src is importable
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.common.config import Config, Settings

TEST_TOKEN = "53616c7465645f5f-test-session-token"


class FakeClock:
    """Deterministic clock whose sleep() advances time instead of blocking."""

    def __init__(self, start: datetime) -> None:
        self._now = start
        self._lock = threading.Lock()
        self.sleeps: list[float] = []

    def __call__(self) -> datetime:
        with self._lock:
            return self._now

    def sleep(self, seconds: float) -> None:
        with self._lock:
            self.sleeps.append(seconds)
            self._now += timedelta(seconds=seconds)

    def advance(self, **kwargs: float) -> None:
        with self._lock:
            self._now += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch, tmp_path):
    """Keep the developer's real token and settings out of every test."""
    for name in (
        "AOC_SESSION",
        "AOC_SESSION_FILE",
        "AOC_DATA_DIR",
        "AOC_THROTTLE_POLICY",
        "AOC_REQUEST_TIMEOUT",
        "AOC_BASE_URL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("AOC_SETTINGS", str(tmp_path / "no-settings.yaml"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Provide Settings rooted in a temporary directory."""
    return Settings(
        data_dir=tmp_path / "data",
        session_file=tmp_path / "config" / "session",
    )


@pytest.fixture
def config(settings) -> Config:
    """Provide a Config with a fake session token."""
    return Config(settings=settings, session_token=SecretStr(TEST_TOKEN))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2023, 12, 2, 5, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def make_response():
    """Return a factory for canned requests.Response objects."""

    def _make(status_code: int, body: str = "") -> requests.Response:
        resp = requests.Response()
        resp.status_code = status_code
        resp.reason = "Test"
        resp._content = body.encode("utf-8")
        resp.encoding = "utf-8"
        resp.url = "https://adventofcode.com/2023/day/1/input"
        return resp

    return _make


@pytest.fixture
def sample_input() -> str:
    """Return a sample puzzle input."""
    return "199\n200\n208\n210\n200\n207\n240\n269\n260\n263"


@pytest.fixture
def session_token() -> str:
    return TEST_TOKEN
