"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It pins APP_ENV to "testing" before settings are imported so a developer's
local .env.development never leaks into the test run.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"

os.environ.setdefault("CRPT_BASE_URL", "https://registry.test/api/v3/lk/documents/create")
os.environ.setdefault("CRPT_HTTP_TIMEOUT_SECONDS", "5")

import threading  # noqa: E402

import pytest  # noqa: E402


class FakeClock:
    """Deterministic nanosecond clock.

    Calling the instance reads the time; ``sleep`` advances it, so it can be
    handed to a dispatcher as both its clock and its sleep function.
    """

    def __init__(self, start_ns: int = 0) -> None:
        self.now_ns = start_ns
        self.sleeps: list[float] = []
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            return self.now_ns

    def advance_ms(self, millis: float) -> None:
        with self._lock:
            self.now_ns += round(millis * 1_000_000)

    def sleep(self, seconds: float) -> None:
        with self._lock:
            self.sleeps.append(seconds)
            self.now_ns += round(seconds * 1_000_000_000)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
