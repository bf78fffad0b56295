"""
Shared fixtures for coinpulse tests.
"""

import pytest

from coinpulse.core.config import Settings


class FakeClock:
    """Controllable epoch-millisecond clock for TTL tests."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture
def clock():
    """Fake clock starting at a fixed instant"""
    return FakeClock()


@pytest.fixture
def settings():
    """Settings for tests, independent of local env files"""
    return Settings(_env_file=None, environment="test")
