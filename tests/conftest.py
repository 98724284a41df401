"""
Shared pytest fixtures and configuration for cronswarm tests.

This module provides:
- Settings/environment isolation (no CRONSWARM_* leakage between tests)
- structlog reset after every test
- A scriptable StubClusterClient and fast job factories
- A controllable clock for deadline tests
"""

import logging
import os
import sys
from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
import structlog

# Ensure cronswarm package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cronswarm.cluster import StubClusterClient
from cronswarm.core.settings import clear_settings_cache
from cronswarm.jobs import RunJob, RunServiceJob

FAST_POLL = timedelta(milliseconds=1)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """Drop CRONSWARM_* variables and any .env file from the environment."""
    for key in list(os.environ):
        if key.startswith("CRONSWARM_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    yield
    structlog.reset_defaults()
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)


# =============================================================================
# Clock
# =============================================================================


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# =============================================================================
# Cluster + jobs
# =============================================================================


@pytest.fixture
def stub() -> StubClusterClient:
    return StubClusterClient()


@pytest.fixture
def service_job(stub: StubClusterClient):
    """Factory for a RunServiceJob polling every millisecond against ``stub``."""

    def _make(**kwargs) -> RunServiceJob:
        defaults = {
            "client": stub,
            "name": "test-job",
            "image": "test-image",
            "poll_interval": FAST_POLL,
        }
        defaults.update(kwargs)
        return RunServiceJob(**defaults)

    return _make


@pytest.fixture
def container_job(stub: StubClusterClient):
    """Factory for a RunJob polling every millisecond against ``stub``."""

    def _make(**kwargs) -> RunJob:
        defaults = {
            "client": stub,
            "name": "test-job",
            "image": "test-image",
            "poll_interval": FAST_POLL,
        }
        defaults.update(kwargs)
        return RunJob(**defaults)

    return _make
