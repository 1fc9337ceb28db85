"""Pytest fixtures for wellness tests."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from wellness.config import Settings
from wellness.cycle import EventLog
from wellness.store import StateFile, StateStore

TODAY = date(2024, 3, 20)


@pytest.fixture
def today() -> date:
    """Fixed "today" used by the store fixtures."""
    return TODAY


@pytest.fixture
def state_path(tmp_path: Path) -> Path:
    """Location of a state file that does not exist yet."""
    return tmp_path / "wellness" / "state.json"


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def store(state_path: Path, settings: Settings) -> StateStore:
    """Store backed by a temporary state file, pinned to TODAY."""
    return StateStore.open(StateFile(state_path), settings, today=lambda: TODAY)


@pytest.fixture
def monthly_log() -> EventLog:
    """Three period starts 28 days apart, each auto-closed after 5 days."""
    log = EventLog()
    for day in (date(2024, 1, 1), date(2024, 1, 29), date(2024, 2, 26)):
        log.log_start(day)
    return log
