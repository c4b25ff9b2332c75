# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from meeting_planner.core.state import AppState
from meeting_planner.meetings.meeting_store import MeetingStore

from .fakes import FakeClock

NOW = datetime(2026, 10, 18, 8, 0)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture()
def store(clock: FakeClock) -> MeetingStore:
    return MeetingStore(clock=clock)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the command handlers.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="meetings-test",
        log_level="DEBUG",
        reminders_enabled=True,
        reminder_interval_seconds=30.0,
        data_dir=tmp_path,
        export_dir=tmp_path / "exports",
    )


@pytest.fixture()
def state(settings: SimpleNamespace, store: MeetingStore) -> AppState:
    return AppState(settings=settings, store=store)
