# tests/test_reminder_poller.py

from __future__ import annotations

import asyncio
import time
from datetime import timedelta

import pytest

from meeting_planner.meetings.meeting_models import Meeting
from meeting_planner.meetings.meeting_store import MeetingStore
from meeting_planner.meetings.reminder_poller import (
    deliver_due_reminders,
    run_reminder_poller,
    start_reminders_in_background,
)

from .fakes import FakeClock, FakeNotifier


def _add_due(store: MeetingStore, clock: FakeClock, title: str = "soon", *, in_minutes: int = 5) -> Meeting:
    start = clock.now + timedelta(minutes=in_minutes)
    result = store.add_meeting(
        Meeting(
            title=title,
            start=start,
            end=start + timedelta(minutes=30),
            reminder_offset=timedelta(minutes=10),
        )
    )
    assert result.meeting is not None
    return result.meeting


class BrokenRepo:
    def get_upcoming_reminders(self):
        raise RuntimeError("store unavailable")

    def remove_reminder(self, meeting_id: str, *, expected_reminder_time=None) -> bool:
        raise AssertionError("should not be called")


@pytest.mark.asyncio
async def test_tick_delivers_then_acknowledges(store: MeetingStore, clock: FakeClock) -> None:
    meeting = _add_due(store, clock)
    notifier = FakeNotifier()

    assert await deliver_due_reminders(store, notifier) == 1
    assert await deliver_due_reminders(store, notifier) == 0

    assert [m.id for m in notifier.sent] == [meeting.id]
    stored = store.get_meeting(meeting.id)
    assert stored is not None and stored.reminder_offset is None


@pytest.mark.asyncio
async def test_failed_notification_keeps_reminder_due(store: MeetingStore, clock: FakeClock) -> None:
    meeting = _add_due(store, clock)
    notifier = FakeNotifier(fail=True)

    assert await deliver_due_reminders(store, notifier) == 0
    assert [m.id for m in store.get_upcoming_reminders()] == [meeting.id]

    notifier.fail = False
    assert await deliver_due_reminders(store, notifier) == 1
    assert store.get_upcoming_reminders() == []


class ReschedulingNotifier:
    """Shows the reminder, and while it is on screen the user moves the meeting a week out."""

    def __init__(self, store: MeetingStore) -> None:
        self.store = store

    async def notify(self, meeting: Meeting) -> None:
        def next_week(m: Meeting) -> None:
            m.start = m.start + timedelta(days=7)
            m.end = m.end + timedelta(days=7)
            m.reminder_offset = timedelta(minutes=15)

        assert self.store.update_meeting(meeting.id, next_week)


@pytest.mark.asyncio
async def test_ack_keeps_reminder_set_during_notification(store: MeetingStore, clock: FakeClock) -> None:
    meeting = _add_due(store, clock)

    assert await deliver_due_reminders(store, ReschedulingNotifier(store)) == 1

    stored = store.get_meeting(meeting.id)
    assert stored is not None
    assert stored.start == meeting.start + timedelta(days=7)
    assert stored.reminder_offset == timedelta(minutes=15)


@pytest.mark.asyncio
async def test_tick_survives_repo_failure() -> None:
    notifier = FakeNotifier()
    assert await deliver_due_reminders(BrokenRepo(), notifier) == 0
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_poller_exits_when_stop_event_is_set(store: MeetingStore, clock: FakeClock) -> None:
    _add_due(store, clock, "first")
    notifier = FakeNotifier()
    stop = asyncio.Event()

    runner = asyncio.create_task(
        run_reminder_poller(store, notifier, interval_seconds=0.05, stop_event=stop)
    )

    await asyncio.sleep(0.02)
    # A reminder that becomes due later is picked up by a later tick.
    _add_due(store, clock, "second", in_minutes=60)
    clock.advance(minutes=55)
    await asyncio.sleep(0.15)

    stop.set()
    await asyncio.wait_for(runner, timeout=1.0)

    assert [m.title for m in notifier.sent] == ["first", "second"]


@pytest.mark.asyncio
async def test_poller_can_be_cancelled(store: MeetingStore) -> None:
    runner = asyncio.create_task(run_reminder_poller(store, FakeNotifier(), interval_seconds=10.0))

    await asyncio.sleep(0.01)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner


def test_background_runner_delivers_and_stops(store: MeetingStore, clock: FakeClock) -> None:
    meeting = _add_due(store, clock)
    notifier = FakeNotifier()

    runner = start_reminders_in_background(store, notifier, interval_seconds=0.05)
    assert runner is not None

    deadline = time.monotonic() + 2.0
    while not notifier.sent and time.monotonic() < deadline:
        time.sleep(0.01)

    runner.stop()
    runner.join(timeout=2.0)

    assert not runner.is_alive()
    assert [m.id for m in notifier.sent] == [meeting.id]
    assert store.get_upcoming_reminders() == []
