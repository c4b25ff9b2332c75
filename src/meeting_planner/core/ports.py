# src/meeting_planner/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the reminder poller and the front ends.

The poller depends on Protocols instead of the concrete store/console,
so tests can drive it with in-memory fakes.
"""

from datetime import datetime
from typing import Awaitable, Protocol

from ..meetings.meeting_models import Meeting


class ReminderNotifier(Protocol):
    """
    Front-end port: how the poller shows a due reminder.

    Raising means "not delivered"; the reminder stays due and is retried.
    """

    def notify(self, meeting: Meeting) -> Awaitable[None]: ...


class MeetingRepo(Protocol):
    # Reminder feed
    def get_upcoming_reminders(self) -> list[Meeting]: ...
    def remove_reminder(
            self, meeting_id: str, *, expected_reminder_time: datetime | None = None
    ) -> bool: ...
