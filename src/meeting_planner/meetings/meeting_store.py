# src/meeting_planner/meetings/meeting_store.py

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path

from .meeting_export import format_export_line, write_lines
from .meeting_models import ExportResult, FailureReason, Meeting, MeetingResult

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
MeetingMutation = Callable[[Meeting], Meeting | None]


class MeetingStore:
    """
    In-memory meeting collection.

    Invariants kept by every mutation:
    - ids are unique and never reused
    - no two stored meetings overlap ([start, end) intervals, touching is fine)
    - a meeting is only accepted while its start is still in the future

    Thread-safety:
    - one RLock guards the mapping; each public method is one critical section
    - callers only ever get copies, never the stored objects

    The clock is sampled once per operation.
    """

    def __init__(self, *, clock: Clock | None = None) -> None:
        self._clock: Clock = clock or datetime.now
        self._lock = threading.RLock()
        self._meetings: dict[str, Meeting] = {}
        logger.info("MeetingStore ready")

    # ---- low-level helpers ----

    @staticmethod
    def _snapshot(meeting: Meeting) -> Meeting:
        return replace(meeting)

    def _find_conflict(self, candidate: Meeting, *, ignore_id: str | None) -> Meeting | None:
        for m in self._meetings.values():
            if m.id == ignore_id:
                continue
            if m.overlaps(candidate):
                return m
        return None

    def _validate(
        self, candidate: Meeting, *, now: datetime, ignore_id: str | None
    ) -> MeetingResult | None:
        """Return a failure result, or None when the candidate may be stored."""
        if candidate.start <= now:
            return MeetingResult.failure(
                FailureReason.INVALID_TIMING,
                f"start {candidate.start:%Y-%m-%d %H:%M} is not in the future",
            )
        if candidate.end <= candidate.start:
            return MeetingResult.failure(
                FailureReason.INVALID_TIMING, "end must be after start"
            )
        if candidate.reminder_offset is not None:
            try:
                _ = candidate.reminder_time
            except OverflowError:
                return MeetingResult.failure(
                    FailureReason.INVALID_TIMING, "reminder offset is out of range"
                )

        clash = self._find_conflict(candidate, ignore_id=ignore_id)
        if clash is not None:
            return MeetingResult.failure(
                FailureReason.CONFLICT, f"overlaps with {clash.describe()}"
            )
        return None

    # ---- public API ----

    def today(self) -> date:
        """Current calendar date according to the store's clock."""
        return self._clock().date()

    def count_meetings(self) -> int:
        with self._lock:
            return len(self._meetings)

    def get_meeting(self, meeting_id: str) -> Meeting | None:
        with self._lock:
            m = self._meetings.get(meeting_id)
            return self._snapshot(m) if m is not None else None

    def list_meetings(self) -> list[Meeting]:
        with self._lock:
            items = [self._snapshot(m) for m in self._meetings.values()]
        items.sort(key=lambda m: m.start)
        return items

    def get_meetings_for_day(self, day: date | datetime) -> list[Meeting]:
        """Meetings starting on the calendar date of `day`, earliest first."""
        target = day.date() if isinstance(day, datetime) else day
        with self._lock:
            items = [self._snapshot(m) for m in self._meetings.values() if m.start.date() == target]
        items.sort(key=lambda m: m.start)
        return items

    def add_meeting(self, meeting: Meeting) -> MeetingResult:
        candidate = self._snapshot(meeting)

        with self._lock:
            now = self._clock()

            if candidate.id is not None and candidate.id in self._meetings:
                logger.debug("Meeting rejected: id %s already stored", candidate.id)
                return MeetingResult.failure(
                    FailureReason.CONFLICT, f"meeting id {candidate.id} already exists"
                )

            failure = self._validate(candidate, now=now, ignore_id=None)
            if failure is not None:
                logger.debug("Meeting rejected (%s): %s", failure.reason, failure.detail)
                return failure

            if candidate.id is None:
                candidate.id = uuid.uuid4().hex
            self._meetings[candidate.id] = candidate
            logger.info(
                "Meeting added id=%s start=%s end=%s", candidate.id, candidate.start, candidate.end
            )
            return MeetingResult.success(self._snapshot(candidate))

    def update_meeting(self, meeting_id: str, mutation: MeetingMutation) -> MeetingResult:
        """
        Edit a stored meeting through a candidate copy.

        `mutation` receives a copy of the meeting and may change it in place or
        return a replacement. The candidate is validated like a new meeting,
        ignoring only the original it replaces. The stored meeting is swapped
        for the candidate only if validation passes; otherwise nothing changes.

        Exceptions raised by `mutation` propagate; the store is untouched in that case.
        """
        with self._lock:
            original = self._meetings.get(meeting_id)
            if original is None:
                return MeetingResult.failure(
                    FailureReason.NOT_FOUND, f"no meeting with id {meeting_id}"
                )

            candidate = self._snapshot(original)
            returned = mutation(candidate)
            if returned is not None:
                candidate = self._snapshot(returned)
            # The id is not editable.
            candidate.id = original.id

            now = self._clock()
            failure = self._validate(candidate, now=now, ignore_id=original.id)
            if failure is not None:
                logger.debug(
                    "Meeting %s update rejected (%s): %s", meeting_id, failure.reason, failure.detail
                )
                return failure

            self._meetings[original.id] = candidate
            logger.info("Meeting updated id=%s", meeting_id)
            return MeetingResult.success(self._snapshot(candidate))

    def delete_meeting(self, meeting_id: str) -> bool:
        with self._lock:
            removed = self._meetings.pop(meeting_id, None)
        if removed is None:
            return False
        logger.info("Meeting deleted id=%s", meeting_id)
        return True

    def export_day_schedule(self, day: date | datetime, destination: str | Path) -> ExportResult:
        """
        Write the day's meetings to `destination`, one line per meeting.

        The snapshot is taken under the lock; the file is written after it is released.
        """
        path = Path(destination)
        lines = [format_export_line(m) for m in self.get_meetings_for_day(day)]

        try:
            count = write_lines(path, lines)
        except OSError as e:
            logger.warning("Export to %s failed: %s", path, e)
            return ExportResult(
                ok=False, path=path, reason=FailureReason.EXPORT_FAILED, detail=str(e)
            )

        logger.info("Exported %d meetings to %s", count, path)
        return ExportResult(ok=True, path=path, count=count)

    # ---- reminders ----

    def get_upcoming_reminders(self) -> list[Meeting]:
        """
        Meetings whose reminder is due: reminder_time <= now < start.

        Pure read. A due reminder keeps being returned until remove_reminder()
        acknowledges it or the meeting starts.
        """
        with self._lock:
            now = self._clock()
            due = [
                self._snapshot(m)
                for m in self._meetings.values()
                if m.reminder_time is not None and m.reminder_time <= now and m.start > now
            ]
        due.sort(key=lambda m: (m.reminder_time, m.start))
        return due

    def remove_reminder(
        self, meeting_id: str, *, expected_reminder_time: datetime | None = None
    ) -> bool:
        """
        Acknowledge a reminder by clearing the offset. No-op for unknown ids.

        With expected_reminder_time the offset is cleared only if the stored
        reminder still fires at that time, so a reminder set by an edit made
        after delivery survives the acknowledgement.
        """
        with self._lock:
            m = self._meetings.get(meeting_id)
            if m is None:
                return False
            if expected_reminder_time is not None and m.reminder_time != expected_reminder_time:
                logger.debug("Reminder for meeting id=%s changed since delivery; kept", meeting_id)
                return False
            m.reminder_offset = None
        logger.debug("Reminder cleared for meeting id=%s", meeting_id)
        return True
