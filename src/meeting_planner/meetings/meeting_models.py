# src/meeting_planner/meetings/meeting_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum
from pathlib import Path


class FailureReason(StrEnum):
    """Why the store refused an operation."""

    INVALID_TIMING = "invalid_timing"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    EXPORT_FAILED = "export_failed"


@dataclass(slots=True)
class Meeting:
    title: str
    start: datetime
    end: datetime
    reminder_offset: timedelta | None = None

    # Assigned by the store on insertion.
    id: str | None = None

    @property
    def reminder_time(self) -> datetime | None:
        if self.reminder_offset is None:
            return None
        return self.start - self.reminder_offset

    def overlaps(self, other: Meeting) -> bool:
        """Half-open [start, end) intersection: touching endpoints do not overlap."""
        return self.start < other.end and self.end > other.start

    def describe(self) -> str:
        span = f"{self.start:%Y-%m-%d %H:%M}-{self.end:%H:%M}"
        if self.reminder_offset is None:
            return f"{span} {self.title}"
        minutes = int(self.reminder_offset.total_seconds() // 60)
        return f"{span} {self.title} (reminder {minutes} min before)"


@dataclass(slots=True, frozen=True)
class MeetingResult:
    """
    Outcome of a store mutation.

    Truthy on success. On failure `reason` says which check refused it and
    `detail` is a short human-readable explanation for the front end.
    """

    ok: bool
    meeting: Meeting | None = None
    reason: FailureReason | None = None
    detail: str = ""

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, meeting: Meeting) -> MeetingResult:
        return cls(ok=True, meeting=meeting)

    @classmethod
    def failure(cls, reason: FailureReason, detail: str) -> MeetingResult:
        return cls(ok=False, reason=reason, detail=detail)


@dataclass(slots=True, frozen=True)
class ExportResult:
    ok: bool
    path: Path
    count: int = 0
    reason: FailureReason | None = None
    detail: str = ""

    def __bool__(self) -> bool:
        return self.ok
