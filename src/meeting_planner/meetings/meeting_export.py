# src/meeting_planner/meetings/meeting_export.py

"""
Plain-text day schedule export.

One line per meeting:

    2026-10-19 09:00 - 2026-10-19 09:15 | Standup | reminder: 10 min | id: 3f2a...

The format is stable so a line can be read back with parse_export_line().
Titles containing " | " are written as-is; parsing splits on the outer separators only.
"""

from __future__ import annotations

import contextlib
import logging
import os
from collections.abc import Iterable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from .meeting_models import Meeting

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"
_SEP = " | "


def format_export_line(meeting: Meeting) -> str:
    span = f"{meeting.start:{TIMESTAMP_FORMAT}} - {meeting.end:{TIMESTAMP_FORMAT}}"
    if meeting.reminder_offset is None:
        reminder = "reminder: none"
    else:
        reminder = f"reminder: {int(meeting.reminder_offset.total_seconds() // 60)} min"
    return _SEP.join([span, meeting.title, reminder, f"id: {meeting.id}"])


def parse_export_line(line: str) -> dict[str, Any]:
    """
    Reconstruct the fields of a line produced by format_export_line().

    Raises ValueError on anything that does not look like an export line.
    """
    line = line.rstrip("\n")
    head, sep, rest = line.partition(_SEP)
    if not sep:
        raise ValueError(f"not an export line: {line!r}")

    title_and_reminder, sep, id_part = rest.rpartition(_SEP)
    if not sep or not id_part.startswith("id: "):
        raise ValueError(f"missing id segment: {line!r}")

    title, sep, reminder_part = title_and_reminder.rpartition(_SEP)
    if not sep or not reminder_part.startswith("reminder: "):
        raise ValueError(f"missing reminder segment: {line!r}")

    start_s, sep, end_s = head.partition(" - ")
    if not sep:
        raise ValueError(f"missing time span: {line!r}")

    raw_reminder = reminder_part[len("reminder: ") :]
    reminder_offset: timedelta | None = None
    if raw_reminder != "none":
        reminder_offset = timedelta(minutes=int(raw_reminder.removesuffix(" min")))

    return {
        "id": id_part[len("id: ") :],
        "title": title,
        "start": datetime.strptime(start_s, TIMESTAMP_FORMAT),
        "end": datetime.strptime(end_s, TIMESTAMP_FORMAT),
        "reminder_offset": reminder_offset,
    }


def write_lines(path: str | Path, lines: Iterable[str]) -> int:
    """
    Atomically write lines to path (tmp file + os.replace).

    Returns the number of lines written. OSError propagates to the caller.
    """
    path = Path(path)
    if not path.name or path.name in (".", ".."):
        raise IsADirectoryError(f"export destination needs a file name: {str(path)!r}")
    path.parent.mkdir(parents=True, exist_ok=True)
    body = [f"{line}\n" for line in lines]

    tmp = path.with_name(path.name + ".tmp")
    try:
        tmp.write_text("".join(body), "utf-8")
        os.replace(tmp, path)
    except OSError:
        with contextlib.suppress(OSError):
            tmp.unlink(missing_ok=True)
        raise

    logger.debug("Wrote %d lines to %s", len(body), path)
    return len(body)
