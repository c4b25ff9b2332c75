# src/meeting_planner/cli/commands.py

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable
from datetime import date, datetime, timedelta
from pathlib import Path

from ..core.state import AppState
from ..meetings.meeting_models import Meeting, MeetingResult

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"
_DATETIME_FORMATS = ("%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M")


class UsageError(ValueError):
    """Bad command arguments; the message is shown to the user."""


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Could not parse command: {e}."
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        logger.debug("Command /%s args=%s", name, args)
        try:
            return handler(state, args)
        except UsageError as e:
            return str(e)

    def describe(self, name: str, help_text: str) -> None:
        """Help-only entry for a command handled outside the registry (e.g. /exit)."""
        self._help[name.lower()] = help_text

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument parsing ----


def parse_day(raw: str, today: date | None = None) -> date:
    """YYYY-MM-DD, or today/tomorrow relative to `today` (default: the system date)."""
    s = raw.strip().lower()
    base = today or date.today()
    if s == "today":
        return base
    if s == "tomorrow":
        return base + timedelta(days=1)
    try:
        return datetime.strptime(s, DATE_FORMAT).date()
    except ValueError:
        raise UsageError(f"Bad date {raw!r}: expected YYYY-MM-DD, today or tomorrow.") from None


def parse_when(raw: str, day: date) -> datetime:
    """'HH:MM' on `day`, or a full 'YYYY-MM-DD HH:MM' timestamp."""
    s = raw.strip()
    try:
        t = datetime.strptime(s, TIME_FORMAT).time()
        return datetime.combine(day, t)
    except ValueError:
        pass
    for fmt in _DATETIME_FORMATS:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue
    raise UsageError(f"Bad time {raw!r}: expected HH:MM or 'YYYY-MM-DD HH:MM'.")


def parse_reminder(raw: str) -> timedelta | None:
    s = raw.strip().lower()
    if s in ("", "none", "off", "-"):
        return None
    try:
        minutes = int(s)
    except ValueError:
        raise UsageError(f"Bad reminder {raw!r}: expected minutes or 'none'.") from None
    if minutes < 0:
        raise UsageError("Reminder minutes must be zero or positive.")
    try:
        return timedelta(minutes=minutes)
    except OverflowError:
        raise UsageError(f"Reminder {raw!r} is out of range.") from None


def _pick(state: AppState, raw_day: str, raw_index: str) -> Meeting:
    day = parse_day(raw_day, state.store.today())
    meetings = state.store.get_meetings_for_day(day)
    try:
        index = int(raw_index)
    except ValueError:
        raise UsageError(f"Bad meeting number {raw_index!r}.") from None
    if not meetings:
        raise UsageError(f"No meetings on {day:{DATE_FORMAT}}.")
    if index < 1 or index > len(meetings):
        raise UsageError(f"Pick a meeting number between 1 and {len(meetings)}.")
    return meetings[index - 1]


def _rejected(result: MeetingResult) -> str:
    reason = result.reason.value if result.reason is not None else "unknown"
    return f"Rejected ({reason}): {result.detail}"


def _format_day(day: date, meetings: list[Meeting]) -> str:
    if not meetings:
        return f"No meetings on {day:{DATE_FORMAT}}."
    lines = [f"Meetings on {day:{DATE_FORMAT}}:"]
    for i, m in enumerate(meetings, start=1):
        lines.append(f"  {i}. {m.describe()}")
    return "\n".join(lines)


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    enabled = bool(getattr(settings, "reminders_enabled", True))
    interval = getattr(settings, "reminder_interval_seconds", 30.0)
    return (
        "Status:\n"
        f"  Meetings stored: {state.store.count_meetings()}\n"
        f"  Reminders: {'ON' if enabled else 'OFF'} (poll every {interval:g}s)\n"
        f"  Export dir: {getattr(settings, 'export_dir', '-')}"
    )


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <date> <start> <end> <title...> [--remind N]
    """
    usage = "Usage: /add <YYYY-MM-DD> <HH:MM> <HH:MM> <title...> [--remind N]"

    reminder: timedelta | None = None
    rest = list(args)
    if "--remind" in rest:
        i = rest.index("--remind")
        if i + 1 >= len(rest):
            raise UsageError(usage)
        reminder = parse_reminder(rest[i + 1])
        del rest[i : i + 2]

    if len(rest) < 4:
        raise UsageError(usage)

    day = parse_day(rest[0], state.store.today())
    start = parse_when(rest[1], day)
    end = parse_when(rest[2], day)
    title = " ".join(rest[3:]).strip()
    if not title:
        raise UsageError(usage)

    result = state.store.add_meeting(
        Meeting(title=title, start=start, end=end, reminder_offset=reminder)
    )
    if not result.ok or result.meeting is None:
        return _rejected(result)
    return f"Meeting added: {result.meeting.describe()}"


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <date> <n> [title=...] [start=...] [end=...] [remind=N|none]

    start/end accept HH:MM (same date as the meeting) or a full timestamp.
    """
    usage = "Usage: /edit <YYYY-MM-DD> <n> [title=...] [start=HH:MM] [end=HH:MM] [remind=N|none]"
    if len(args) < 3:
        raise UsageError(usage)

    meeting = _pick(state, args[0], args[1])
    day = meeting.start.date()

    changes: dict[str, object] = {}
    for item in args[2:]:
        key, sep, value = item.partition("=")
        key = key.strip().lower()
        if not sep:
            raise UsageError(usage)
        if key == "title":
            if not value.strip():
                raise UsageError("Title cannot be empty.")
            changes["title"] = value.strip()
        elif key == "start":
            changes["start"] = parse_when(value, day)
        elif key == "end":
            changes["end"] = parse_when(value, day)
        elif key in ("remind", "reminder"):
            changes["reminder_offset"] = parse_reminder(value)
        else:
            raise UsageError(f"Unknown field {key!r}. {usage}")

    def mutate(m: Meeting) -> None:
        for name, value in changes.items():
            setattr(m, name, value)

    if meeting.id is None:
        raise UsageError("Meeting has no id.")
    result = state.store.update_meeting(meeting.id, mutate)
    if not result.ok or result.meeting is None:
        return _rejected(result)
    return f"Meeting updated: {result.meeting.describe()}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        raise UsageError("Usage: /delete <YYYY-MM-DD> <n>")

    meeting = _pick(state, args[0], args[1])
    if meeting.id is None or not state.store.delete_meeting(meeting.id):
        return "Meeting was already removed."
    return f"Meeting deleted: {meeting.describe()}"


def cmd_day(state: AppState, args: list[str]) -> str:
    today = state.store.today()
    day = parse_day(args[0], today) if args else today
    return _format_day(day, state.store.get_meetings_for_day(day))


def cmd_export(state: AppState, args: list[str]) -> str:
    """
    /export <date> [path]   (default: <export_dir>/meetings-<date>.txt)
    """
    if not args or len(args) > 2:
        raise UsageError("Usage: /export <YYYY-MM-DD> [path]")

    day = parse_day(args[0], state.store.today())
    if len(args) == 2:
        path = Path(args[1]).expanduser()
    else:
        export_dir = Path(getattr(state.settings, "export_dir", "."))
        path = export_dir / f"meetings-{day:{DATE_FORMAT}}.txt"

    result = state.store.export_day_schedule(day, path)
    if not result.ok:
        return f"Export failed: {result.detail}"
    return f"Exported {result.count} meeting(s) to {result.path}."


def cmd_reminders(state: AppState, args: list[str]) -> str:
    """Show due reminders without acknowledging them."""
    due = state.store.get_upcoming_reminders()
    if not due:
        return "No reminders due."
    lines = ["Reminders due:"]
    for m in due:
        lines.append(f"  - {m.describe()}")
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show meeting count and reminder settings.")
registry.register(
    "add",
    cmd_add,
    help_text="Add a meeting: /add 2026-10-19 09:00 09:15 Standup --remind 10",
    aliases=["new"],
)
registry.register(
    "edit",
    cmd_edit,
    help_text="Edit a meeting: /edit <date> <n> [title=...] [start=HH:MM] [end=HH:MM] [remind=N|none]",
)
registry.register(
    "delete", cmd_delete, help_text="Delete a meeting: /delete <date> <n>", aliases=["rm"]
)
registry.register("day", cmd_day, help_text="List meetings for a day: /day [date].", aliases=["ls"])
registry.register("export", cmd_export, help_text="Export a day to a text file: /export <date> [path].")
registry.register("reminders", cmd_reminders, help_text="Show reminders that are currently due.")
registry.describe("exit", "Quit the planner (also /quit).")
