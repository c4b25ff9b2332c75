# tests/test_commands.py

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from meeting_planner.cli.commands import (
    CommandRegistry,
    UsageError,
    parse_day,
    parse_reminder,
    parse_when,
    registry,
)


def test_command_registry_routes_and_reports_usage(state) -> None:
    reg = CommandRegistry()
    called: list[list[str]] = []

    def ok(state, args):
        called.append(args)
        return "ok"

    def bad(state, args):
        raise UsageError("Usage: /bad")

    reg.register("ok", ok, "ok", aliases=["k"])
    reg.register("bad", bad, "bad")

    assert reg.handle(state, '/ok "two words" x') == "ok"
    assert reg.handle(state, "/K") == "ok"
    assert called == [["two words", "x"], []]
    assert reg.handle(state, "/bad") == "Usage: /bad"


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Could not parse" in (reg.handle(state, '/add "unterminated') or "")


def test_add_then_list_day(state) -> None:
    reply = registry.handle(state, "/add 2026-10-19 14:00 15:00 Review --remind 10")
    assert reply is not None and reply.startswith("Meeting added")
    registry.handle(state, '/add 2026-10-19 09:00 09:15 "Daily standup"')

    listing = registry.handle(state, "/day 2026-10-19") or ""

    lines = listing.splitlines()
    assert lines[0] == "Meetings on 2026-10-19:"
    assert "09:00-09:15 Daily standup" in lines[1]
    assert "14:00-15:00 Review (reminder 10 min before)" in lines[2]


def test_add_reports_rejections(state) -> None:
    registry.handle(state, "/add 2026-10-19 09:00 10:00 A")

    conflict = registry.handle(state, "/add 2026-10-19 09:30 10:30 B") or ""
    past = registry.handle(state, "/add 2026-10-17 09:00 10:00 C") or ""
    usage = registry.handle(state, "/add 2026-10-19 09:00") or ""
    bad_date = registry.handle(state, "/add 19.10.2026 09:00 10:00 D") or ""

    assert conflict.startswith("Rejected (conflict)")
    assert past.startswith("Rejected (invalid_timing)")
    assert usage.startswith("Usage: /add")
    assert "Bad date" in bad_date
    assert state.store.count_meetings() == 1


def test_edit_updates_selected_meeting(state) -> None:
    registry.handle(state, "/add 2026-10-19 09:00 10:00 A")
    registry.handle(state, "/add 2026-10-19 11:00 12:00 B --remind 5")

    reply = registry.handle(state, '/edit 2026-10-19 2 "title=B renamed" start=12:00 end=13:00 remind=none') or ""

    assert reply.startswith("Meeting updated")
    meetings = state.store.get_meetings_for_day(date(2026, 10, 19))
    assert [(m.title, m.start.hour, m.end.hour) for m in meetings] == [("A", 9, 10), ("B renamed", 12, 13)]
    assert meetings[1].reminder_offset is None


def test_edit_rejection_keeps_meeting(state) -> None:
    registry.handle(state, "/add 2026-10-19 09:00 10:00 A")
    registry.handle(state, "/add 2026-10-19 11:00 12:00 B")
    before = state.store.list_meetings()

    reply = registry.handle(state, "/edit 2026-10-19 1 end=11:30") or ""

    assert reply.startswith("Rejected (conflict)")
    assert state.store.list_meetings() == before
    assert "between 1 and 2" in (registry.handle(state, "/edit 2026-10-19 5 title=x") or "")
    assert "Unknown field" in (registry.handle(state, "/edit 2026-10-19 1 room=7") or "")


def test_delete_selected_meeting(state) -> None:
    registry.handle(state, "/add 2026-10-19 09:00 10:00 A")

    reply = registry.handle(state, "/delete 2026-10-19 1") or ""

    assert reply.startswith("Meeting deleted")
    assert state.store.count_meetings() == 0
    assert "No meetings on 2026-10-19" in (registry.handle(state, "/delete 2026-10-19 1") or "")


def test_export_defaults_to_export_dir(state, settings) -> None:
    registry.handle(state, "/add 2026-10-19 09:00 10:00 A")

    reply = registry.handle(state, "/export 2026-10-19") or ""

    out = settings.export_dir / "meetings-2026-10-19.txt"
    assert reply == f"Exported 1 meeting(s) to {out}."
    assert "| A |" in out.read_text("utf-8")


def test_reminders_command_does_not_acknowledge(state, clock) -> None:
    start = clock.now + timedelta(minutes=5)
    registry.handle(state, f"/add {start:%Y-%m-%d} {start:%H:%M} {start + timedelta(minutes=30):%H:%M} Soon --remind 10")

    first = registry.handle(state, "/reminders") or ""
    second = registry.handle(state, "/reminders") or ""

    assert "Soon" in first
    assert first == second


def test_status_and_help(state) -> None:
    assert "Meetings stored: 0" in (registry.handle(state, "/status") or "")
    assert "/add" in (registry.handle(state, "/help") or "")


def test_add_with_out_of_range_reminder_is_rejected(state) -> None:
    reply = registry.handle(state, "/add 2026-10-19 09:00 10:00 X --remind 2000000000") or ""
    huge = registry.handle(state, "/add 2026-10-19 09:00 10:00 X --remind 99999999999999999999") or ""

    assert reply.startswith("Rejected (invalid_timing)")
    assert "out of range" in huge
    assert state.store.count_meetings() == 0
    assert registry.handle(state, "/reminders") == "No reminders due."


def test_day_defaults_to_the_store_clock(state, clock) -> None:
    registry.handle(state, f"/add {clock.now:%Y-%m-%d} 10:00 11:00 Today")
    registry.handle(state, "/add tomorrow 10:00 11:00 Tomorrow")

    assert "10:00-11:00 Today" in (registry.handle(state, "/day") or "")
    assert "10:00-11:00 Tomorrow" in (registry.handle(state, "/day 2026-10-19") or "")


def test_help_lists_exit() -> None:
    assert "/exit - " in registry.build_help()


def test_parse_helpers() -> None:
    day = date(2026, 10, 19)
    assert parse_when("09:30", day) == datetime(2026, 10, 19, 9, 30)
    assert parse_when("2026-10-20 07:00", day) == datetime(2026, 10, 20, 7, 0)
    assert parse_reminder("15") == timedelta(minutes=15)
    assert parse_reminder("none") is None

    with pytest.raises(UsageError):
        parse_when("9h30", day)
    with pytest.raises(UsageError):
        parse_reminder("-5")
    with pytest.raises(UsageError, match="out of range"):
        parse_reminder("99999999999999999999")
    assert parse_day("tomorrow", date(2026, 10, 18)) == date(2026, 10, 19)
