# src/meeting_planner/meetings/reminder_poller.py

from __future__ import annotations

"""
Reminder poller.

A small polling loop that:
- fetches due reminders from the store,
- hands each one to an injected notifier port,
- acknowledges (clears) the reminder only after the notifier succeeded.

Delivery is at-least-once: a reminder whose notification failed stays due
and is picked up again on the next tick.
"""

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass

from ..core.ports import MeetingRepo, ReminderNotifier

logger = logging.getLogger(__name__)

MIN_INTERVAL_SECONDS = 0.05


async def deliver_due_reminders(repo: MeetingRepo, notifier: ReminderNotifier) -> int:
    """
    Run one poll tick. Returns how many reminders were delivered.
    """
    try:
        due = repo.get_upcoming_reminders()
    except Exception:
        logger.exception("get_upcoming_reminders failed")
        return 0

    delivered = 0
    for meeting in due:
        meeting_id = meeting.id
        if meeting_id is None:
            continue

        try:
            await notifier.notify(meeting)
        except Exception:
            logger.exception("Reminder notify failed meeting_id=%s", meeting_id)
            continue

        try:
            # Only clear the reminder that was shown; an edit made meanwhile keeps its own.
            acked = repo.remove_reminder(meeting_id, expected_reminder_time=meeting.reminder_time)
        except Exception:
            logger.exception("remove_reminder failed meeting_id=%s", meeting_id)
            continue

        delivered += 1
        logger.info("Reminder delivered meeting_id=%s acked=%s", meeting_id, acked)

    return delivered


async def run_reminder_poller(
        repo: MeetingRepo,
        notifier: ReminderNotifier,
        *,
        interval_seconds: float = 30.0,
        stop_event: asyncio.Event | None = None,
) -> None:
    """
    Poll for due reminders every interval_seconds until stop_event is set.

    The interval only affects latency: past-due reminders stay due until acknowledged.
    Cancelling the coroutine also stops it.
    """
    sleep_s = max(MIN_INTERVAL_SECONDS, float(interval_seconds))
    stop = stop_event or asyncio.Event()

    logger.debug("Reminder poller started (interval=%.2fs)", sleep_s)
    while not stop.is_set():
        await deliver_due_reminders(repo, notifier)

        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(stop.wait(), timeout=sleep_s)

    logger.debug("Reminder poller stopped")


@dataclass(slots=True)
class ReminderBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except RuntimeError:
            # Loop already closed: the poller has exited.
            logger.debug("Reminder loop already closed.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)

    def is_alive(self) -> bool:
        return self.thread.is_alive()


def start_reminders_in_background(
        repo: MeetingRepo,
        notifier: ReminderNotifier,
        *,
        interval_seconds: float = 30.0,
) -> ReminderBackgroundRunner | None:
    """
    Start the reminder poller in a background thread with its own event loop,
    so the blocking console REPL can run in the main thread.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(
                run_reminder_poller(
                    repo, notifier, interval_seconds=interval_seconds, stop_event=stop_event
                )
            )
        except Exception:
            logger.exception("Reminder poller crashed.")
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="reminder-poller", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Reminder thread did not initialize properly.")
        return None

    logger.info("Reminder poller thread started (interval=%ss).", interval_seconds)
    return ReminderBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
