# src/meeting_planner/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then starts:
- the reminder poller in a background thread (optional),
- the console REPL in the main thread.
"""

from __future__ import annotations

import logging
import signal

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import ConsoleReminderNotifier, run_console_loop
from ..logging_setup import setup_logging
from ..meetings.reminder_poller import ReminderBackgroundRunner, start_reminders_in_background

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)

    reminders: ReminderBackgroundRunner | None = None
    if settings.reminders_enabled:
        reminders = start_reminders_in_background(
            state.store,
            ConsoleReminderNotifier(),
            interval_seconds=settings.reminder_interval_seconds,
        )
    else:
        logger.info("Reminders disabled, poller not started.")

    def _handle_sigterm(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        raise KeyboardInterrupt

    try:
        signal.signal(signal.SIGTERM, _handle_sigterm)
    except (ValueError, OSError):
        # Not in the main thread, or platform without SIGTERM.
        logger.debug("SIGTERM handler not installed.", exc_info=True)

    try:
        run_console_loop(state)
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    finally:
        if reminders is not None:
            reminders.stop()
            reminders.join(timeout=10.0)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
