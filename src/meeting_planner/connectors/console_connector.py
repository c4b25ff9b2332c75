# src/meeting_planner/connectors/console_connector.py

from __future__ import annotations

import logging
import sys
import threading
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..meetings.meeting_models import Meeting

logger = logging.getLogger(__name__)

PROMPT = ">>> "


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleReminderNotifier:
    """
    ReminderNotifier that prints to the terminal.

    Called from the poller thread while the REPL may be blocked in input(),
    so prints are serialized and the prompt is redrawn afterwards.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    async def notify(self, meeting: Meeting) -> None:
        with self._lock:
            sys.stdout.write("\n")
            _print_ts(f'Reminder: "{meeting.title}" starts at {meeting.start:%H:%M}')
            sys.stdout.write(PROMPT)
            sys.stdout.flush()


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Meeting planner. Use /help for commands. Use /exit to quit.\n")

    while True:
        try:
            user_input = input(PROMPT).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            response = command_registry.handle(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is None:
            response = "Commands start with '/'. Use /help to list available commands."

        _print_ts(response)

    logger.info("Console connector finished.")
