# src/meeting_planner/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..meetings.meeting_store import MeetingStore


@dataclass
class AppState:
    # Settings live on the state so command handlers can read them.
    settings: object

    store: MeetingStore
