"""Personal meeting planner: overlap-checked meetings with console reminders."""
