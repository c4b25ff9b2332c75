"""
Meeting subsystem.

Components:
- meeting_models.py: data structures (Meeting, MeetingResult, FailureReason)
- meeting_store.py: in-memory, lock-guarded collection with overlap checks
- meeting_export.py: plain-text day schedule lines
- reminder_poller.py: polling loop that delivers and acknowledges due reminders
"""
