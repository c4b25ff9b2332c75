# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "MEETINGS_APP_NAME": "App display name (default: meetings).",
    "MEETINGS_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Reminders
    "MEETINGS_REMINDERS_ENABLED": "Run the background reminder poller (true/false, default: true).",
    "MEETINGS_REMINDER_INTERVAL_SECONDS": "Seconds between reminder polls (default: 30).",
    # Paths (gitignored)
    "MEETINGS_DATA_DIR": "Local data directory, holds meetings.log (default: .local/meetings).",
    "MEETINGS_EXPORT_DIR": "Default /export destination (default: <data_dir>/exports).",
}
