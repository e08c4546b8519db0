# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets; keep the Matrix password in .env (gitignored).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "LASTDONE_APP_NAME": "App display name (default: last-done).",
    "LASTDONE_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Storage
    "LASTDONE_DATA_DIR": "Local data directory (default: .local/last_done).",
    "LASTDONE_STORAGE_BACKEND": "sqlite (default) or file.",
    "LASTDONE_TASKS_DB_PATH": "SQLite path for the sqlite backend (default: <data_dir>/tasks.sqlite3).",
    "LASTDONE_TASKS_JSON_PATH": "JSON path for the file backend (default: <data_dir>/tasks.json).",
    # Notifications
    "LASTDONE_CONSOLE_ENABLED": "Run the interactive console and print reminders there (true/false).",
    "LASTDONE_NOTIFICATIONS_ENABLED": "Grant notification permission at startup (true/false).",
    "LASTDONE_DELIVERY_POLL_SECONDS": "How often due reminders are checked (default: 1.0).",
    # Matrix delivery
    "LASTDONE_MATRIX_ENABLED": "Deliver reminders to a Matrix room instead of the console (true/false).",
    "LASTDONE_MATRIX_HOMESERVER": "Matrix homeserver URL.",
    "LASTDONE_MATRIX_USER_ID": "Matrix user ID (bot).",
    "LASTDONE_MATRIX_PASSWORD": "Password for first login (session stored locally).",
    "LASTDONE_MATRIX_ROOM_ID": "Room that receives reminders.",
    "LASTDONE_MATRIX_STORE_PATH": "Matrix session/E2EE store path (default: <data_dir>/matrix_store).",
}
