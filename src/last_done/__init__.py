"""last-done: keep track of the last time you did things, with optional reminders."""

__version__ = "1.0.0"
