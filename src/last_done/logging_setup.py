# src/last_done/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "last_done.log"

# Longest matching prefix wins. Anything unlisted only reaches the console at ERROR+.
_CONSOLE_THRESHOLDS: dict[str, int] = {
    "last_done.": logging.WARNING,
    # Delivery and Matrix run in the background thread and would interleave with the prompt.
    "last_done.notifications.": logging.ERROR,
    "last_done.connectors.matrix_": logging.ERROR,
    "py.warnings": logging.ERROR,
}


def console_threshold(logger_name: str) -> int:
    best = ""
    for prefix in _CONSOLE_THRESHOLDS:
        if logger_name.startswith(prefix) and len(prefix) > len(best):
            best = prefix
    return _CONSOLE_THRESHOLDS[best] if best else logging.ERROR


class _ReplFriendlyFilter(logging.Filter):
    """The REPL prints its own replies, so the console only shows problems."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= console_threshold(record.name)


def setup_logging(
    *,
    log_dir: str | Path = ".local/last_done",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Console gets problems only; the file under log_dir gets everything at file_level.

    Call once, before the first log line. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    datefmt = "%Y-%m-%d %H:%M:%S"

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    ch.addFilter(_ReplFriendlyFilter())
    root.addHandler(ch)

    # Thread name tells REPL lines apart from the delivery thread.
    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s [%(threadName)s] %(name)s: %(message)s",
            datefmt=datefmt,
        )
    )
    root.addHandler(fh)

    logging.captureWarnings(True)
    logging.getLogger("nio").setLevel(logging.INFO)
    return log_file
