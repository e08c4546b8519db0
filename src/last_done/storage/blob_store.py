# src/last_done/storage/blob_store.py

from __future__ import annotations

import contextlib
import logging
import os
import sqlite3
import time
from pathlib import Path

logger = logging.getLogger(__name__)


class SQLiteBlobStore:
    """
    Key/value blob store on SQLite.

    One row per key; the task collection lives under a single key and is
    rewritten as a whole on every save.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3", *, key: str = "tasks") -> None:
        self._db_path = Path(db_path)
        self._key = key
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("SQLiteBlobStore ready db=%s key=%s", self._db_path, self._key)

    @property
    def location(self) -> str:
        return f"{self._db_path}#{self._key}"

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS blobs (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def load(self) -> bytes | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM blobs WHERE key = ?", (self._key,)).fetchone()
            if row is None:
                return None
            return bytes(row["value"])
        finally:
            conn.close()

    def save(self, data: bytes) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO blobs(key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (self._key, sqlite3.Binary(data), time.time()),
            )
            conn.commit()
            logger.debug("Saved %d bytes under key=%s", len(data), self._key)
        finally:
            conn.close()


class FileBlobStore:
    """Single JSON file, replaced atomically on every save."""

    def __init__(self, path: str | Path = "tasks.json") -> None:
        self._path = Path(path)

    @property
    def location(self) -> str:
        return str(self._path)

    def load(self) -> bytes | None:
        if not self._path.exists():
            return None
        return self._path.read_bytes()

    def save(self, data: bytes) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_bytes(data)
        os.replace(tmp, self._path)
        with contextlib.suppress(Exception):
            # Best-effort: not critical on Windows or restricted FS.
            os.chmod(self._path, 0o600)
        logger.debug("Saved %d bytes to %s", len(data), self._path)
