# src/last_done/tasks/task_store.py

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

from ..core.ports import BlobStore
from .task_models import ReminderInterval, Task

logger = logging.getLogger(__name__)


def _parse_local(raw: Any) -> datetime:
    # Tasks use naive local wall-clock time; offsets are folded into it.
    dt = datetime.fromisoformat(str(raw))
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


class TaskStore:
    """
    In-memory ordered task collection with whole-collection persistence.

    Ordering:
    - insert() prepends (newest first)
    - filter() always re-sorts by date desc and never reorders within a match

    Persistence:
    - save() encodes the full sequence and overwrites whatever was stored
    - load() treats a missing or undecodable blob as "no saved tasks"
    """

    def __init__(self, backend: BlobStore) -> None:
        self._backend = backend
        self._tasks: list[Task] = []

    def __len__(self) -> int:
        return len(self._tasks)

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    # ---- codec ----

    @staticmethod
    def _task_to_dict(task: Task) -> dict[str, Any]:
        return {
            "id": task.id,
            "name": task.name,
            "date": task.date.isoformat(),
            "notification_date": (
                task.notification_date.isoformat() if task.notification_date is not None else None
            ),
            "notification_text": task.notification_text,
            "reminder_interval": int(task.reminder_interval),
        }

    @staticmethod
    def _dict_to_task(d: dict[str, Any]) -> Task:
        raw_notif = d.get("notification_date")
        return Task(
            id=str(d["id"]),
            name=str(d["name"]),
            date=_parse_local(d["date"]),
            notification_date=_parse_local(raw_notif) if raw_notif else None,
            notification_text=str(d.get("notification_text") or ""),
            reminder_interval=ReminderInterval.from_raw(d.get("reminder_interval")),
        )

    @classmethod
    def encode(cls, tasks: list[Task]) -> bytes:
        payload = [cls._task_to_dict(t) for t in tasks]
        return json.dumps(payload, ensure_ascii=False).encode("utf-8")

    @classmethod
    def decode(cls, data: bytes) -> list[Task]:
        val = json.loads(data.decode("utf-8"))
        if not isinstance(val, list):
            raise ValueError("Expected JSON array of tasks")
        return [cls._dict_to_task(item) for item in val]

    # ---- persistence ----

    def load(self) -> list[Task]:
        try:
            data = self._backend.load()
        except Exception:
            logger.exception("Failed to read saved tasks; starting empty.")
            data = None

        if not data:
            self._tasks = []
            return []

        try:
            tasks = self.decode(data)
        except Exception:
            logger.exception("Failed to decode saved tasks; starting empty.")
            tasks = []

        # Uniqueness: first occurrence wins.
        seen: set[str] = set()
        self._tasks = []
        for t in tasks:
            if t.id in seen:
                logger.warning("Dropping duplicate task id=%s on load", t.id)
                continue
            seen.add(t.id)
            self._tasks.append(t)

        logger.info("Loaded %d tasks", len(self._tasks))
        return list(self._tasks)

    def save(self) -> None:
        self._backend.save(self.encode(self._tasks))
        logger.debug("Saved %d tasks", len(self._tasks))

    # ---- collection ----

    def get(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def insert(self, task: Task) -> None:
        if self.get(task.id) is not None:
            raise ValueError(f"duplicate task id: {task.id}")
        self._tasks.insert(0, task)
        logger.debug("Task inserted id=%s name=%r", task.id, task.name)

    def delete(self, task_id: str) -> bool:
        before = len(self._tasks)
        self._tasks = [t for t in self._tasks if t.id != task_id]
        removed = len(self._tasks) != before
        if removed:
            logger.debug("Task deleted id=%s", task_id)
        return removed

    def filter(self, query: str = "") -> list[Task]:
        """Tasks sorted by last-done date (most recent first), filtered by name substring."""
        ordered = sorted(self._tasks, key=lambda t: t.date, reverse=True)
        needle = (query or "").lower()
        if not needle:
            return ordered
        return [t for t in ordered if needle in t.name.lower()]
