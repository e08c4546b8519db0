# src/last_done/tasks/task_api.py

from __future__ import annotations

import logging
from datetime import datetime

from ..core.state import AppState
from ..reminders.editing import EditSession
from .task_models import Task

logger = logging.getLogger(__name__)


def add_task(state: AppState, name: str, *, date: datetime | None = None) -> Task:
    """
    Create a task done "now" (or at date), put it first in the list and persist.

    Raises ValueError for an empty name.
    """
    task = Task.create(name.strip(), date if date is not None else state.clock.now())
    state.store.insert(task)
    state.store.save()
    logger.info("Task added id=%s name=%r", task.id, task.name)
    return task


def delete_task(state: AppState, task_id: str) -> bool:
    """Cancel the task's notification, then remove it and persist."""
    task = state.store.get(task_id)
    if task is None:
        return False

    if state.session is not None and state.session.task_id == task_id:
        state.session.discard()
        state.session = None

    state.scheduler.cancel(task_id)
    state.store.delete(task_id)
    state.store.save()
    logger.info("Task deleted id=%s name=%r", task.id, task.name)
    return True


def list_tasks(state: AppState, query: str = "") -> list[Task]:
    """Visible tasks (date desc, name filter). Remembers the order for numbered selection."""
    tasks = state.store.filter(query)
    state.listing = [t.id for t in tasks]
    return tasks


def resolve_ref(state: AppState, ref: str) -> str | None:
    """
    Map a user reference to a task id.

    "3" means row 3 of the last listing; anything else is taken as a task id.
    The id may be stale; callers check the store.
    """
    ref = (ref or "").strip()
    if not ref:
        return None
    if ref.isdigit():
        idx = int(ref) - 1
        if 0 <= idx < len(state.listing):
            return state.listing[idx]
        return None
    return ref


def open_editor(state: AppState, task_id: str) -> EditSession | None:
    """Open an edit session for task_id; returns None when the task no longer exists."""
    task = state.store.get(task_id)
    if task is None:
        logger.info("Edit requested for missing task id=%s", task_id)
        return None

    if state.session is not None:
        state.session.close()
        state.session = None

    session = EditSession(task, store=state.store, scheduler=state.scheduler, clock=state.clock)
    session.begin()
    state.session = session
    return session


def resync_notifications(state: AppState) -> int:
    n = state.scheduler.resync(state.store.tasks)
    logger.info("Notifications resynced for %d tasks (pending=%d)", n, len(state.center.pending()))
    return n
