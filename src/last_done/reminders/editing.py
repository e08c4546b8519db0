# src/last_done/reminders/editing.py

from __future__ import annotations

"""
Task edit session.

Lifecycle: IDLE -> EDITING -> COMMITTING -> IDLE

The session edits a draft copy of the task. Every transition re-derives the
reminder fields on the draft and reschedules its notification, so the reminder
always previews what the user sees. The stored task is only touched by commit().

close() without commit drops the draft entirely and puts the notification back
to what the stored task says.
discard() only drops the draft; delete uses it and issues its own cancel.
"""

import logging
from dataclasses import replace
from datetime import datetime
from enum import Enum

from ..core.ports import Clock
from ..tasks.task_models import ReminderInterval, Task
from ..tasks.task_store import TaskStore
from .policy import days_after, derive_on_date_or_name_change, derive_on_interval_change
from .scheduler import NotificationScheduler

logger = logging.getLogger(__name__)


def _seed_notification_date(task: Task) -> datetime:
    if task.reminder_interval > 0:
        return days_after(task.date, task.reminder_interval.days)
    return task.date


class EditState(str, Enum):
    IDLE = "idle"
    EDITING = "editing"
    COMMITTING = "committing"


class EditSessionError(RuntimeError):
    """Raised for transitions that are not allowed in the current state."""


class EditSession:
    def __init__(
        self,
        task: Task,
        *,
        store: TaskStore,
        scheduler: NotificationScheduler,
        clock: Clock,
    ) -> None:
        self._task_id = task.id
        self._store = store
        self._scheduler = scheduler
        self._clock = clock
        self._draft: Task | None = None
        self._state = EditState.IDLE

    @property
    def state(self) -> EditState:
        return self._state

    @property
    def task_id(self) -> str:
        return self._task_id

    @property
    def draft(self) -> Task:
        if self._draft is None:
            raise EditSessionError("no open edit session")
        return self._draft

    def begin(self) -> Task:
        if self._state != EditState.IDLE:
            raise EditSessionError(f"cannot begin from state {self._state.value}")
        stored = self._store.get(self._task_id)
        if stored is None:
            raise EditSessionError(f"task not found: {self._task_id}")
        self._draft = replace(stored)
        if self._draft.has_reminder and self._draft.notification_date is None:
            # Saved data may carry an interval without a date; seed it like the picker would.
            self._draft.notification_date = _seed_notification_date(self._draft)
        self._state = EditState.EDITING
        logger.debug("Edit session opened task_id=%s", self._task_id)
        return self._draft

    def _require_editing(self) -> Task:
        if self._state != EditState.EDITING or self._draft is None:
            raise EditSessionError(f"edit session is not open (state={self._state.value})")
        return self._draft

    # ---- transitions ----

    def change_interval(self, new_interval: ReminderInterval | int) -> Task:
        draft = self._require_editing()
        old = draft.reminder_interval
        fields = derive_on_interval_change(draft, ReminderInterval(new_interval), self._clock.now())
        fields.apply_to(draft)
        logger.debug(
            "Interval %s -> %s task_id=%s notification_date=%s",
            old.name,
            draft.reminder_interval.name,
            draft.id,
            draft.notification_date,
        )
        self._scheduler.schedule_or_cancel(draft)
        return draft

    def change_date(self, new_date: datetime) -> Task:
        draft = self._require_editing()
        draft.date = new_date
        if draft.has_reminder:
            derive_on_date_or_name_change(draft).apply_to(draft)
            self._scheduler.schedule_or_cancel(draft)
        return draft

    def change_name(self, new_name: str) -> Task:
        draft = self._require_editing()
        draft.name = new_name
        if draft.has_reminder:
            derive_on_date_or_name_change(draft).apply_to(draft)
            self._scheduler.schedule_or_cancel(draft)
        return draft

    def change_notification_date(self, picked: datetime) -> Task:
        draft = self._require_editing()
        if not draft.has_reminder:
            raise EditSessionError("notification date requires a reminder interval")
        draft.notification_date = picked
        self._scheduler.schedule_or_cancel(draft)
        return draft

    def change_notification_text(self, text: str) -> Task:
        draft = self._require_editing()
        if not draft.has_reminder:
            raise EditSessionError("notification text requires a reminder interval")
        draft.notification_text = text
        return draft

    # ---- terminal transitions ----

    def commit(self) -> Task:
        """Write the draft onto the stored task, reschedule, persist."""
        draft = self._require_editing()
        self._state = EditState.COMMITTING
        try:
            stored = self._store.get(self._task_id)
            if stored is None:
                self._scheduler.cancel(self._task_id)
                raise EditSessionError(f"task not found: {self._task_id}")

            stored.name = draft.name
            stored.date = draft.date
            stored.reminder_interval = draft.reminder_interval
            stored.notification_text = draft.notification_text
            stored.notification_date = draft.notification_date if draft.has_reminder else None

            if stored.has_reminder:
                self._scheduler.schedule_or_cancel(stored)
            else:
                self._scheduler.cancel(stored.id)

            self._store.save()
            logger.info(
                "Task %s committed interval=%s notification_date=%s",
                stored.id,
                stored.reminder_interval.name,
                stored.notification_date,
            )
            return stored
        finally:
            self._draft = None
            self._state = EditState.IDLE

    def discard(self) -> None:
        """Drop the draft and go back to IDLE. Notifications are left to the caller."""
        if self._state != EditState.EDITING:
            return
        self._draft = None
        self._state = EditState.IDLE
        logger.debug("Edit session discarded task_id=%s", self._task_id)

    def close(self) -> None:
        """Dismiss without commit: discard the draft, restore the stored reminder."""
        if self._state != EditState.EDITING:
            return
        self._draft = None
        self._state = EditState.IDLE

        stored = self._store.get(self._task_id)
        if stored is None:
            self._scheduler.cancel(self._task_id)
        else:
            self._scheduler.schedule_or_cancel(stored)
        logger.debug("Edit session closed without commit task_id=%s", self._task_id)
