# src/last_done/reminders/scheduler.py

from __future__ import annotations

"""
Notification scheduler.

Keeps at most one pending notification request per task id:
- every schedule first cancels whatever is pending for the id,
- past-due dates are dropped (missed reminders are not back-filled),
- center failures are logged and not retried.
"""

import logging
from collections.abc import Iterable

from ..core.ports import Clock, NotificationCenter
from ..tasks.task_models import CalendarTrigger, NotificationRequest, ReminderInterval, Task

logger = logging.getLogger(__name__)


def build_request(task: Task) -> NotificationRequest | None:
    """Convert a task into its notification request, or None if it has no reminder."""
    if task.reminder_interval == ReminderInterval.NONE or task.notification_date is None:
        return None
    return NotificationRequest(
        id=task.id,
        title=f"Reminder: {task.name}",
        body=task.body_text(),
        trigger=CalendarTrigger.at(task.notification_date),
    )


class NotificationScheduler:
    def __init__(self, center: NotificationCenter, clock: Clock) -> None:
        self._center = center
        self._clock = clock

    def cancel(self, task_id: str) -> None:
        """Remove any pending request for task_id. Safe when nothing is pending."""
        try:
            self._center.remove_all({task_id})
        except Exception:
            logger.exception("remove_all failed task_id=%s", task_id)

    def schedule_or_cancel(self, task: Task) -> None:
        # No atomic replace: cancel, then add.
        self.cancel(task.id)

        request = build_request(task)
        if request is None:
            logger.debug("Task %s has no reminder; cancelled only", task.id)
            return

        now = self._clock.now()
        if task.notification_date is not None and task.notification_date <= now:
            logger.debug(
                "Task %s reminder %s is not in the future (now=%s); dropped",
                task.id,
                task.notification_date,
                now,
            )
            return

        try:
            self._center.add(request)
            logger.info("Task %s reminder scheduled for %s", task.id, task.notification_date)
        except Exception:
            logger.exception("add failed task_id=%s", task.id)

    def resync(self, tasks: Iterable[Task]) -> int:
        """Re-submit reminders for all tasks. Returns how many tasks were processed."""
        n = 0
        for task in tasks:
            self.schedule_or_cancel(task)
            n += 1
        return n
