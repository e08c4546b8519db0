# src/last_done/reminders/policy.py

from __future__ import annotations

"""
Reminder policy.

Pure functions deriving a task's reminder fields. Nothing here touches the
notification center or the store; callers apply the returned fields.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..tasks.task_models import ReminderInterval, Task, default_notification_text


@dataclass(slots=True, frozen=True)
class ReminderFields:
    notification_date: datetime | None
    notification_text: str
    reminder_interval: ReminderInterval

    def apply_to(self, task: Task) -> None:
        task.notification_date = self.notification_date
        task.notification_text = self.notification_text
        task.reminder_interval = self.reminder_interval


def days_after(moment: datetime, days: int) -> datetime:
    # Naive local datetimes: adding days keeps the wall-clock time.
    return moment + timedelta(days=days)


def derive_on_interval_change(
    task: Task,
    new_interval: ReminderInterval,
    now: datetime,
) -> ReminderFields:
    """
    New reminder fields after the user picks another interval.

    - N days  -> task.date + N days
    - Custom  -> now, as a starting point for the user to move
    - None    -> no date, empty text
    """
    interval = ReminderInterval(new_interval)

    if interval > 0:
        return ReminderFields(
            notification_date=days_after(task.date, interval.days),
            notification_text=default_notification_text(task.name),
            reminder_interval=interval,
        )

    if interval == ReminderInterval.CUSTOM:
        return ReminderFields(
            notification_date=now,
            notification_text=default_notification_text(task.name),
            reminder_interval=interval,
        )

    return ReminderFields(
        notification_date=None,
        notification_text="",
        reminder_interval=ReminderInterval.NONE,
    )


def derive_on_date_or_name_change(task: Task) -> ReminderFields:
    """
    Reminder fields after the task's name or date changed.

    Custom and None keep their notification date; only interval or
    explicit picker edits move it.
    """
    interval = task.reminder_interval
    text = task.notification_text
    notification_date = task.notification_date

    if interval != ReminderInterval.NONE:
        text = default_notification_text(task.name)
    if interval > 0:
        notification_date = days_after(task.date, interval.days)

    return ReminderFields(
        notification_date=notification_date,
        notification_text=text,
        reminder_interval=interval,
    )
