# src/last_done/tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum


class ReminderInterval(IntEnum):
    """
    Closed selector for how a reminder date is derived.

    Positive values are "days after the last completion".
    CUSTOM means the user picks the notification date explicitly.
    """

    NONE = 0
    CUSTOM = -1
    WEEK = 7
    FOUR_WEEKS = 28
    QUARTER = 90

    @classmethod
    def from_raw(cls, raw: int | str | None) -> ReminderInterval:
        if raw is None or raw == "":
            return cls.NONE
        try:
            return cls(int(raw))
        except (TypeError, ValueError):
            return cls.NONE

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def days(self) -> int:
        return max(0, int(self))


_LABELS = {
    ReminderInterval.NONE: "None",
    ReminderInterval.CUSTOM: "Custom",
    ReminderInterval.WEEK: "1 week",
    ReminderInterval.FOUR_WEEKS: "4 weeks",
    ReminderInterval.QUARTER: "3 months",
}


def default_notification_text(name: str) -> str:
    return f"Time to do {name} again!"


def new_task_id() -> str:
    return str(uuid.uuid4())


@dataclass(slots=True)
class Task:
    id: str
    name: str
    date: datetime

    notification_date: datetime | None = None
    notification_text: str = ""
    reminder_interval: ReminderInterval = ReminderInterval.NONE

    @classmethod
    def create(cls, name: str, date: datetime) -> Task:
        if not name or not name.strip():
            raise ValueError("name is required")
        return cls(id=new_task_id(), name=name, date=date)

    @property
    def has_reminder(self) -> bool:
        return self.reminder_interval != ReminderInterval.NONE

    def body_text(self) -> str:
        return self.notification_text or default_notification_text(self.name)

    def reminder_active(self, now: datetime) -> bool:
        """True when the list view should show the reminder badge."""
        return (
            self.has_reminder
            and self.notification_date is not None
            and self.notification_date > now
        )


@dataclass(slots=True, frozen=True)
class CalendarTrigger:
    """One-shot trigger matching an exact local calendar moment."""

    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int
    repeats: bool = False

    @classmethod
    def at(cls, moment: datetime) -> CalendarTrigger:
        return cls(
            year=moment.year,
            month=moment.month,
            day=moment.day,
            hour=moment.hour,
            minute=moment.minute,
            second=moment.second,
        )

    def fire_at(self) -> datetime:
        return datetime(self.year, self.month, self.day, self.hour, self.minute, self.second)


@dataclass(slots=True, frozen=True)
class NotificationRequest:
    id: str
    title: str
    body: str
    trigger: CalendarTrigger
