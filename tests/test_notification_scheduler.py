# tests/test_notification_scheduler.py

from __future__ import annotations

from datetime import timedelta

from last_done.reminders.scheduler import NotificationScheduler, build_request
from last_done.tasks.task_models import CalendarTrigger, ReminderInterval, Task

from .conftest import NOW
from .fakes import FakeNotificationCenter, FixedClock


def _task_with_reminder(interval: ReminderInterval, when) -> Task:
    t = Task.create("Clean filter", NOW)
    t.reminder_interval = interval
    t.notification_date = when
    t.notification_text = "Time to do Clean filter again!"
    return t


def test_cancel_is_idempotent(center: FakeNotificationCenter, scheduler: NotificationScheduler) -> None:
    task = _task_with_reminder(ReminderInterval.WEEK, NOW + timedelta(days=7))
    scheduler.schedule_or_cancel(task)
    assert len(center.pending()) == 1

    scheduler.cancel(task.id)
    scheduler.cancel(task.id)

    assert center.pending() == []
    assert center.removes[-2:] == [{task.id}, {task.id}]


def test_schedule_cancels_first_then_adds_one_request(
    center: FakeNotificationCenter, scheduler: NotificationScheduler
) -> None:
    when = NOW + timedelta(days=7)
    task = _task_with_reminder(ReminderInterval.WEEK, when)

    scheduler.schedule_or_cancel(task)

    assert [c[0] for c in center.calls] == ["remove", "add"]
    req = center.adds[0]
    assert req.id == task.id
    assert req.title == "Reminder: Clean filter"
    assert req.body == "Time to do Clean filter again!"
    assert req.trigger == CalendarTrigger(2026, 3, 8, 9, 30, 0)
    assert req.trigger.repeats is False


def test_rescheduling_replaces_the_pending_request(
    center: FakeNotificationCenter, scheduler: NotificationScheduler
) -> None:
    task = _task_with_reminder(ReminderInterval.WEEK, NOW + timedelta(days=7))
    scheduler.schedule_or_cancel(task)
    task.notification_date = NOW + timedelta(days=9)
    scheduler.schedule_or_cancel(task)

    pending = center.pending()
    assert len(pending) == 1
    assert pending[0].trigger.fire_at() == NOW + timedelta(days=9)


def test_stale_custom_date_is_dropped(center: FakeNotificationCenter, scheduler: NotificationScheduler) -> None:
    task = _task_with_reminder(ReminderInterval.CUSTOM, NOW - timedelta(hours=1))

    scheduler.schedule_or_cancel(task)

    assert center.removes == [{task.id}]
    assert center.adds == []


def test_date_equal_to_now_is_stale(center: FakeNotificationCenter, scheduler: NotificationScheduler) -> None:
    scheduler.schedule_or_cancel(_task_with_reminder(ReminderInterval.CUSTOM, NOW))
    assert center.adds == []


def test_no_reminder_only_cancels(center: FakeNotificationCenter, scheduler: NotificationScheduler) -> None:
    task = Task.create("Wash car", NOW)
    scheduler.schedule_or_cancel(task)
    assert center.removes == [{task.id}]
    assert center.adds == []


def test_empty_text_falls_back_to_default_phrase() -> None:
    task = _task_with_reminder(ReminderInterval.WEEK, NOW + timedelta(days=7))
    task.notification_text = ""
    req = build_request(task)
    assert req is not None
    assert req.body == "Time to do Clean filter again!"


def test_center_failures_are_swallowed(clock: FixedClock) -> None:
    class BrokenCenter(FakeNotificationCenter):
        def add(self, request) -> None:
            raise RuntimeError("permission revoked")

    center = BrokenCenter()
    scheduler = NotificationScheduler(center, clock)
    scheduler.schedule_or_cancel(_task_with_reminder(ReminderInterval.WEEK, NOW + timedelta(days=7)))
    assert center.pending() == []


def test_resync_schedules_future_and_skips_stale(
    center: FakeNotificationCenter, scheduler: NotificationScheduler
) -> None:
    future = _task_with_reminder(ReminderInterval.WEEK, NOW + timedelta(days=7))
    stale = _task_with_reminder(ReminderInterval.CUSTOM, NOW - timedelta(days=1))
    plain = Task.create("Wash car", NOW)

    assert scheduler.resync([future, stale, plain]) == 3
    assert [r.id for r in center.pending()] == [future.id]
