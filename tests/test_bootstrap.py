# tests/test_bootstrap.py

from __future__ import annotations

from datetime import timedelta
from types import SimpleNamespace

from last_done.cli.bootstrap import (
    create_initial_state,
    delivery_enabled,
    initialize_notifications,
    messenger_factory,
)
from last_done.connectors.console_connector import ConsoleMessenger
from last_done.reminders.scheduler import NotificationScheduler
from last_done.storage.blob_store import FileBlobStore, SQLiteBlobStore
from last_done.tasks.task_api import add_task, open_editor
from last_done.tasks.task_models import ReminderInterval

from .conftest import NOW
from .fakes import FixedClock


def test_restart_reloads_tasks_and_resyncs_reminders(settings: SimpleNamespace) -> None:
    clock = FixedClock(NOW)
    state = create_initial_state(settings=settings, clock=clock)
    assert isinstance(state.store._backend, FileBlobStore)  # type: ignore[attr-defined]
    assert initialize_notifications(state) is True

    task = add_task(state, "Clean filter")
    session = open_editor(state, task.id)
    assert session is not None
    session.change_interval(ReminderInterval.WEEK)
    session.commit()

    restarted = create_initial_state(settings=settings, clock=FixedClock(NOW + timedelta(days=1)))
    assert [t.name for t in restarted.store.tasks] == ["Clean filter"]
    assert restarted.center.pending() == []

    initialize_notifications(restarted)
    assert [r.id for r in restarted.center.pending()] == [task.id]


def test_denied_permission_skips_resync(settings: SimpleNamespace) -> None:
    settings.notifications_enabled = False
    state = create_initial_state(settings=settings, clock=FixedClock(NOW))
    assert initialize_notifications(state) is False
    assert messenger_factory(settings) is None


def test_sqlite_backend_is_selected(settings: SimpleNamespace) -> None:
    settings.storage_backend = "sqlite"
    state = create_initial_state(settings=settings, clock=FixedClock(NOW))
    assert isinstance(state.store._backend, SQLiteBlobStore)  # type: ignore[attr-defined]
    assert isinstance(state.scheduler, NotificationScheduler)


def test_console_is_the_default_transport(settings: SimpleNamespace) -> None:
    assert delivery_enabled(settings) is True
    assert messenger_factory(settings) is ConsoleMessenger
