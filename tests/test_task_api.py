# tests/test_task_api.py

from __future__ import annotations

from collections.abc import Iterable
from datetime import timedelta

import pytest

from last_done.core.state import AppState
from last_done.reminders.editing import EditState
from last_done.tasks.task_api import (
    add_task,
    delete_task,
    list_tasks,
    open_editor,
    resolve_ref,
    resync_notifications,
)
from last_done.tasks.task_models import ReminderInterval

from .conftest import NOW
from .fakes import FakeNotificationCenter, MemoryBlobStore


def test_add_task_uses_now_and_persists(state: AppState, blob: MemoryBlobStore) -> None:
    task = add_task(state, "  Clean filter ")

    assert task.name == "Clean filter"
    assert task.date == NOW
    assert task.reminder_interval == ReminderInterval.NONE
    assert task.notification_date is None
    assert state.store.tasks[0] is task
    assert blob.saves == 1


def test_add_task_rejects_empty_name(state: AppState, blob: MemoryBlobStore) -> None:
    with pytest.raises(ValueError):
        add_task(state, "")
    assert blob.saves == 0


def test_delete_cancels_once_before_removal(state: AppState, blob: MemoryBlobStore) -> None:
    task = add_task(state, "Clean filter")
    session = open_editor(state, task.id)
    assert session is not None
    session.change_interval(ReminderInterval.WEEK)
    session.commit()
    state.session = None

    seen_in_store: list[bool] = []

    class Probe(FakeNotificationCenter):
        def remove_all(self, ids: Iterable[str]) -> None:
            seen_in_store.append(state.store.get(task.id) is not None)
            super().remove_all(ids)

    probe = Probe()
    state.scheduler._center = probe  # type: ignore[attr-defined]

    assert delete_task(state, task.id) is True

    assert probe.removes == [{task.id}]
    assert seen_in_store == [True]
    assert state.store.get(task.id) is None
    assert blob.saves == 3


def test_delete_closes_an_open_session_for_that_task(state: AppState, center: FakeNotificationCenter) -> None:
    task = add_task(state, "Clean filter")
    first = open_editor(state, task.id)
    assert first is not None
    first.change_interval(ReminderInterval.WEEK)
    first.commit()

    session = open_editor(state, task.id)
    assert session is not None
    center.calls.clear()

    delete_task(state, task.id)

    assert center.removes == [{task.id}]
    assert center.adds == []
    assert state.session is None
    assert session.state == EditState.IDLE
    assert center.pending() == []


def test_delete_unknown_task(state: AppState) -> None:
    assert delete_task(state, "missing") is False


def test_list_remembers_selection_order(state: AppState) -> None:
    add_task(state, "Clean filter", date=NOW - timedelta(days=5))
    add_task(state, "Wash car", date=NOW - timedelta(days=1))

    tasks = list_tasks(state)

    assert [t.name for t in tasks] == ["Wash car", "Clean filter"]
    assert resolve_ref(state, "2") == tasks[1].id
    assert resolve_ref(state, "3") is None
    assert resolve_ref(state, "0") is None
    assert resolve_ref(state, "") is None


def test_open_editor_for_missing_task_returns_none(state: AppState) -> None:
    assert open_editor(state, "stale-id") is None
    assert state.session is None


def test_open_editor_replaces_previous_session(state: AppState) -> None:
    a = add_task(state, "Clean filter")
    b = add_task(state, "Wash car")
    first = open_editor(state, a.id)
    second = open_editor(state, b.id)

    assert first is not None and first.state == EditState.IDLE
    assert state.session is second


def test_resync_restores_pending_requests(state: AppState, center: FakeNotificationCenter) -> None:
    task = add_task(state, "Clean filter")
    task.reminder_interval = ReminderInterval.WEEK
    task.notification_date = NOW + timedelta(days=7)

    assert resync_notifications(state) == 1
    assert [r.id for r in center.pending()] == [task.id]
