# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from last_done.core.state import AppState
from last_done.notifications.center import PermissionRequest
from last_done.reminders.scheduler import NotificationScheduler
from last_done.tasks.task_store import TaskStore

from .fakes import FakeNotificationCenter, FixedClock, MemoryBlobStore

NOW = datetime(2026, 3, 1, 9, 30, 0)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="last-done",
        log_level="INFO",
        data_dir=tmp_path,
        storage_backend="file",
        tasks_db_path=tmp_path / "tasks.sqlite3",
        tasks_json_path=tmp_path / "tasks.json",
        console_enabled=True,
        notifications_enabled=True,
        delivery_poll_seconds=0.01,
        matrix_enabled=False,
        matrix_homeserver="",
        matrix_user_id="",
        matrix_password="",
        matrix_room_id="",
        matrix_store_path=tmp_path / "matrix_store",
    )


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture()
def center() -> FakeNotificationCenter:
    return FakeNotificationCenter()


@pytest.fixture()
def blob() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture()
def store(blob: MemoryBlobStore) -> TaskStore:
    return TaskStore(blob)


@pytest.fixture()
def scheduler(center: FakeNotificationCenter, clock: FixedClock) -> NotificationScheduler:
    return NotificationScheduler(center, clock)


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    store: TaskStore,
    center: FakeNotificationCenter,
    scheduler: NotificationScheduler,
    clock: FixedClock,
) -> AppState:
    """AppState wired with an in-memory blob store, a recording center and a fixed clock."""
    permission = PermissionRequest(center)
    permission.request_once()
    return AppState(
        settings=settings,
        store=store,
        center=center,
        scheduler=scheduler,
        permission=permission,
        clock=clock,
    )
