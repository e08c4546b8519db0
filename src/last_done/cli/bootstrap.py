# src/last_done/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires storage, the notification center and the scheduler into AppState,
- runs the explicit one-time notification setup (permission + resync).
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..config import get_settings
from ..connectors.console_connector import ConsoleMessenger
from ..core.ports import BlobStore, Clock, SystemClock
from ..core.state import AppState
from ..notifications.center import LocalNotificationCenter, PermissionRequest
from ..reminders.scheduler import NotificationScheduler
from ..storage.blob_store import FileBlobStore, SQLiteBlobStore
from ..tasks.task_api import resync_notifications
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.tasks_json_path.parent.mkdir(parents=True, exist_ok=True)


def create_blob_store(settings) -> BlobStore:
    if getattr(settings, "storage_backend", "sqlite") == "file":
        return FileBlobStore(settings.tasks_json_path)
    return SQLiteBlobStore(settings.tasks_db_path)


def delivery_enabled(settings) -> bool:
    return bool(settings.notifications_enabled) and bool(
        settings.console_enabled or settings.matrix_enabled
    )


def create_initial_state(*, settings=None, clock: Clock | None = None) -> AppState:
    """
    Create AppState from the provided settings and load saved tasks.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()
    if clock is None:
        clock = SystemClock()

    _ensure_local_dirs(settings)

    store = TaskStore(create_blob_store(settings))
    store.load()

    center = LocalNotificationCenter(delivery_enabled=delivery_enabled(settings))

    return AppState(
        settings=settings,
        store=store,
        center=center,
        scheduler=NotificationScheduler(center, clock),
        permission=PermissionRequest(center),
        clock=clock,
    )


def initialize_notifications(state: AppState) -> bool:
    """Ask for notification permission once, then re-submit saved reminders."""
    granted = state.permission.request_once()
    if granted:
        resync_notifications(state)
    return granted


def messenger_factory(settings) -> Callable[[], object] | None:
    """Pick the delivery transport: Matrix when enabled, else the console."""
    if not delivery_enabled(settings):
        return None

    if settings.matrix_enabled:
        from ..connectors.matrix_connector import create_matrix_messenger

        return lambda: create_matrix_messenger(settings)

    return ConsoleMessenger
