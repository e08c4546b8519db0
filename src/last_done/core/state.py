# src/last_done/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field

from ..notifications.center import LocalNotificationCenter, PermissionRequest
from ..reminders.editing import EditSession
from ..reminders.scheduler import NotificationScheduler
from ..tasks.task_store import TaskStore
from .ports import Clock


@dataclass
class AppState:
    # Settings are kept on the state for easy access in command handlers.
    settings: object

    store: TaskStore
    center: LocalNotificationCenter
    scheduler: NotificationScheduler
    permission: PermissionRequest
    clock: Clock

    # UI selection: task ids in the order of the last /list output.
    listing: list[str] = field(default_factory=list)
    session: EditSession | None = None
