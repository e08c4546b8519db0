# src/last_done/notifications/center.py

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from datetime import datetime

from ..core.ports import NotificationCenter
from ..tasks.task_models import NotificationRequest

logger = logging.getLogger(__name__)


class LocalNotificationCenter:
    """
    In-process notification service.

    Holds pending one-shot requests keyed by id. The delivery loop (running in
    a background thread) pops due requests via take_due().

    Permission:
    - granted only when a delivery transport is enabled
    - before permission is granted, add() silently drops requests
    """

    def __init__(self, *, delivery_enabled: bool = True) -> None:
        self._delivery_enabled = delivery_enabled
        self._authorized = False
        self._pending: dict[str, NotificationRequest] = {}
        self._lock = threading.Lock()

    @property
    def authorized(self) -> bool:
        return self._authorized

    def request_permission(self) -> bool:
        self._authorized = bool(self._delivery_enabled)
        return self._authorized

    def add(self, request: NotificationRequest) -> None:
        if not self._authorized:
            logger.debug("Notifications not authorized; dropping request id=%s", request.id)
            return
        with self._lock:
            self._pending[request.id] = request

    def remove_all(self, ids: Iterable[str]) -> None:
        with self._lock:
            for rid in ids:
                self._pending.pop(rid, None)

    def pending(self) -> list[NotificationRequest]:
        with self._lock:
            return sorted(self._pending.values(), key=lambda r: r.trigger.fire_at())

    def take_due(self, now: datetime) -> list[NotificationRequest]:
        """Remove and return every request whose trigger moment has been reached."""
        with self._lock:
            due = [r for r in self._pending.values() if r.trigger.fire_at() <= now]
            for r in due:
                del self._pending[r.id]
        due.sort(key=lambda r: r.trigger.fire_at())
        return due


class PermissionRequest:
    """
    One-time notification authorization step, run explicitly at startup.

    The result is only logged; a denial means reminders never fire this session.
    """

    def __init__(self, center: NotificationCenter) -> None:
        self._center = center
        self._granted: bool | None = None

    @property
    def granted(self) -> bool | None:
        return self._granted

    def request_once(self) -> bool:
        if self._granted is not None:
            return self._granted
        try:
            self._granted = bool(self._center.request_permission())
        except Exception:
            logger.exception("Error requesting notification permission")
            self._granted = False

        if self._granted:
            logger.info("Notification permission granted")
        else:
            logger.warning("Notification permission denied; reminders will not fire")
        return self._granted
