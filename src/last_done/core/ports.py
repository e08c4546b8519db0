# src/last_done/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The reminder engine depends on Protocols instead of concrete implementations.
This keeps storage, the notification service and delivery transports swappable
and makes testing easier.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Awaitable, Protocol

from ..tasks.task_models import NotificationRequest


class Clock(Protocol):
    """Source of "now" in naive local wall-clock time."""
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now().replace(microsecond=0)


class BlobStore(Protocol):
    """
    Persistence port: one opaque blob holding the whole task collection.

    load() returns None when nothing was saved yet.
    """

    def load(self) -> bytes | None: ...
    def save(self, data: bytes) -> None: ...


class NotificationCenter(Protocol):
    """
    Notification delivery service.

    add/remove_all are fire-and-forget: callers never observe completion.
    """

    def request_permission(self) -> bool: ...
    def add(self, request: NotificationRequest) -> None: ...
    def remove_all(self, ids: Iterable[str]) -> None: ...


class OutboundMessenger(Protocol):
    """
    Connector-side port: where the delivery loop shows a fired notification.

    The console connector prints it, the Matrix connector posts it to a room.
    """

    def send_text(self, *, text: str) -> Awaitable[None]: ...
