# tests/fakes.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from last_done.core.ports import OutboundMessenger
from last_done.notifications.center import LocalNotificationCenter
from last_done.tasks.task_models import NotificationRequest


@dataclass(slots=True)
class FixedClock:
    """Deterministic clock; tests move time with advance()."""

    current: datetime

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current = self.current + timedelta(**kwargs)


class MemoryBlobStore:
    """In-memory BlobStore that counts saves."""

    def __init__(self, data: bytes | None = None) -> None:
        self.data = data
        self.saves = 0

    def load(self) -> bytes | None:
        return self.data

    def save(self, data: bytes) -> None:
        self.data = data
        self.saves += 1


class FakeNotificationCenter(LocalNotificationCenter):
    """
    Real in-process center that also records every add/remove_all call.

    Permission is granted up front so tests exercise scheduling, not authorization.
    """

    def __init__(self) -> None:
        super().__init__(delivery_enabled=True)
        self.request_permission()
        self.calls: list[tuple[str, object]] = []

    @property
    def adds(self) -> list[NotificationRequest]:
        return [c[1] for c in self.calls if c[0] == "add"]  # type: ignore[misc]

    @property
    def removes(self) -> list[set[str]]:
        return [c[1] for c in self.calls if c[0] == "remove"]  # type: ignore[misc]

    def add(self, request: NotificationRequest) -> None:
        self.calls.append(("add", request))
        super().add(request)

    def remove_all(self, ids: Iterable[str]) -> None:
        ids = set(ids)
        self.calls.append(("remove", ids))
        super().remove_all(ids)


@dataclass(slots=True)
class FakeMessenger(OutboundMessenger):
    """
    Fake OutboundMessenger used by delivery tests.
    """

    sent: list[str] = field(default_factory=list)
    fail_on: str | None = None

    async def send_text(self, *, text: str) -> None:
        if self.fail_on is not None and self.fail_on in text:
            raise RuntimeError("transport down")
        self.sent.append(text)
