# src/last_done/notifications/delivery.py

from __future__ import annotations

"""
Notification delivery loop.

A small polling loop that:
- takes due requests from the notification center,
- renders them as text,
- sends them via an injected messenger port.

A failed send is logged and dropped; missed reminders are never retried.
"""

import asyncio
import contextlib
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from ..core.ports import Clock, OutboundMessenger
from ..tasks.task_models import NotificationRequest
from .center import LocalNotificationCenter

logger = logging.getLogger(__name__)


def render_notification(request: NotificationRequest) -> str:
    return f"{request.title}\n{request.body}"


async def deliver_due(
    center: LocalNotificationCenter,
    messenger: OutboundMessenger,
    clock: Clock,
) -> int:
    """Deliver every request due right now. Returns the number sent."""
    sent = 0
    for request in center.take_due(clock.now()):
        try:
            await messenger.send_text(text=render_notification(request))
            sent += 1
            logger.info("Notification delivered id=%s", request.id)
        except Exception:
            logger.exception("Notification delivery failed id=%s", request.id)
    return sent


async def run_delivery_loop(
    center: LocalNotificationCenter,
    messenger: OutboundMessenger,
    clock: Clock,
    *,
    interval_seconds: float = 1.0,
    stop_event: asyncio.Event | None = None,
) -> None:
    """
    Poll the center every interval_seconds until stop_event is set.

    To stop the loop, set stop_event or cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))

    while stop_event is None or not stop_event.is_set():
        try:
            await deliver_due(center, messenger, clock)
        except Exception:
            logger.exception("Delivery pass failed")

        if stop_event is None:
            await asyncio.sleep(sleep_s)
        else:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=sleep_s)


@dataclass
class DeliveryBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except Exception:
            logger.debug("Failed to signal delivery stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_delivery_in_background(
    center: LocalNotificationCenter,
    messenger_factory: Callable[[], object],
    clock: Clock,
    *,
    interval_seconds: float = 1.0,
) -> DeliveryBackgroundRunner | None:
    """
    Start the delivery loop in a background thread with its own event loop.

    messenger_factory runs inside that loop and may be a coroutine function
    (e.g. Matrix login) returning the messenger, or None to give up.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    async def _main(stop_event: asyncio.Event) -> None:
        made = messenger_factory()
        messenger = await made if asyncio.iscoroutine(made) else made
        if messenger is None:
            logger.error("No notification messenger available; delivery loop not started.")
            return

        logger.info("Delivery loop started (messenger=%s).", type(messenger).__name__)
        try:
            await run_delivery_loop(
                center,
                messenger,  # type: ignore[arg-type]
                clock,
                interval_seconds=interval_seconds,
                stop_event=stop_event,
            )
        finally:
            close = getattr(messenger, "close", None)
            if close is not None:
                with contextlib.suppress(Exception):
                    await close()
            logger.info("Delivery loop stopped.")

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(_main(stop_event))
        except Exception:
            logger.exception("Delivery thread crashed.")
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="notification-delivery", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Delivery thread did not initialize properly.")
        return None

    logger.info("Delivery background thread started.")
    return DeliveryBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
