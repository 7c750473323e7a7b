"""Event bus for decoupled component communication.

Usage:
    bus = EventBus()

    def on_created(event):
        print(f"Conversation created: {event.data['conversation_id']}")

    bus.subscribe("conversation.created", on_created)
    bus.publish("conversation.created", {"conversation_id": "abc"})
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
import inspect
import logging
from typing import Any

LOGGER = logging.getLogger(__name__)

Handler = Callable[["Event"], Any]


@dataclass(frozen=True)
class Event:
    """Event data container."""

    name: str
    data: dict[str, Any]
    source: str | None = None


class EventBus:
    """Simple event bus for publish/subscribe pattern.

    ``publish`` is synchronous so state mutations can announce themselves
    without suspending. Coroutine handlers are scheduled on the running loop;
    with no loop running they are closed and skipped.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Handler]] = {}
        self._pending: set[asyncio.Future[Any]] = set()

    def subscribe(self, event_name: str, handler: Handler) -> None:
        """Subscribe to an event.

        Args:
            event_name: Event to listen for (e.g., "conversation.created")
            handler: Function or coroutine function called with the Event
        """
        self._subscribers.setdefault(event_name, []).append(handler)
        LOGGER.debug("Subscribed to event: %s", event_name)

    def unsubscribe(self, event_name: str, handler: Handler) -> None:
        """Unsubscribe from an event; unknown handlers are ignored."""
        if event_name in self._subscribers:
            try:
                self._subscribers[event_name].remove(handler)
            except ValueError:
                pass

    def publish(
        self, event_name: str, data: dict[str, Any], source: str | None = None
    ) -> Event:
        """Publish an event to all subscribers and return it.

        Handler failures are logged and never reach the publisher.
        """
        event = Event(name=event_name, data=data, source=source)
        for handler in list(self._subscribers.get(event_name, [])):
            try:
                result = handler(event)
            except Exception as exc:  # noqa: BLE001 - one bad subscriber must not break others.
                LOGGER.error("Event handler failed for %s: %s", event_name, exc)
                continue
            if inspect.isawaitable(result):
                self._schedule(event_name, result)
        return event

    def _schedule(self, event_name: str, awaitable: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            LOGGER.debug("No running loop for async handler of %s", event_name)
            return
        future = asyncio.ensure_future(awaitable, loop=loop)
        self._pending.add(future)
        future.add_done_callback(self._on_handler_done)

    def _on_handler_done(self, future: asyncio.Future[Any]) -> None:
        self._pending.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            LOGGER.error("Async event handler failed: %s", exc)

    async def drain(self) -> None:
        """Wait for scheduled coroutine handlers to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
