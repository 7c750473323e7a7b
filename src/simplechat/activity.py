"""Agent activity telemetry scoped to the session currently being watched."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
import logging
from typing import Any, Protocol

from .events import EventBus
from .models import now_millis

LOGGER = logging.getLogger(__name__)


class ProcessingSignal(Protocol):
    """The one telemetry hook the dispatcher needs."""

    def set_processing(self, processing: bool) -> None: ...


@dataclass(frozen=True)
class ActivityEvent:
    """One telemetry record; ``kind`` is e.g. ``processing`` or ``connection``."""

    kind: str
    session_id: str | None
    timestamp: int
    data: dict[str, Any] = field(default_factory=dict)


class AgentActivity:
    """Track connection status, a processing flag, and recent activity events.

    Events are kept in a bounded buffer per watched session and re-published
    on the event bus as ``activity.<kind>`` so widgets can follow along.
    """

    def __init__(self, event_bus: EventBus | None = None, max_events: int = 200) -> None:
        self.bus = event_bus or EventBus()
        self._events: deque[ActivityEvent] = deque(maxlen=max(1, max_events))
        self._session_id: str | None = None
        self._connected = False
        self._processing = False

    @property
    def session_id(self) -> str | None:
        return self._session_id

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def processing(self) -> bool:
        return self._processing

    @property
    def events(self) -> tuple[ActivityEvent, ...]:
        """Return the recorded events, oldest first."""
        return tuple(self._events)

    def watch(self, session_id: str | None) -> None:
        """Follow a different session; its event history starts empty."""
        if session_id == self._session_id:
            return
        self._session_id = session_id
        self._events.clear()
        self.set_connected(session_id is not None)

    def set_connected(self, connected: bool) -> None:
        if connected == self._connected:
            return
        self._connected = connected
        self.record("connection", {"connected": connected})

    def set_processing(self, processing: bool) -> None:
        """Raise or clear the "agent is processing" flag."""
        self._processing = processing
        self.record("processing", {"processing": processing})

    def record(self, kind: str, data: dict[str, Any] | None = None) -> ActivityEvent:
        event = ActivityEvent(
            kind=kind,
            session_id=self._session_id,
            timestamp=now_millis(),
            data=dict(data or {}),
        )
        self._events.append(event)
        self.bus.publish(f"activity.{kind}", {"event": event}, source="activity")
        return event
