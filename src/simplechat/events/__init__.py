"""Publish/subscribe plumbing shared by the store and activity telemetry."""

from .bus import Event, EventBus

__all__ = ["EventBus", "Event"]
