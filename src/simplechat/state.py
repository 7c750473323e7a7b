"""Dispatch state machine with lock-protected transitions."""

from __future__ import annotations

import asyncio
from enum import Enum
import logging

LOGGER = logging.getLogger(__name__)


class DispatchState(str, Enum):
    """Lifecycle of a single send: IDLE -> SENDING -> DELIVERED|FAILED -> IDLE."""

    IDLE = "IDLE"
    SENDING = "SENDING"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"


class StateManager:
    """Manage dispatch state transitions with async lock semantics."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._state = DispatchState.IDLE

    @property
    def state(self) -> DispatchState:
        """Return the current state without waiting for the lock."""
        return self._state

    async def transition_to(self, new_state: DispatchState) -> DispatchState:
        """Transition to a new state and return it."""
        async with self._lock:
            LOGGER.debug(
                "dispatch.state.transition",
                extra={
                    "event": "dispatch.state.transition",
                    "from_state": self._state.value,
                    "to_state": new_state.value,
                },
            )
            self._state = new_state
            return self._state

    async def transition_if(
        self,
        expected_state: DispatchState,
        new_state: DispatchState,
    ) -> bool:
        """Transition only when current state matches expected state."""
        async with self._lock:
            if self._state != expected_state:
                return False
            self._state = new_state
            return True
