"""Opaque identifier generation for conversations, sessions, and messages."""

from __future__ import annotations

import itertools
import logging
import random
import string
import time
import uuid

LOGGER = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


class IdGenerator:
    """Mint identifiers that are unique with overwhelming probability."""

    def __init__(self) -> None:
        self._random = random.Random()
        self._counter = itertools.count()

    def generate(self) -> str:
        """Return a random UUID string, or a time-based id if UUIDs are unavailable."""
        try:
            return str(uuid.uuid4())
        except Exception:  # noqa: BLE001 - the entropy source must never fail the caller.
            LOGGER.debug("ids.uuid_unavailable", extra={"event": "ids.uuid_unavailable"})
            return self.fallback()

    def fallback(self) -> str:
        """Build ``<millis base36><random suffix>`` ids.

        A process-local counter is mixed into the suffix so two ids minted
        within the same millisecond never collide.
        """
        millis = int(time.time() * 1000)
        suffix = "".join(self._random.choice(_BASE36) for _ in range(8))
        return f"{_to_base36(millis)}{suffix}{_to_base36(next(self._counter))}"


_default_generator = IdGenerator()


def generate_id() -> str:
    """Generate an id with the process-wide default generator."""
    return _default_generator.generate()
