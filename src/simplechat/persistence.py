"""Best-effort persistence of the user identity and conversation collection."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .ids import IdGenerator
from .models import Conversation, ConversationCollection
from .storage import KeyValueStore

LOGGER = logging.getLogger(__name__)

CONVERSATIONS_KEY = "simplechat_conversations"
USER_ID_KEY = "simplechat_user_id"

_CONVERSATION_LIST = TypeAdapter(list[Conversation])


class PersistenceStore:
    """Load and save client state through a key-value backing store.

    Every operation is best-effort: load failures of any kind read as "first
    run" (``None``) and save failures are logged and dropped. Nothing here is
    retried or queued.
    """

    def __init__(
        self,
        backend: KeyValueStore | None,
        conversations_key: str = CONVERSATIONS_KEY,
        user_id_key: str = USER_ID_KEY,
    ) -> None:
        self.backend = backend
        self.conversations_key = conversations_key
        self.user_id_key = user_id_key

    def _get(self, key: str) -> str | None:
        if self.backend is None:
            return None
        try:
            value = self.backend.get(key)
        except Exception as exc:  # noqa: BLE001 - backend failures are never fatal.
            LOGGER.warning(
                "persistence.load_failed",
                extra={"event": "persistence.load_failed", "key": key, "reason": str(exc)},
            )
            return None
        return value if isinstance(value, str) else None

    def _set(self, key: str, value: str) -> bool:
        if self.backend is None:
            return False
        try:
            self.backend.set(key, value)
        except Exception as exc:  # noqa: BLE001 - backend failures are never fatal.
            LOGGER.warning(
                "persistence.save_failed",
                extra={"event": "persistence.save_failed", "key": key, "reason": str(exc)},
            )
            return False
        return True

    def load_identity(self) -> str | None:
        """Return the stored user id, or ``None`` when absent or blank."""
        value = self._get(self.user_id_key)
        if value is None or not value.strip():
            return None
        return value

    def save_identity(self, identity: str) -> None:
        self._set(self.user_id_key, identity)

    def load_or_create_identity(self, id_generator: IdGenerator) -> str:
        """Return the stored user id, minting and saving a new one on first run."""
        identity = self.load_identity()
        if identity is not None:
            return identity
        identity = id_generator.generate()
        self.save_identity(identity)
        LOGGER.info("persistence.identity_created", extra={"event": "persistence.identity_created"})
        return identity

    def load_conversations(self) -> ConversationCollection | None:
        """Return the stored collection with its head active, or ``None``.

        ``None`` covers a missing value, invalid JSON, a non-array payload, an
        empty array, any record failing validation, and repeated conversation ids.
        """
        raw = self._get(self.conversations_key)
        if raw is None:
            return None
        try:
            payload: Any = json.loads(raw)
        except ValueError:
            LOGGER.warning(
                "persistence.malformed",
                extra={"event": "persistence.malformed", "reason": "invalid JSON"},
            )
            return None
        if not isinstance(payload, list) or not payload:
            return None
        try:
            conversations = _CONVERSATION_LIST.validate_python(payload)
        except ValidationError as exc:
            LOGGER.warning(
                "persistence.malformed",
                extra={"event": "persistence.malformed", "reason": str(exc)},
            )
            return None
        if len({conversation.id for conversation in conversations}) != len(conversations):
            LOGGER.warning(
                "persistence.malformed",
                extra={"event": "persistence.malformed", "reason": "duplicate conversation id"},
            )
            return None
        return ConversationCollection(
            conversations=tuple(conversations),
            active_id=conversations[0].id,
        )

    def save_conversations(self, collection: ConversationCollection) -> None:
        """Write the whole collection as one JSON array of records."""
        records = [conversation.to_record() for conversation in collection.conversations]
        self._set(self.conversations_key, json.dumps(records, ensure_ascii=False))
