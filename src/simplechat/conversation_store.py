"""In-memory conversation collection with an active-conversation pointer.

Every mutation builds a new immutable :class:`ConversationCollection` and
swaps it in as a whole, so a reader holding ``snapshot()`` always sees a
self-consistent state. After each swap subscribers are notified and the full
collection is handed to the persistence layer.
"""

from __future__ import annotations

from collections.abc import Callable
import logging

from .events import EventBus
from .ids import IdGenerator
from .models import (
    DEFAULT_TITLE,
    Conversation,
    ConversationCollection,
    Message,
    now_millis,
)
from .persistence import PersistenceStore

LOGGER = logging.getLogger(__name__)

Subscriber = Callable[[ConversationCollection], None]


class ConversationStore:
    """Own the conversation collection and every mutation applied to it."""

    def __init__(
        self,
        persistence: PersistenceStore | None = None,
        id_generator: IdGenerator | None = None,
        event_bus: EventBus | None = None,
        clock: Callable[[], int] = now_millis,
    ) -> None:
        self.persistence = persistence
        self.ids = id_generator or IdGenerator()
        self.events = event_bus or EventBus()
        self._clock = clock
        self._collection = ConversationCollection()
        self._subscribers: list[Subscriber] = []

    # -- reads ---------------------------------------------------------------

    def snapshot(self) -> ConversationCollection:
        """Return the current immutable collection."""
        return self._collection

    @property
    def conversations(self) -> tuple[Conversation, ...]:
        return self._collection.conversations

    @property
    def active_id(self) -> str | None:
        return self._collection.active_id

    @property
    def active_conversation(self) -> Conversation | None:
        return self._collection.active

    def get(self, conversation_id: str) -> Conversation | None:
        return self._collection.get(conversation_id)

    # -- subscriptions ---------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> None:
        """Call ``callback`` with the new snapshot after every mutation."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        try:
            self._subscribers.remove(callback)
        except ValueError:
            pass

    def _commit(self, collection: ConversationCollection, *, persist: bool = True) -> None:
        self._collection = collection
        for callback in list(self._subscribers):
            try:
                callback(collection)
            except Exception:  # noqa: BLE001 - a broken reader must not undo a mutation.
                LOGGER.exception(
                    "store.subscriber_failed", extra={"event": "store.subscriber_failed"}
                )
        if persist and self.persistence is not None:
            self.persistence.save_conversations(collection)

    # -- mutations -------------------------------------------------------------

    def load(self, collection: ConversationCollection | None) -> None:
        """Hydrate from persisted state without writing it straight back."""
        if collection is None:
            return
        active_id = collection.active_id
        if collection.get(active_id) is None:
            active_id = collection.conversations[0].id if collection.conversations else None
        self._commit(
            ConversationCollection(conversations=collection.conversations, active_id=active_id),
            persist=False,
        )

    def create_conversation(self) -> Conversation:
        """Insert a fresh conversation at the head and make it active."""
        now = self._clock()
        conversation = Conversation(
            id=self.ids.generate(),
            title=DEFAULT_TITLE,
            session_id=self.ids.generate(),
            messages=(),
            created_at=now,
            updated_at=now,
        )
        self._commit(
            ConversationCollection(
                conversations=(conversation, *self._collection.conversations),
                active_id=conversation.id,
            )
        )
        LOGGER.debug(
            "store.created",
            extra={"event": "store.created", "conversation_id": conversation.id},
        )
        self.events.publish("conversation.created", {"conversation_id": conversation.id})
        return conversation

    def select_conversation(self, conversation_id: str) -> None:
        """Point ``active_id`` at ``conversation_id``; unknown ids are ignored."""
        if self._collection.get(conversation_id) is None:
            return
        if self._collection.active_id == conversation_id:
            return
        self._commit(self._collection.model_copy(update={"active_id": conversation_id}))
        self.events.publish("conversation.selected", {"conversation_id": conversation_id})

    def delete_conversation(self, conversation_id: str) -> None:
        """Remove a conversation, re-pointing ``active_id`` to the head if needed."""
        deleted = self._collection.get(conversation_id)
        if deleted is None:
            return
        remaining = tuple(
            conversation
            for conversation in self._collection.conversations
            if conversation.id != conversation_id
        )
        active_id = self._collection.active_id
        if active_id == conversation_id:
            active_id = remaining[0].id if remaining else None
        self._commit(ConversationCollection(conversations=remaining, active_id=active_id))
        LOGGER.debug(
            "store.deleted",
            extra={"event": "store.deleted", "conversation_id": conversation_id},
        )
        self.events.publish(
            "conversation.deleted",
            {
                "conversation_id": conversation_id,
                "session_id": deleted.session_id,
            },
        )

    def append_message(self, conversation_id: str, message: Message) -> None:
        """Append ``message`` to a conversation; a no-op if it no longer exists."""
        target = self._collection.get(conversation_id)
        if target is None:
            LOGGER.info(
                "store.append_dropped",
                extra={"event": "store.append_dropped", "conversation_id": conversation_id},
            )
            return
        updated = target.with_message(message, self._clock())
        self._commit(
            self._collection.model_copy(
                update={
                    "conversations": tuple(
                        updated if conversation.id == conversation_id else conversation
                        for conversation in self._collection.conversations
                    )
                }
            )
        )
        self.events.publish(
            "message.appended",
            {"conversation_id": conversation_id, "message_id": message.id},
        )
