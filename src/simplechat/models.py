"""Conversation and message records shared by the store, dispatcher, and UI."""

from __future__ import annotations

import time
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TITLE = "New Chat"
TITLE_MAX_LENGTH = 40

Role = Literal["user", "assistant"]


def now_millis() -> int:
    """Return the current wall-clock time in integer milliseconds."""
    return int(time.time() * 1000)


def truncate_text(text: str, limit: int) -> str:
    """Cut ``text`` to ``limit`` characters, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class Message(BaseModel):
    """A single chat message; immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str
    role: Role
    content: str
    timestamp: int
    error: bool = False


class Conversation(BaseModel):
    """One independent thread of messages with its own agent session id.

    Serialised field names (``sessionId``, ``createdAt``, ``updatedAt``) match
    the persisted record format; Python code uses the snake_case attributes.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str = DEFAULT_TITLE
    session_id: str = Field(alias="sessionId")
    messages: tuple[Message, ...] = ()
    created_at: int = Field(alias="createdAt")
    updated_at: int = Field(alias="updatedAt")

    @property
    def has_user_message(self) -> bool:
        return any(message.role == "user" for message in self.messages)

    def with_message(self, message: Message, now: int) -> Conversation:
        """Return a copy with ``message`` appended and metadata bumped."""
        changes: dict[str, object] = {
            "messages": (*self.messages, message),
            "updated_at": max(self.updated_at, now),
        }
        if message.role == "user" and not self.has_user_message:
            changes["title"] = truncate_text(message.content, TITLE_MAX_LENGTH)
        return self.model_copy(update=changes)

    def to_record(self) -> dict[str, object]:
        """Serialise into the persisted JSON record shape."""
        return self.model_dump(by_alias=True, mode="json")


class ConversationCollection(BaseModel):
    """Newest-first conversations plus the active-conversation pointer."""

    model_config = ConfigDict(frozen=True)

    conversations: tuple[Conversation, ...] = ()
    active_id: str | None = None

    def get(self, conversation_id: str | None) -> Conversation | None:
        if conversation_id is None:
            return None
        for conversation in self.conversations:
            if conversation.id == conversation_id:
                return conversation
        return None

    @property
    def active(self) -> Conversation | None:
        return self.get(self.active_id)
