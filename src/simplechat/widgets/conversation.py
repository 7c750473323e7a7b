"""Scrollable conversation view widget."""

from __future__ import annotations

from textual.containers import VerticalScroll

from ..models import Conversation
from .message import MessageBubble


class ConversationView(VerticalScroll):
    """A scrollable container that hosts message bubbles."""

    def __init__(self, show_timestamps: bool = True, **kwargs) -> None:
        super().__init__(**kwargs)
        self.show_timestamps = show_timestamps
        self.message_ids: tuple[str, ...] = ()

    async def show(self, conversation: Conversation | None) -> None:
        """Display ``conversation``, mounting only messages not yet shown."""
        messages = conversation.messages if conversation is not None else ()
        ids = tuple(message.id for message in messages)
        if ids[: len(self.message_ids)] != self.message_ids:
            self.message_ids = ()
            await self.remove_children()
        fresh = messages[len(self.message_ids) :]
        # Set before mounting; a cancelled refresh must not mount these again.
        self.message_ids = ids
        if fresh:
            await self.mount_all(
                MessageBubble(message, show_timestamp=self.show_timestamps)
                for message in fresh
            )
            self.scroll_end(animate=False)
