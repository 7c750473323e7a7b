"""Sidebar listing every conversation, newest first."""

from __future__ import annotations

from typing import Any

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.message import Message
from textual.widgets import Label, ListItem, ListView

from ..formatting import conversation_preview, format_time
from ..models import Conversation, ConversationCollection


def entry_text(conversation: Conversation, preview_length: int = 50) -> Text:
    """Title line with relative time, then a dim preview line."""
    text = Text()
    text.append(conversation.title, style="bold")
    text.append(f"  {format_time(conversation.updated_at)}", style="dim")
    text.append("\n")
    text.append(conversation_preview(conversation, preview_length), style="dim")
    return text


class ConversationEntry(ListItem):
    """One sidebar row bound to a conversation id."""

    def __init__(self, conversation: Conversation, preview_length: int = 50) -> None:
        super().__init__(Label(entry_text(conversation, preview_length)))
        self.conversation_id = conversation.id


class ConversationSidebar(Vertical):
    """Conversation list; selecting a row posts :class:`ConversationSidebar.Selected`."""

    DEFAULT_CSS = """
    ConversationSidebar {
        width: 36;
        dock: left;
        border-right: solid $panel;
    }
    ConversationSidebar > #sidebar_title {
        padding: 0 1;
        text-style: bold;
    }
    """

    class Selected(Message):
        """Posted when the user picks a conversation."""

        def __init__(self, conversation_id: str) -> None:
            super().__init__()
            self.conversation_id = conversation_id

    def __init__(self, preview_length: int = 50, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.preview_length = preview_length

    def compose(self) -> ComposeResult:
        yield Label("Conversations", id="sidebar_title")
        yield ListView(id="conversation_list")

    async def show(self, collection: ConversationCollection) -> None:
        """Rebuild the list from a collection snapshot and highlight the active row."""
        list_view = self.query_one("#conversation_list", ListView)
        await list_view.clear()
        await list_view.extend(
            ConversationEntry(conversation, self.preview_length)
            for conversation in collection.conversations
        )
        for index, conversation in enumerate(collection.conversations):
            if conversation.id == collection.active_id:
                list_view.index = index
                break

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        event.stop()
        item = event.item
        if isinstance(item, ConversationEntry):
            self.post_message(self.Selected(item.conversation_id))
