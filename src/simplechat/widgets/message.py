"""Message bubble widget for conversation rendering."""

from __future__ import annotations

from typing import Any

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from ..formatting import format_time
from ..models import Message
from ..rendering import render, to_rich

RETRY_HINT = "Failed to send. Press ctrl+r to retry."


def message_body(message: Message) -> Text:
    """Build the renderable body: verbatim for users, markdown subset for the agent."""
    if message.role == "user":
        return Text(message.content)
    return to_rich(render(message.content))


class MessageBubble(Vertical):
    """Render a single chat message with role, optional timestamp, and retry hint."""

    DEFAULT_CSS = """
    MessageBubble {
        height: auto;
        margin: 0 0 1 0;
        padding: 0 1;
    }
    MessageBubble.role-user {
        border-right: thick $accent;
    }
    MessageBubble.role-assistant {
        border-left: thick $secondary;
    }
    MessageBubble.error {
        border-left: thick $error;
    }
    MessageBubble > .bubble-header {
        color: $text-muted;
    }
    MessageBubble > .retry-hint {
        color: $error;
    }
    """

    def __init__(self, message: Message, show_timestamp: bool = True, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.message = message
        self.show_timestamp = show_timestamp
        self.add_class(f"role-{message.role}")
        if message.error:
            self.add_class("error")

    @property
    def role_prefix(self) -> str:
        """Return a human-friendly role label."""
        return "You" if self.message.role == "user" else "Assistant"

    @property
    def header_text(self) -> str:
        if self.show_timestamp:
            return f"{self.role_prefix}  {format_time(self.message.timestamp)}"
        return self.role_prefix

    def compose(self) -> ComposeResult:
        yield Static(Text(self.header_text, style="bold"), classes="bubble-header")
        yield Static(message_body(self.message), classes="bubble-body")
        if self.message.error:
            yield Static(RETRY_HINT, classes="retry-hint")
