"""Composer row with the message field and send button."""

from __future__ import annotations

from textual.containers import Horizontal
from textual.message import Message
from textual.widgets import Button, Input


class InputBox(Horizontal):
    """Message field plus a send button that submits the same way Enter does."""

    DEFAULT_CSS = """
    InputBox {
        height: auto;
        dock: bottom;
    }
    InputBox > Input {
        width: 1fr;
    }
    """

    class Submitted(Message):
        """Posted with the composer text when the user sends."""

        def __init__(self, text: str) -> None:
            super().__init__()
            self.text = text

    def compose(self):  # type: ignore[override]
        yield Input(placeholder="Type your message...", id="message_input")
        yield Button("Send", id="send_button", variant="success")

    @property
    def value(self) -> str:
        return self.query_one("#message_input", Input).value

    def clear(self) -> None:
        self.query_one("#message_input", Input).value = ""

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.post_message(self.Submitted(event.value))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send_button":
            event.stop()
            self.post_message(self.Submitted(self.value))
