"""Welcome panel shown while the active conversation has no messages."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.message import Message
from textual.widgets import Button, Label, Static


class WelcomePanel(Vertical):
    """Greeting plus one button per conversation starter."""

    DEFAULT_CSS = """
    WelcomePanel {
        height: auto;
        align: center middle;
        padding: 1 2;
    }
    WelcomePanel > Button {
        width: 100%;
        margin: 0 0 1 0;
    }
    """

    class StarterChosen(Message):
        """Posted with the starter text when a starter button is pressed."""

        def __init__(self, text: str) -> None:
            super().__init__()
            self.text = text

    def __init__(self, title: str, starters: Sequence[str], **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.app_title = title
        self.starters = tuple(starters)

    def compose(self) -> ComposeResult:
        yield Label(f"Welcome to {self.app_title}", id="welcome_title")
        yield Static(
            "Start a conversation with the AI assistant. Ask questions, "
            "brainstorm ideas, or explore any topic."
        )
        yield Label("Try a conversation starter")
        for index, starter in enumerate(self.starters):
            yield Button(starter, id=f"starter_{index}")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id or ""
        if not button_id.startswith("starter_"):
            return
        event.stop()
        self.post_message(self.StarterChosen(self.starters[int(button_id.removeprefix("starter_"))]))
