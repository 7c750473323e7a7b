"""Main Textual application for chatting with the remote agent."""

from __future__ import annotations

import logging
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header

from .client import ChatClient, build_chat_client
from .config import load_config
from .events import Event
from .models import ConversationCollection
from .widgets import (
    ActivityBar,
    ConversationSidebar,
    ConversationView,
    InputBox,
    WelcomePanel,
)

LOGGER = logging.getLogger(__name__)


class SimpleChatApp(App[None]):
    """Sidebar of conversations, the active thread, and a composer."""

    CSS = """
    Screen {
        layout: horizontal;
    }
    #main_column {
        width: 1fr;
    }
    #conversation {
        height: 1fr;
    }
    .hidden {
        display: none;
    }
    """

    BINDINGS = [
        Binding("ctrl+n", "new_conversation", "New chat", priority=True),
        Binding("ctrl+d", "delete_conversation", "Delete chat", priority=True),
        Binding("ctrl+b", "toggle_sidebar", "Chats"),
        Binding("ctrl+r", "retry", "Retry", priority=True),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        client: ChatClient | None = None,
    ) -> None:
        super().__init__()
        self.config = config or load_config()
        self.client = client or build_chat_client(self.config)
        self.title = self.config["app"]["title"]
        self.client.dispatcher.on_clear_input = self._clear_input

    @property
    def store(self):
        return self.client.store

    def compose(self) -> ComposeResult:
        yield Header()
        yield ConversationSidebar(
            preview_length=self.config["ui"]["sidebar_preview_length"],
            id="sidebar",
            classes="hidden",
        )
        with Vertical(id="main_column"):
            yield WelcomePanel(
                self.config["app"]["title"],
                self.config["app"]["starters"],
                id="welcome",
            )
            yield ConversationView(
                show_timestamps=self.config["ui"]["show_timestamps"],
                id="conversation",
            )
            yield ActivityBar("ctrl+n new · ctrl+b chats · ctrl+r retry", id="activity")
            yield InputBox(id="composer")
        yield Footer()

    async def on_mount(self) -> None:
        self.store.subscribe(self._on_collection_changed)
        self.store.events.subscribe("conversation.created", self._on_conversation_created)
        self.client.activity.bus.subscribe("activity.processing", self._on_processing)
        await self._refresh_views(self.store.snapshot())

    async def on_unmount(self) -> None:
        self.store.unsubscribe(self._on_collection_changed)
        closer = getattr(self.client.agent, "aclose", None)
        if closer is not None:
            await closer()

    # -- store and telemetry callbacks ---------------------------------------------

    def _on_collection_changed(self, collection: ConversationCollection) -> None:
        self.run_worker(self._refresh_views(collection), group="refresh", exclusive=True)

    def _on_conversation_created(self, _event: Event) -> None:
        self.query_one("#sidebar", ConversationSidebar).add_class("hidden")

    def _on_processing(self, event: Event) -> None:
        processing = bool(event.data["event"].data.get("processing"))
        self.query_one("#activity", ActivityBar).set_processing(processing)

    async def _refresh_views(self, collection: ConversationCollection) -> None:
        active = collection.active
        self.client.activity.watch(active.session_id if active is not None else None)
        self.sub_title = active.title if active is not None else ""
        has_messages = active is not None and bool(active.messages)
        self.query_one("#welcome", WelcomePanel).set_class(has_messages, "hidden")
        await self.query_one("#conversation", ConversationView).show(active)
        await self.query_one("#sidebar", ConversationSidebar).show(collection)

    def _clear_input(self) -> None:
        self.query_one("#composer", InputBox).clear()

    # -- user input ------------------------------------------------------------------

    def _dispatch(self, text: str) -> None:
        self.run_worker(self.client.dispatcher.send(text), group="send")

    def on_input_box_submitted(self, event: InputBox.Submitted) -> None:
        self._dispatch(event.text)

    def on_welcome_panel_starter_chosen(self, event: WelcomePanel.StarterChosen) -> None:
        self._dispatch(event.text)

    def on_conversation_sidebar_selected(self, event: ConversationSidebar.Selected) -> None:
        self.store.select_conversation(event.conversation_id)

    def action_new_conversation(self) -> None:
        self.store.create_conversation()

    def action_delete_conversation(self) -> None:
        active_id = self.store.active_id
        if active_id is not None:
            self.store.delete_conversation(active_id)

    def action_toggle_sidebar(self) -> None:
        self.query_one("#sidebar", ConversationSidebar).toggle_class("hidden")

    def action_retry(self) -> None:
        if self.client.dispatcher.pending_retry is not None:
            self.run_worker(self.client.dispatcher.retry(), group="send")
