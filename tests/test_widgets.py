"""Unit tests for individual widget classes."""

from __future__ import annotations

import unittest

from simplechat.models import Conversation, Message

try:
    from rich.text import Text

    from simplechat.widgets.activity_bar import ActivityBar
    from simplechat.widgets.message import RETRY_HINT, MessageBubble, message_body
    from simplechat.widgets.sidebar import ConversationEntry, entry_text
    from simplechat.widgets.welcome import WelcomePanel
except ModuleNotFoundError:
    Text = None  # type: ignore[assignment,misc]
    ActivityBar = None  # type: ignore[assignment,misc]
    MessageBubble = None  # type: ignore[assignment,misc]
    ConversationEntry = None  # type: ignore[assignment,misc]
    WelcomePanel = None  # type: ignore[assignment,misc]


def _message(role: str, content: str, error: bool = False) -> Message:
    return Message(id="m1", role=role, content=content, timestamp=0, error=error)  # type: ignore[arg-type]


@unittest.skipIf(MessageBubble is None, "textual is not installed")
class MessageBubbleTests(unittest.TestCase):
    """Validate MessageBubble role handling and body rendering."""

    def test_user_body_is_verbatim(self) -> None:
        body = message_body(_message("user", "**not bold**"))
        self.assertEqual(body.plain, "**not bold**")

    def test_assistant_body_is_rendered(self) -> None:
        body = message_body(_message("assistant", "Use **care** with `rm`"))
        self.assertEqual(body.plain, "Use care with rm")

    def test_role_classes_and_prefix(self) -> None:
        user = MessageBubble(_message("user", "hi"))
        assistant = MessageBubble(_message("assistant", "hello"))
        self.assertIn("role-user", user.classes)
        self.assertEqual(user.role_prefix, "You")
        self.assertIn("role-assistant", assistant.classes)
        self.assertEqual(assistant.role_prefix, "Assistant")

    def test_error_bubble_is_marked(self) -> None:
        bubble = MessageBubble(_message("assistant", "oops", error=True))
        self.assertIn("error", bubble.classes)
        self.assertIn("retry", RETRY_HINT)

    def test_header_without_timestamp(self) -> None:
        bubble = MessageBubble(_message("user", "hi"), show_timestamp=False)
        self.assertEqual(bubble.header_text, "You")


@unittest.skipIf(ActivityBar is None, "textual is not installed")
class ActivityBarTests(unittest.TestCase):
    def test_status_text_follows_processing(self) -> None:
        bar = ActivityBar("hints")
        self.assertEqual(bar.status_text, "Chat Agent · Ready")
        bar.set_processing(True)
        self.assertTrue(bar.status_text.endswith("Chat Agent · Processing..."))
        bar.set_processing(False)
        self.assertEqual(bar.status_text, "Chat Agent · Ready")


@unittest.skipIf(ConversationEntry is None, "textual is not installed")
class SidebarTests(unittest.TestCase):
    def _conversation(self) -> Conversation:
        return Conversation(
            id="c1",
            title="Trip plans",
            session_id="s1",
            messages=(_message("user", "Where should I go in spring?"),),
            created_at=0,
            updated_at=0,
        )

    def test_entry_text_has_title_and_preview(self) -> None:
        text = entry_text(self._conversation(), preview_length=10)
        lines = text.plain.splitlines()
        self.assertTrue(lines[0].startswith("Trip plans"))
        self.assertEqual(lines[1], "Where shou...")

    def test_entry_keeps_conversation_id(self) -> None:
        self.assertEqual(ConversationEntry(self._conversation()).conversation_id, "c1")


@unittest.skipIf(WelcomePanel is None, "textual is not installed")
class WelcomePanelTests(unittest.TestCase):
    def test_starters_are_kept_in_order(self) -> None:
        panel = WelcomePanel("SimpleChat", ["a", "b"])
        self.assertEqual(panel.starters, ("a", "b"))
        self.assertEqual(panel.app_title, "SimpleChat")


if __name__ == "__main__":
    unittest.main()
