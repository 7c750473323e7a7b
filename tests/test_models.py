"""Tests for conversation and message records."""

from __future__ import annotations

import unittest

from pydantic import ValidationError

from simplechat.models import Conversation, Message, truncate_text


def _conversation(**overrides) -> Conversation:
    data = {
        "id": "c1",
        "title": "New Chat",
        "sessionId": "s1",
        "messages": [],
        "createdAt": 1000,
        "updatedAt": 1000,
    }
    data.update(overrides)
    return Conversation.model_validate(data)


class ModelTests(unittest.TestCase):
    """Validate record shapes and append semantics."""

    def test_truncate_text_adds_ellipsis_past_limit(self) -> None:
        self.assertEqual(truncate_text("short", 40), "short")
        self.assertEqual(truncate_text("x" * 45, 40), "x" * 40 + "...")

    def test_record_uses_persisted_field_names(self) -> None:
        record = _conversation().to_record()
        self.assertEqual(
            set(record), {"id", "title", "sessionId", "messages", "createdAt", "updatedAt"}
        )
        self.assertEqual(record["messages"], [])

    def test_message_is_immutable(self) -> None:
        message = Message(id="m", role="user", content="hi", timestamp=1)
        with self.assertRaises(ValidationError):
            message.content = "changed"  # type: ignore[misc]

    def test_message_error_defaults_false(self) -> None:
        message = Message.model_validate(
            {"id": "m", "role": "assistant", "content": "x", "timestamp": 1}
        )
        self.assertFalse(message.error)

    def test_unknown_role_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            Message(id="m", role="system", content="x", timestamp=1)  # type: ignore[arg-type]

    def test_with_message_sets_title_from_first_user_message(self) -> None:
        first = Message(id="m1", role="user", content="Hello there", timestamp=2)
        second = Message(id="m2", role="user", content="Another", timestamp=3)
        updated = _conversation().with_message(first, 2000).with_message(second, 3000)
        self.assertEqual(updated.title, "Hello there")
        self.assertEqual(updated.updated_at, 3000)
        self.assertEqual([m.id for m in updated.messages], ["m1", "m2"])

    def test_updated_at_never_goes_backwards(self) -> None:
        message = Message(id="m1", role="assistant", content="x", timestamp=1)
        updated = _conversation(updatedAt=5000).with_message(message, 4000)
        self.assertEqual(updated.updated_at, 5000)


if __name__ == "__main__":
    unittest.main()
