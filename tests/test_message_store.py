"""Tests for bounded per-session history."""

from __future__ import annotations

import unittest

from simplechat.message_store import MessageStore


class MessageStoreTests(unittest.TestCase):
    """Validate history bounds and context trimming."""

    def test_max_history_messages_is_enforced(self) -> None:
        store = MessageStore(system_prompt="system", max_history_messages=4)
        for index in range(6):
            store.append("user" if index % 2 == 0 else "assistant", f"m{index}")
        messages = store.messages
        self.assertEqual(len(messages), 4)
        self.assertEqual(messages[0], {"role": "system", "content": "system"})
        self.assertEqual(messages[1]["content"], "m3")

    def test_context_trim_preserves_system_message(self) -> None:
        store = MessageStore(system_prompt="system", max_context_tokens=20)
        for _ in range(3):
            store.append("user", "alpha beta gamma delta epsilon")
        context = store.build_api_context()
        self.assertEqual(context[0]["role"], "system")
        self.assertLess(len(context), 4)
        self.assertEqual(context[-1]["role"], "user")
        self.assertTrue(all("_token_estimate" not in turn for turn in context))

    def test_rollback_only_removes_user_turn(self) -> None:
        store = MessageStore()
        store.append("user", "question")
        store.append("assistant", "answer")
        store.rollback_last_user_append()
        self.assertEqual(len(store.messages), 2)
        store.append("user", "again")
        store.rollback_last_user_append()
        self.assertEqual([m["content"] for m in store.messages], ["question", "answer"])

    def test_blank_role_is_ignored(self) -> None:
        store = MessageStore()
        store.append("  ", "text")
        self.assertEqual(store.messages, [])


if __name__ == "__main__":
    unittest.main()
