"""Tests for the in-memory conversation collection."""

from __future__ import annotations

import itertools
import unittest

from simplechat.conversation_store import ConversationStore
from simplechat.models import ConversationCollection, Message
from simplechat.persistence import PersistenceStore
from simplechat.storage import MemoryKeyValueStore


def _message(message_id: str, role: str, content: str) -> Message:
    return Message(id=message_id, role=role, content=content, timestamp=0)  # type: ignore[arg-type]


class ConversationStoreTests(unittest.TestCase):
    """Validate create/select/delete/append semantics and invariants."""

    def setUp(self) -> None:
        ticks = itertools.count(1000, 10)
        self.persistence = PersistenceStore(MemoryKeyValueStore())
        self.store = ConversationStore(
            persistence=self.persistence, clock=lambda: next(ticks)
        )

    def test_create_inserts_at_head_and_activates(self) -> None:
        first = self.store.create_conversation()
        second = self.store.create_conversation()
        self.assertEqual([c.id for c in self.store.conversations], [second.id, first.id])
        self.assertEqual(self.store.active_id, second.id)
        self.assertEqual(second.title, "New Chat")
        self.assertEqual(second.messages, ())
        self.assertEqual(second.created_at, second.updated_at)
        self.assertNotEqual(second.id, second.session_id)

    def test_create_publishes_event(self) -> None:
        seen: list[str] = []
        self.store.events.subscribe(
            "conversation.created", lambda event: seen.append(event.data["conversation_id"])
        )
        conversation = self.store.create_conversation()
        self.assertEqual(seen, [conversation.id])

    def test_select_unknown_id_is_ignored(self) -> None:
        conversation = self.store.create_conversation()
        self.store.select_conversation("missing")
        self.assertEqual(self.store.active_id, conversation.id)

    def test_select_known_id(self) -> None:
        first = self.store.create_conversation()
        self.store.create_conversation()
        self.store.select_conversation(first.id)
        self.assertEqual(self.store.active_id, first.id)

    def test_delete_active_repoints_to_new_head(self) -> None:
        oldest = self.store.create_conversation()
        middle = self.store.create_conversation()
        newest = self.store.create_conversation()
        self.store.delete_conversation(newest.id)
        self.assertEqual(self.store.active_id, middle.id)
        self.store.select_conversation(oldest.id)
        self.store.delete_conversation(oldest.id)
        self.assertEqual(self.store.active_id, middle.id)

    def test_delete_last_conversation_clears_active(self) -> None:
        conversation = self.store.create_conversation()
        self.store.delete_conversation(conversation.id)
        self.assertIsNone(self.store.active_id)
        self.assertEqual(self.store.conversations, ())

    def test_delete_inactive_keeps_active(self) -> None:
        older = self.store.create_conversation()
        newer = self.store.create_conversation()
        self.store.delete_conversation(older.id)
        self.assertEqual(self.store.active_id, newer.id)

    def test_delete_publishes_session_id(self) -> None:
        seen: list[dict[str, object]] = []
        self.store.events.subscribe("conversation.deleted", lambda event: seen.append(event.data))
        conversation = self.store.create_conversation()
        self.store.delete_conversation(conversation.id)
        self.store.delete_conversation(conversation.id)
        self.assertEqual(
            seen,
            [{"conversation_id": conversation.id, "session_id": conversation.session_id}],
        )

    def test_delete_unknown_id_is_noop(self) -> None:
        conversation = self.store.create_conversation()
        before = self.store.snapshot()
        self.store.delete_conversation("missing")
        self.assertIs(self.store.snapshot(), before)
        self.assertEqual(self.store.active_id, conversation.id)

    def test_append_sets_title_once_and_bumps_updated_at(self) -> None:
        conversation = self.store.create_conversation()
        self.store.append_message(conversation.id, _message("m1", "user", "First question"))
        self.store.append_message(conversation.id, _message("m2", "assistant", "Answer"))
        self.store.append_message(conversation.id, _message("m3", "user", "Second question"))
        stored = self.store.get(conversation.id)
        assert stored is not None
        self.assertEqual(stored.title, "First question")
        self.assertEqual([m.id for m in stored.messages], ["m1", "m2", "m3"])
        self.assertGreater(stored.updated_at, conversation.updated_at)

    def test_title_is_truncated_to_forty_characters(self) -> None:
        conversation = self.store.create_conversation()
        self.store.append_message(conversation.id, _message("m1", "user", "y" * 60))
        stored = self.store.get(conversation.id)
        assert stored is not None
        self.assertEqual(stored.title, "y" * 40 + "...")

    def test_assistant_first_message_does_not_set_title(self) -> None:
        conversation = self.store.create_conversation()
        self.store.append_message(conversation.id, _message("m1", "assistant", "Hello"))
        stored = self.store.get(conversation.id)
        assert stored is not None
        self.assertEqual(stored.title, "New Chat")

    def test_append_to_deleted_conversation_is_noop(self) -> None:
        conversation = self.store.create_conversation()
        self.store.delete_conversation(conversation.id)
        self.store.append_message(conversation.id, _message("m1", "user", "late"))
        self.assertEqual(self.store.conversations, ())

    def test_mutations_replace_snapshot_and_notify(self) -> None:
        snapshots: list[ConversationCollection] = []
        self.store.subscribe(snapshots.append)
        before = self.store.snapshot()
        conversation = self.store.create_conversation()
        self.assertIsNot(self.store.snapshot(), before)
        self.assertEqual(before.conversations, ())
        self.store.append_message(conversation.id, _message("m1", "user", "hi"))
        self.assertEqual(len(snapshots), 2)
        self.assertEqual(snapshots[-1], self.store.snapshot())

    def test_failing_subscriber_does_not_block_mutation(self) -> None:
        def explode(_collection: ConversationCollection) -> None:
            raise RuntimeError("boom")

        self.store.subscribe(explode)
        with self.assertLogs("simplechat.conversation_store", level="ERROR"):
            conversation = self.store.create_conversation()
        self.assertEqual(self.store.active_id, conversation.id)

    def test_persisted_state_matches_memory(self) -> None:
        conversation = self.store.create_conversation()
        self.store.append_message(conversation.id, _message("m1", "user", "hi"))
        self.store.create_conversation()
        loaded = self.persistence.load_conversations()
        assert loaded is not None
        self.assertEqual(loaded.conversations, self.store.conversations)

    def test_load_hydrates_without_saving(self) -> None:
        backend = MemoryKeyValueStore()
        source = ConversationStore(persistence=PersistenceStore(backend))
        source.create_conversation()
        collection = PersistenceStore(backend).load_conversations()

        target_backend = MemoryKeyValueStore()
        target = ConversationStore(persistence=PersistenceStore(target_backend))
        target.load(collection)
        self.assertEqual(target.conversations, source.conversations)
        self.assertEqual(target.active_id, source.active_id)
        self.assertIsNone(target_backend.get("simplechat_conversations"))

    def test_load_absent_leaves_store_empty(self) -> None:
        self.store.load(None)
        self.assertEqual(self.store.conversations, ())
        self.assertIsNone(self.store.active_conversation)


if __name__ == "__main__":
    unittest.main()
