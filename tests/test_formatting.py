"""Tests for timestamp and preview formatting."""

from __future__ import annotations

from datetime import datetime, timedelta
import unittest

from simplechat.formatting import (
    CONVERSATION_STARTERS,
    clock_time,
    conversation_preview,
    format_time,
)
from simplechat.models import Conversation, Message


def _millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


class FormatTimeTests(unittest.TestCase):
    """Validate relative timestamp descriptions."""

    def setUp(self) -> None:
        self.now = datetime(2024, 1, 20, 12, 0)

    def test_clock_time(self) -> None:
        self.assertEqual(clock_time(datetime(2024, 1, 1, 0, 5)), "12:05 AM")
        self.assertEqual(clock_time(datetime(2024, 1, 1, 9, 30)), "9:30 AM")
        self.assertEqual(clock_time(datetime(2024, 1, 1, 12, 0)), "12:00 PM")
        self.assertEqual(clock_time(datetime(2024, 1, 1, 23, 59)), "11:59 PM")

    def test_same_day_uses_clock_time(self) -> None:
        moment = self.now - timedelta(hours=2)
        self.assertEqual(format_time(_millis(moment), _millis(self.now)), "10:00 AM")

    def test_yesterday(self) -> None:
        moment = self.now - timedelta(days=1, hours=1)
        self.assertEqual(format_time(_millis(moment), _millis(self.now)), "Yesterday")

    def test_within_week_uses_weekday(self) -> None:
        moment = self.now - timedelta(days=3)
        self.assertEqual(
            format_time(_millis(moment), _millis(self.now)), moment.strftime("%a")
        )

    def test_older_uses_month_and_day(self) -> None:
        moment = self.now - timedelta(days=14)
        self.assertEqual(
            format_time(_millis(moment), _millis(self.now)), f"{moment.strftime('%b')} 6"
        )


class PreviewTests(unittest.TestCase):
    def _conversation(self, *contents: str) -> Conversation:
        return Conversation(
            id="c",
            session_id="s",
            messages=tuple(
                Message(id=f"m{i}", role="user", content=content, timestamp=0)
                for i, content in enumerate(contents)
            ),
            created_at=0,
            updated_at=0,
        )

    def test_empty_conversation_placeholder(self) -> None:
        self.assertEqual(conversation_preview(self._conversation()), "New conversation")

    def test_first_message_is_truncated(self) -> None:
        preview = conversation_preview(self._conversation("x" * 60, "second"), limit=50)
        self.assertEqual(preview, "x" * 50 + "...")

    def test_starters(self) -> None:
        self.assertEqual(len(CONVERSATION_STARTERS), 3)
        self.assertIn("Tell me something interesting", CONVERSATION_STARTERS)


if __name__ == "__main__":
    unittest.main()
