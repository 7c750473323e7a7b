"""Human-facing text helpers for the sidebar and message headers."""

from __future__ import annotations

from datetime import datetime

from .models import Conversation, truncate_text

CONVERSATION_STARTERS: tuple[str, ...] = (
    "Tell me something interesting",
    "Help me brainstorm ideas",
    "Explain a complex topic simply",
)

_DAY_MS = 1000 * 60 * 60 * 24


def clock_time(moment: datetime) -> str:
    """Format a time of day as e.g. ``3:45 PM``."""
    if moment.hour < 12:
        period = "AM"
        hour = moment.hour if moment.hour != 0 else 12
    else:
        period = "PM"
        hour = moment.hour if moment.hour <= 12 else moment.hour - 12
    return f"{hour}:{moment.minute:02d} {period}"


def format_time(timestamp_ms: int, now_ms: int | None = None) -> str:
    """Describe a millisecond timestamp relative to ``now_ms``.

    Same day: clock time. One day ago: ``Yesterday``. Under a week: short
    weekday. Otherwise: ``Mon D``.
    """
    moment = datetime.fromtimestamp(timestamp_ms / 1000)
    if now_ms is None:
        now_ms = int(datetime.now().timestamp() * 1000)
    diff_days = (now_ms - timestamp_ms) // _DAY_MS
    if diff_days <= 0:
        return clock_time(moment)
    if diff_days == 1:
        return "Yesterday"
    if diff_days < 7:
        return moment.strftime("%a")
    return f"{moment.strftime('%b')} {moment.day}"


def conversation_preview(conversation: Conversation, limit: int = 50) -> str:
    """Return the first message, shortened, or a placeholder for empty threads."""
    if not conversation.messages:
        return "New conversation"
    return truncate_text(conversation.messages[0].content, limit)
