"""Bounded per-session message history for locally hosted agents."""

from __future__ import annotations

from typing import Any

# Public message type (no internal fields).
ChatTurn = dict[str, Any]


class MessageStore:
    """Manage one session's history with bounds and context trimming."""

    def __init__(
        self,
        system_prompt: str = "",
        max_history_messages: int = 200,
        max_context_tokens: int = 4096,
    ) -> None:
        self.max_history_messages = max(1, max_history_messages)
        self.max_context_tokens = max(1, max_context_tokens)
        self._system: list[ChatTurn] = []
        if system_prompt.strip():
            self._system.append(self._turn("system", system_prompt.strip()))
        self._turns: list[ChatTurn] = []

    @staticmethod
    def _turn(role: str, content: str) -> ChatTurn:
        return {
            "role": role,
            "content": content,
            "_token_estimate": MessageStore.estimate_tokens(role, content),
        }

    @staticmethod
    def estimate_tokens(role: str, content: str) -> int:
        """Estimate token cost for a single message from role/content."""
        role_cost = 2 if role else 0
        return role_cost + len(content) // 4 + len(content.split()) + 2

    @property
    def messages(self) -> list[ChatTurn]:
        """Return system and conversation turns without internal keys."""
        return [
            {k: v for k, v in turn.items() if not k.startswith("_")}
            for turn in self._system + self._turns
        ]

    def append(self, role: str, content: str) -> None:
        """Append a turn and drop the oldest ones beyond the history bound."""
        normalized_role = role.strip().lower()
        if not normalized_role:
            return
        self._turns.append(self._turn(normalized_role, content.strip()))
        overflow = len(self._turns) - max(0, self.max_history_messages - len(self._system))
        if overflow > 0:
            del self._turns[:overflow]

    def rollback_last_user_append(self) -> None:
        """Remove the last turn if it is a user turn.

        Used when a call fails so the next send does not produce two
        consecutive user turns.
        """
        if self._turns and self._turns[-1].get("role") == "user":
            self._turns.pop()

    def build_api_context(self) -> list[ChatTurn]:
        """Return system turns plus the newest turns that fit the token budget.

        The newest turn is kept even when it alone exceeds the budget, so the
        model always sees the prompt it is answering.
        """
        budget = self.max_context_tokens - sum(t["_token_estimate"] for t in self._system)
        kept: list[ChatTurn] = []
        for turn in reversed(self._turns):
            cost = turn["_token_estimate"]
            if kept and cost > budget:
                break
            budget -= cost
            kept.append(turn)
        kept.reverse()
        return [
            {"role": turn["role"], "content": turn["content"]}
            for turn in self._system + kept
        ]
