"""Agent-call collaborators: one call per prompt, correlated by session id."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging
from typing import Any, Protocol

import httpx
from ollama import AsyncClient as OllamaAsyncClient
from ollama import ResponseError

from .exceptions import AgentTransportError
from .message_store import MessageStore
from .models import Message

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AgentContext:
    """Identifiers sent alongside every prompt."""

    user_id: str
    session_id: str


@dataclass(frozen=True)
class AgentResult:
    """Outcome of an agent call that reached the agent.

    ``response`` is the agent's structured payload, passed through untouched.
    """

    success: bool
    response: Any | None = None


class AgentClient(Protocol):
    """Anything that can deliver a prompt to an agent.

    Implementations raise on transport failure and return an unsuccessful
    :class:`AgentResult` when the agent answers with an error.
    """

    async def call(
        self, prompt: str, agent_id: str, context: AgentContext
    ) -> AgentResult: ...


class HttpAgentClient:
    """Post prompts to a hosted agent endpoint over HTTP."""

    def __init__(
        self,
        endpoint: str,
        api_key: str = "",
        timeout: float = 120.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["x-api-key"] = self.api_key
        return headers

    async def call(self, prompt: str, agent_id: str, context: AgentContext) -> AgentResult:
        payload = {
            "message": prompt,
            "agent_id": agent_id,
            "user_id": context.user_id,
            "session_id": context.session_id,
        }
        try:
            response = await self._client.post(
                self.endpoint, json=payload, headers=self._headers()
            )
        except httpx.HTTPError as exc:
            raise AgentTransportError(f"Unable to reach agent at {self.endpoint}: {exc}") from exc

        try:
            body: Any = response.json()
        except ValueError:
            body = response.text

        if not response.is_success:
            LOGGER.warning(
                "agent.http.rejected",
                extra={"event": "agent.http.rejected", "status_code": response.status_code},
            )
            return AgentResult(success=False, response=body)

        # Endpoints that wrap their payload as {"success": ..., "response": ...}.
        if isinstance(body, dict) and "success" in body and "response" in body:
            return AgentResult(success=bool(body["success"]), response=body["response"])
        return AgentResult(success=True, response=body)

    async def aclose(self) -> None:
        await self._client.aclose()


class OllamaAgentClient:
    """Answer prompts with a local Ollama model, one history per session id.

    The agent id is only logged; the configured model answers every call.
    Replies are shaped as ``{"result": {"response": text}}``.
    """

    def __init__(
        self,
        host: str,
        model: str,
        system_prompt: str = "",
        timeout: int = 120,
        max_history_messages: int = 200,
        max_context_tokens: int = 4096,
        client: Any | None = None,
    ) -> None:
        self.host = host
        self.model = model
        self.system_prompt = system_prompt
        self.max_history_messages = max_history_messages
        self.max_context_tokens = max_context_tokens
        self._client = client or OllamaAsyncClient(host=host, timeout=timeout)
        self._sessions: dict[str, MessageStore] = {}

    def _new_history(self) -> MessageStore:
        return MessageStore(
            system_prompt=self.system_prompt,
            max_history_messages=self.max_history_messages,
            max_context_tokens=self.max_context_tokens,
        )

    @property
    def session_ids(self) -> tuple[str, ...]:
        return tuple(self._sessions)

    def session_history(self, session_id: str) -> MessageStore:
        """Return the history for ``session_id``, creating it on first use."""
        store = self._sessions.get(session_id)
        if store is None:
            store = self._new_history()
            self._sessions[session_id] = store
        return store

    def restore_session(self, session_id: str, messages: Iterable[Message]) -> None:
        """Replace the history of ``session_id`` with a stored thread.

        An error reply marks a failed exchange: it is skipped along with the
        user turn it answered, as happens when the call fails live.
        """
        history = self._new_history()
        for message in messages:
            if message.error:
                history.rollback_last_user_append()
                continue
            history.append(message.role, message.content)
        # A thread saved mid-call ends on an unanswered prompt.
        history.rollback_last_user_append()
        self._sessions[session_id] = history

    def forget_session(self, session_id: str) -> None:
        """Release the history kept for ``session_id``; unknown ids are ignored."""
        self._sessions.pop(session_id, None)

    @staticmethod
    def _reply_text(response: Any) -> str:
        message = getattr(response, "message", None)
        if message is not None and not isinstance(response, dict):
            return str(getattr(message, "content", "") or "")
        if isinstance(response, dict):
            inner = response.get("message")
            if isinstance(inner, dict):
                return str(inner.get("content", "") or "")
        return ""

    async def call(self, prompt: str, agent_id: str, context: AgentContext) -> AgentResult:
        history = self.session_history(context.session_id)
        history.append("user", prompt)
        LOGGER.debug(
            "agent.ollama.request",
            extra={
                "event": "agent.ollama.request",
                "agent_id": agent_id,
                "model": self.model,
                "session_id": context.session_id,
            },
        )
        try:
            response = await self._client.chat(
                model=self.model, messages=history.build_api_context(), stream=False
            )
        except ResponseError as exc:
            history.rollback_last_user_append()
            return AgentResult(success=False, response={"message": str(exc)})
        except (httpx.HTTPError, ConnectionError) as exc:
            history.rollback_last_user_append()
            raise AgentTransportError(f"Unable to connect to Ollama host {self.host}.") from exc

        text = self._reply_text(response)
        history.append("assistant", text)
        return AgentResult(success=True, response={"result": {"response": text}})
