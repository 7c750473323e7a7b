"""Send/retry orchestration between the conversation store and the agent."""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any

from .activity import ProcessingSignal
from .agent import AgentClient, AgentContext, AgentResult
from .conversation_store import ConversationStore
from .extraction import extract_text, response_message, result_response
from .ids import IdGenerator
from .models import Conversation, Message, Role, now_millis
from .state import DispatchState, StateManager

LOGGER = logging.getLogger(__name__)

DEFAULT_AGENT_ID = "69942cebc194d78a6a0240a4"

EMPTY_RESPONSE_TEXT = "I received your message but had trouble generating a response."
FAILED_RESPONSE_TEXT = "Something went wrong. Please try again."
NETWORK_ERROR_TEXT = "A network error occurred. Please check your connection and try again."

ResponseAccessor = Callable[[Any], str]


class MessageDispatcher:
    """Single-flight sender: one agent call in progress at a time, globally.

    ``send`` appends the user's message before the agent call and exactly one
    assistant message after it. The target conversation is captured when the
    send starts; if it is deleted while the call is in flight, the reply is
    dropped by the store.
    """

    def __init__(
        self,
        store: ConversationStore,
        agent: AgentClient,
        user_id: str,
        agent_id: str = DEFAULT_AGENT_ID,
        activity: ProcessingSignal | None = None,
        id_generator: IdGenerator | None = None,
        response_accessor: ResponseAccessor = result_response,
        on_clear_input: Callable[[], None] | None = None,
        clock: Callable[[], int] = now_millis,
    ) -> None:
        self.store = store
        self.agent = agent
        self.user_id = user_id
        self.agent_id = agent_id
        self.activity = activity
        self.ids = id_generator or store.ids
        self.response_accessor = response_accessor
        self.on_clear_input = on_clear_input
        self._clock = clock
        self._state = StateManager()
        self._pending_retry: str | None = None

    @property
    def state(self) -> DispatchState:
        return self._state.state

    @property
    def is_sending(self) -> bool:
        return self._state.state == DispatchState.SENDING

    @property
    def pending_retry(self) -> str | None:
        """Text of the last failed send, if it has not been retried yet."""
        return self._pending_retry

    def _message(self, role: Role, content: str, error: bool = False) -> Message:
        return Message(
            id=self.ids.generate(),
            role=role,
            content=content,
            timestamp=self._clock(),
            error=error,
        )

    def _set_processing(self, processing: bool) -> None:
        if self.activity is None:
            return
        try:
            self.activity.set_processing(processing)
        except Exception:  # noqa: BLE001 - telemetry never blocks a send.
            LOGGER.exception("dispatch.telemetry_failed", extra={"event": "dispatch.telemetry_failed"})

    def _response_text(self, result: AgentResult) -> str:
        """Pick reply text: generic extractor, schema accessor, message field, literal."""
        for source in (extract_text, self.response_accessor, response_message):
            try:
                text = source(result.response)
            except Exception:  # noqa: BLE001 - accessors are collaborator-defined.
                LOGGER.debug(
                    "dispatch.accessor_failed",
                    exc_info=True,
                    extra={"event": "dispatch.accessor_failed"},
                )
                continue
            if isinstance(text, str) and text:
                return text
        return EMPTY_RESPONSE_TEXT

    async def send(self, text: str, conversation: Conversation | None = None) -> None:
        """Send ``text`` to the agent within ``conversation`` (or the active one).

        Blank text and calls made while another send is in flight are ignored.
        """
        trimmed = text.strip()
        if not trimmed:
            return
        if not await self._state.transition_if(DispatchState.IDLE, DispatchState.SENDING):
            LOGGER.debug("dispatch.dropped", extra={"event": "dispatch.dropped"})
            return

        outcome = DispatchState.FAILED
        try:
            self._pending_retry = None
            target = conversation or self.store.active_conversation
            if target is None:
                target = self.store.create_conversation()
            conversation_id = target.id
            session_id = target.session_id

            self.store.append_message(conversation_id, self._message("user", trimmed))
            if self.on_clear_input is not None:
                self.on_clear_input()
            self._set_processing(True)

            LOGGER.info(
                "dispatch.started",
                extra={
                    "event": "dispatch.started",
                    "conversation_id": conversation_id,
                    "session_id": session_id,
                },
            )
            try:
                result = await self.agent.call(
                    trimmed,
                    self.agent_id,
                    AgentContext(user_id=self.user_id, session_id=session_id),
                )
            except Exception as exc:  # noqa: BLE001 - every transport failure becomes a bubble.
                LOGGER.warning(
                    "dispatch.transport_failed",
                    extra={
                        "event": "dispatch.transport_failed",
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                    },
                )
                reply = self._message("assistant", NETWORK_ERROR_TEXT, error=True)
                self._pending_retry = trimmed
            else:
                if result.success:
                    reply = self._message("assistant", self._response_text(result))
                    outcome = DispatchState.DELIVERED
                else:
                    LOGGER.warning(
                        "dispatch.agent_failed",
                        extra={"event": "dispatch.agent_failed", "session_id": session_id},
                    )
                    reply = self._message("assistant", FAILED_RESPONSE_TEXT, error=True)
                    self._pending_retry = trimmed

            self.store.append_message(conversation_id, reply)
        finally:
            await self._state.transition_to(outcome)
            self._set_processing(False)
            await self._state.transition_to(DispatchState.IDLE)

    async def retry(self) -> None:
        """Re-send the text of the last failed send as a new user message."""
        if self._pending_retry is None:
            return
        await self.send(self._pending_retry)
