"""Explicit construction of the chat services from configuration."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from .activity import AgentActivity
from .agent import AgentClient, HttpAgentClient, OllamaAgentClient
from .conversation_store import ConversationStore
from .dispatcher import MessageDispatcher
from .events import Event, EventBus
from .ids import IdGenerator
from .persistence import PersistenceStore
from .storage import JsonFileKeyValueStore, KeyValueStore, MemoryKeyValueStore

LOGGER = logging.getLogger(__name__)


@dataclass
class ChatClient:
    """The process-wide store, dispatcher, and their collaborators."""

    user_id: str
    store: ConversationStore
    dispatcher: MessageDispatcher
    activity: AgentActivity
    persistence: PersistenceStore
    agent: AgentClient


def build_agent(agent_config: dict[str, Any]) -> AgentClient:
    """Create the agent collaborator selected by ``agent.backend``."""
    if agent_config["backend"] == "ollama":
        return OllamaAgentClient(
            host=agent_config["ollama_host"],
            model=agent_config["ollama_model"],
            system_prompt=agent_config["system_prompt"],
            timeout=agent_config["timeout"],
            max_history_messages=agent_config["max_history_messages"],
            max_context_tokens=agent_config["max_context_tokens"],
        )
    return HttpAgentClient(
        endpoint=agent_config["endpoint"],
        api_key=agent_config["api_key"],
        timeout=float(agent_config["timeout"]),
    )


def bind_local_sessions(agent: OllamaAgentClient, store: ConversationStore) -> None:
    """Keep a local agent's per-session histories in step with the store.

    Restored conversations seed their histories; deleted ones release them.
    """
    for conversation in store.conversations:
        agent.restore_session(conversation.session_id, conversation.messages)

    def _forget(event: Event) -> None:
        agent.forget_session(event.data["session_id"])

    store.events.subscribe("conversation.deleted", _forget)


def build_backend(storage_config: dict[str, Any]) -> KeyValueStore:
    if not storage_config["enabled"]:
        return MemoryKeyValueStore()
    return JsonFileKeyValueStore(storage_config["path"])


def build_chat_client(
    config: dict[str, Any],
    agent: AgentClient | None = None,
    backend: KeyValueStore | None = None,
) -> ChatClient:
    """Wire persistence, store, telemetry, and dispatcher; restore saved state."""
    storage_config = config["storage"]
    ids = IdGenerator()
    persistence = PersistenceStore(
        backend if backend is not None else build_backend(storage_config),
        conversations_key=storage_config["conversations_key"],
        user_id_key=storage_config["user_id_key"],
    )
    user_id = persistence.load_or_create_identity(ids)

    bus = EventBus()
    store = ConversationStore(persistence=persistence, id_generator=ids, event_bus=bus)
    store.load(persistence.load_conversations())

    activity = AgentActivity(event_bus=bus)
    agent = agent if agent is not None else build_agent(config["agent"])
    if isinstance(agent, OllamaAgentClient):
        bind_local_sessions(agent, store)
    dispatcher = MessageDispatcher(
        store=store,
        agent=agent,
        user_id=user_id,
        agent_id=config["agent"]["agent_id"],
        activity=activity,
        id_generator=ids,
    )
    LOGGER.info(
        "client.ready",
        extra={
            "event": "client.ready",
            "conversations": len(store.conversations),
            "backend": config["agent"]["backend"],
        },
    )
    return ChatClient(
        user_id=user_id,
        store=store,
        dispatcher=dispatcher,
        activity=activity,
        persistence=persistence,
        agent=agent,
    )
