"""SimpleChat: multi-conversation terminal client for a remote conversational agent."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .agent import AgentContext, AgentResult, HttpAgentClient, OllamaAgentClient
    from .app import SimpleChatApp
    from .config import ensure_config_dir, load_config
    from .conversation_store import ConversationStore
    from .dispatcher import MessageDispatcher
    from .exceptions import (
        AgentCallError,
        AgentTransportError,
        ConfigValidationError,
        PersistenceError,
        SimpleChatError,
    )
    from .ids import IdGenerator, generate_id
    from .models import Conversation, ConversationCollection, Message
    from .persistence import PersistenceStore
    from .rendering import render, split_inline

# Exported name -> defining submodule.
_EXPORTS: dict[str, str] = {
    "AgentCallError": "exceptions",
    "AgentContext": "agent",
    "AgentResult": "agent",
    "AgentTransportError": "exceptions",
    "ConfigValidationError": "exceptions",
    "Conversation": "models",
    "ConversationCollection": "models",
    "ConversationStore": "conversation_store",
    "HttpAgentClient": "agent",
    "IdGenerator": "ids",
    "Message": "models",
    "MessageDispatcher": "dispatcher",
    "OllamaAgentClient": "agent",
    "PersistenceError": "exceptions",
    "PersistenceStore": "persistence",
    "SimpleChatApp": "app",
    "SimpleChatError": "exceptions",
    "ensure_config_dir": "config",
    "generate_id": "ids",
    "load_config": "config",
    "render": "rendering",
    "split_inline": "rendering",
}

__all__ = sorted(_EXPORTS)


def __getattr__(name: str) -> Any:
    """Lazily import symbols so the UI stack loads only when it is used."""
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    return getattr(import_module(f".{module_name}", __name__), name)
