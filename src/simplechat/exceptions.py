"""Domain exception hierarchy for the SimpleChat client."""

from __future__ import annotations


class SimpleChatError(RuntimeError):
    """Base class for all domain-level chat errors."""


class AgentCallError(SimpleChatError):
    """Raised when the remote agent cannot produce a result."""


class AgentTransportError(AgentCallError):
    """Raised when the agent endpoint cannot be reached."""


class PersistenceError(SimpleChatError):
    """Raised when the key-value backing store fails."""


class ConfigValidationError(SimpleChatError):
    """Raised when configuration cannot be validated safely."""
