"""Best-effort extraction of reply text from structured agent responses."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

# Keys probed, in order, when a response is a mapping.
TEXT_KEYS: tuple[str, ...] = (
    "text",
    "response",
    "message",
    "content",
    "answer",
    "output",
    "result",
)

_MAX_DEPTH = 6


def _normalize(value: Any) -> Any:
    # Pydantic-style response objects (e.g. ollama.ChatResponse) become dicts.
    if hasattr(value, "model_dump"):
        try:
            return value.model_dump()
        except Exception:  # noqa: BLE001 - fall back to the raw object.
            return value
    return value


def _extract(value: Any, depth: int) -> str:
    if depth > _MAX_DEPTH or value is None:
        return ""
    value = _normalize(value)
    if isinstance(value, str):
        return value if value.strip() else ""
    if isinstance(value, Mapping):
        for key in TEXT_KEYS:
            if key in value:
                text = _extract(value[key], depth + 1)
                if text:
                    return text
        return ""
    if isinstance(value, (list, tuple)):
        parts = [_extract(item, depth + 1) for item in value]
        return "\n".join(part for part in parts if part)
    return ""


def extract_text(value: Any) -> str:
    """Return the first usable text found in ``value``, or ``""``.

    Strings are returned as-is, mappings are probed through ``TEXT_KEYS``
    recursively, and sequences have their extracted items joined by
    newlines. Never raises.
    """
    return _extract(value, 0)


def result_response(response: Any) -> str:
    """Read ``response["result"]["response"]``, the chat agent's reply field."""
    response = _normalize(response)
    if not isinstance(response, Mapping):
        return ""
    result = _normalize(response.get("result"))
    if not isinstance(result, Mapping):
        return ""
    text = result.get("response")
    return text if isinstance(text, str) else ""


def response_message(response: Any) -> str:
    """Read a top-level ``message`` string from a response, if any."""
    response = _normalize(response)
    if not isinstance(response, Mapping):
        return ""
    text = response.get("message")
    return text if isinstance(text, str) else ""
