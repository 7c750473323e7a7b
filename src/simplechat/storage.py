"""Key-value backing stores for persisted client state.

A backing store maps string keys to string values. Values are opaque here;
``simplechat.persistence`` decides what they contain.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Protocol

from .exceptions import PersistenceError


class KeyValueStore(Protocol):
    """Minimal get/set interface over string values."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryKeyValueStore:
    """Process-local store, used for tests and when no file is configured."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonFileKeyValueStore:
    """Keep every key in a single private JSON object file.

    Reads go to disk each time so external edits are picked up; writes
    replace the file atomically. Any I/O or decoding problem surfaces as
    :class:`PersistenceError`.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def _enforce_permissions(self, path: Path, mode: int = 0o600) -> None:
        """Set POSIX permissions on a file or directory; silently ignores failures."""
        if os.name != "posix":
            return
        try:
            path.chmod(mode)
        except OSError:
            pass

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"Unable to read {self.path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise PersistenceError(f"{self.path} does not contain a JSON object.")
        return {key: value for key, value in payload.items() if isinstance(value, str)}

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        try:
            values = self._read_all()
        except PersistenceError:
            # An unreadable file is overwritten rather than blocking every save.
            values = {}
        values[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._enforce_permissions(self.path.parent, 0o700)
            tmp_path = self.path.with_suffix(f"{self.path.suffix}.tmp")
            tmp_path.write_text(
                json.dumps(values, ensure_ascii=False, sort_keys=True),
                encoding="utf-8",
            )
            self._enforce_permissions(tmp_path)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise PersistenceError(f"Unable to write {self.path}: {exc}") from exc
