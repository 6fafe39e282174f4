"""Key-value backends the highlight store persists through.

The store only needs get/set/delete by key.  ``MemoryBackend`` serves tests
and one-shot runs; ``JsonFileBackend`` keeps every key in one JSON object
on disk, which is what the CLI uses between invocations.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class KeyValueBackend(Protocol):
    """Protocol for the host's key-value storage.

    Values are JSON-compatible Python objects.  Any exception a backend
    raises is treated by the store as a transient failure.
    """

    async def get(self, key: str) -> Any | None:
        """Return the value stored under *key*, or None."""
        ...

    async def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*, replacing what was there."""
        ...

    async def delete(self, key: str) -> None:
        """Remove *key*; missing keys are not an error."""
        ...


class MemoryBackend:
    """In-process dictionary backend."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    async def get(self, key: str) -> Any | None:
        value = self._data.get(key)
        # Hand out copies, like a real serialising backend would
        return json.loads(json.dumps(value)) if value is not None else None

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = json.loads(json.dumps(value))

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileBackend:
    """All keys in one JSON object file; blocking I/O runs in a thread."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        raw = self.path.read_text(encoding="utf-8")
        if not raw.strip():
            return {}
        data = json.loads(raw)
        if not isinstance(data, dict):
            msg = f"{self.path} does not contain a JSON object"
            raise ValueError(msg)
        return data

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        payload = json.dumps(data, indent=2, ensure_ascii=False)
        tmp.write_text(payload, encoding="utf-8")
        tmp.replace(self.path)
        logger.debug("Wrote %d keys to %s", len(data), self.path)

    def _set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def _delete(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)

    async def get(self, key: str) -> Any | None:
        data = await asyncio.to_thread(self._read)
        return data.get(key)

    async def set(self, key: str, value: Any) -> None:
        await asyncio.to_thread(self._set, key, value)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)
