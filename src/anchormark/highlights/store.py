"""Persistence façade for highlight records.

Every record lives in one JSON array under a single backend key; each call
loads the whole array, changes it, and writes it back.  Per-page counts are
in the tens, so there is no indexing.  Writers on one store take a lock so
concurrent saves never overwrite each other.

Backend calls are bounded by ``store.timeout_seconds`` and retried at most
``store.retries`` times before surfacing as ``StorageError``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, TypeVar

from anchormark.config import StoreConfig, get_settings
from anchormark.errors import StorageError
from anchormark.highlights.models import Highlight, from_record, to_record

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from anchormark.highlights.backends import KeyValueBackend

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HighlightStore:
    """Reads and writes ``Highlight`` records through a key-value backend."""

    def __init__(
        self, backend: KeyValueBackend, config: StoreConfig | None = None
    ) -> None:
        self.backend = backend
        self.config = config or get_settings().store
        # Serialises read-modify-write cycles on the shared array
        self._write_lock = asyncio.Lock()

    async def _call(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        attempts = self.config.retries + 1
        last_error: BaseException | None = None
        for attempt in range(1, attempts + 1):
            try:
                return await asyncio.wait_for(
                    call(), timeout=self.config.timeout_seconds
                )
            except TimeoutError as exc:
                last_error = exc
                logger.warning(
                    "Storage %s timed out after %.1fs (attempt %d/%d)",
                    operation,
                    self.config.timeout_seconds,
                    attempt,
                    attempts,
                )
            except Exception as exc:
                # Any backend failure is retried
                last_error = exc
                logger.warning(
                    "Storage %s failed (attempt %d/%d): %s",
                    operation,
                    attempt,
                    attempts,
                    exc,
                )
        msg = f"Storage backend failed after {attempts} attempt(s): {last_error}"
        raise StorageError(msg, operation) from last_error

    async def _load(self) -> list[dict[str, Any]]:
        raw = await self._call("get", lambda: self.backend.get(self.config.key))
        if raw is None:
            return []
        if not isinstance(raw, list):
            msg = f"Expected a JSON array under {self.config.key!r}"
            raise StorageError(msg, "get")
        return [r for r in raw if isinstance(r, dict)]

    async def _dump(self, records: list[dict[str, Any]]) -> None:
        await self._call("set", lambda: self.backend.set(self.config.key, records))

    @staticmethod
    def _parse(records: list[dict[str, Any]]) -> list[Highlight]:
        highlights = []
        for record in records:
            try:
                highlights.append(from_record(record))
            except ValueError as exc:
                logger.warning(
                    "Skipping malformed highlight record %s: %s", record.get("id"), exc
                )
        return highlights

    async def list(self, url: str) -> list[Highlight]:
        """All highlights stored for *url*, in creation order."""
        records = await self._load()
        return self._parse([r for r in records if r.get("url") == url])

    async def list_all(self) -> list[Highlight]:
        return self._parse(await self._load())

    async def get(self, highlight_id: str) -> Highlight | None:
        records = await self._load()
        found = self._parse([r for r in records if r.get("id") == highlight_id])
        return found[0] if found else None

    async def save(self, highlight: Highlight) -> None:
        """Insert *highlight*, replacing any record with the same id."""
        async with self._write_lock:
            records = await self._load()
            record = to_record(highlight)
            for i, existing in enumerate(records):
                if existing.get("id") == highlight.id:
                    records[i] = record
                    break
            else:
                records.append(record)
            await self._dump(records)
        logger.info("Saved highlight %s for %s", highlight.id, highlight.url)

    async def update(self, highlight_id: str, **changes: Any) -> bool:
        """Apply *changes* to one record and bump its ``updated_at``.

        Returns False when no record has *highlight_id*.
        """
        async with self._write_lock:
            records = await self._load()
            for i, existing in enumerate(records):
                if existing.get("id") != highlight_id:
                    continue
                try:
                    current = from_record(existing)
                except ValueError as exc:
                    msg = f"Stored record {highlight_id} is malformed: {exc}"
                    raise StorageError(msg, "update") from exc
                records[i] = to_record(current.with_changes(**changes))
                await self._dump(records)
                logger.info("Updated highlight %s: %s", highlight_id, sorted(changes))
                return True
        logger.debug("No stored highlight %s to update", highlight_id)
        return False

    async def delete(self, highlight_id: str) -> bool:
        """Remove one record; False when it was not stored."""
        async with self._write_lock:
            records = await self._load()
            kept = [r for r in records if r.get("id") != highlight_id]
            if len(kept) == len(records):
                logger.debug("No stored highlight %s to delete", highlight_id)
                return False
            await self._dump(kept)
        logger.info("Deleted highlight %s", highlight_id)
        return True
