"""Append-only history ledger kept as one JSON array in a shared document.

``append`` is a read-modify-write cycle over the whole document. Two
mechanisms keep concurrent appends from losing each other's entries:

1. A process-wide lock serialises the read/write window of every append
   made through this ledger instance.
2. Writes are conditional on the version read; if another writer got in
   first the store raises :class:`LedgerConflictError` and the cycle is
   retried against the fresh document.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import threading
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any

import pydantic

from src.classification.models import ClassificationRecord, HistoryEntry, TokenUsage
from src.errors import LedgerConflictError, PersistenceError
from src.history.stores import LedgerStore

logger = logging.getLogger(__name__)


def _new_entry_id(now: datetime) -> str:
    """Creation instant in epoch milliseconds plus a random suffix."""
    return f"{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:8]}"


def decode_ledger(data: bytes | None) -> list[dict[str, Any]]:
    """Parse the stored document; an absent document is an empty ledger."""
    if data is None or not data.strip():
        return []
    try:
        entries = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise PersistenceError(f"Ledger document is not valid JSON: {exc}") from exc
    if not isinstance(entries, list):
        raise PersistenceError(
            f"Ledger document must be a JSON array, got {type(entries).__name__}"
        )
    return entries


def encode_ledger(entries: list[dict[str, Any]]) -> bytes:
    return json.dumps(entries, ensure_ascii=False, indent=2).encode("utf-8")


class HistoryLedger:
    """Append validated classification records; read them back in order.

    Ledger I/O runs on a small executor owned by the ledger. Appends waiting on
    the lock or sleeping between retries occupy only these workers, never the
    default executor used for fetching and transcription.
    """

    def __init__(
        self,
        store: LedgerStore,
        max_retries: int = 5,
        serialize_writes: bool = True,
        retry_delay: float = 0.05,
        max_workers: int = 4,
    ) -> None:
        self._store = store
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._lock: threading.Lock | None = threading.Lock() if serialize_writes else None
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ledger")

    async def _run(self, func: Any, *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, func, *args)

    async def append(
        self,
        record: ClassificationRecord,
        usage: TokenUsage | None = None,
    ) -> HistoryEntry:
        """Append *record* as a new entry and return it.

        Raises:
            PersistenceError: The ledger could not be read or written, or
                conflicts persisted after all retries.
        """
        return await self._run(self.append_sync, record, usage)

    def append_sync(
        self,
        record: ClassificationRecord,
        usage: TokenUsage | None = None,
    ) -> HistoryEntry:
        guard = self._lock if self._lock is not None else contextlib.nullcontext()
        with guard:
            return self._append_with_retries(record, usage)

    def _append_with_retries(
        self,
        record: ClassificationRecord,
        usage: TokenUsage | None,
    ) -> HistoryEntry:
        now = datetime.now(timezone.utc)
        entry_id = _new_entry_id(now)

        for attempt in range(self._max_retries + 1):
            snapshot = self._store.read()
            entries = decode_ledger(snapshot.data)

            existing_ids = {e.get("id") for e in entries if isinstance(e, dict)}
            while entry_id in existing_ids:
                entry_id = _new_entry_id(now)

            entry = HistoryEntry.model_validate(
                {
                    **record.model_dump(mode="json"),
                    "id": entry_id,
                    "timestamp": now.isoformat(),
                    "usage": usage.model_dump() if usage is not None else None,
                }
            )
            document = entry.model_dump(mode="json")
            if usage is None:
                document.pop("usage", None)

            try:
                self._store.write(encode_ledger([*entries, document]), snapshot.version)
            except LedgerConflictError:
                logger.info(
                    "Ledger write conflict on attempt %d/%d; retrying",
                    attempt + 1,
                    self._max_retries + 1,
                )
                time.sleep(self._retry_delay * (attempt + 1))
                continue

            logger.info("Appended history entry %s (ledger size %d)", entry_id, len(entries) + 1)
            return entry

        raise PersistenceError(
            f"Ledger append gave up after {self._max_retries + 1} conflicting attempts"
        )

    async def read_all(self) -> list[HistoryEntry]:
        """Return every entry in append order; absent ledger → ``[]``.

        Raises:
            PersistenceError: The document could not be fetched or parsed.
        """
        return await self._run(self.read_all_sync)

    def read_all_sync(self) -> list[HistoryEntry]:
        entries: list[HistoryEntry] = []
        for index, raw in enumerate(decode_ledger(self._store.read().data)):
            try:
                entries.append(HistoryEntry.model_validate(raw))
            except pydantic.ValidationError as exc:
                logger.warning("Skipping unreadable ledger entry %d: %s", index, exc)
        return entries
