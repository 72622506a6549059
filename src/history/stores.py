"""Backing stores for the history ledger document.

A store holds exactly one JSON document and supports conditional writes:
``read`` returns the raw bytes with a version token, and ``write`` only
succeeds if the stored version still equals the token it is given.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from dataclasses import dataclass
from typing import Protocol

from supabase import Client

from src.errors import LedgerConflictError, PersistenceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Raw document bytes and the version they were read at (None = absent)."""

    data: bytes | None
    version: str | None


class LedgerStore(Protocol):
    def read(self) -> Snapshot: ...

    def write(self, data: bytes, expected_version: str | None) -> str: ...


def content_version(data: bytes) -> str:
    """Version token for a document: the SHA-256 of its bytes."""
    return hashlib.sha256(data).hexdigest()


class InMemoryLedgerStore:
    """Process-local store with an atomic compare-and-swap write."""

    def __init__(self, data: bytes | None = None) -> None:
        self._data = data
        self._version = content_version(data) if data is not None else None
        self._lock = threading.Lock()

    def read(self) -> Snapshot:
        with self._lock:
            return Snapshot(self._data, self._version)

    def write(self, data: bytes, expected_version: str | None) -> str:
        with self._lock:
            if self._version != expected_version:
                raise LedgerConflictError(
                    f"Ledger changed since read (expected {expected_version}, found {self._version})"
                )
            self._data = data
            self._version = content_version(data)
            return self._version


def _is_not_found(exc: Exception) -> bool:
    status = getattr(exc, "status", None) or getattr(exc, "status_code", None)
    if str(status) == "404":
        return True
    text = str(exc).lower()
    return "not found" in text or "not_found" in text


def _is_duplicate(exc: Exception) -> bool:
    status = getattr(exc, "status", None) or getattr(exc, "status_code", None)
    text = str(exc).lower()
    return str(status) == "409" or "duplicate" in text or "already exists" in text


class SupabaseLedgerStore:
    """Ledger document stored as one object in a Supabase Storage bucket.

    Supabase Storage has no conditional PUT, so the version check before a
    replacing upload is a compare-then-write: it detects conflicts with any
    writer that finished before the check, but two processes can still both
    pass it. Creation is safe because a non-upsert upload fails if the object
    appeared in the meantime. The in-process lock in
    :class:`~src.history.ledger.HistoryLedger` covers the single-instance case.
    """

    def __init__(self, client: Client, bucket: str, path: str) -> None:
        self._client = client
        self._bucket = bucket
        self._path = path

    def _download(self) -> bytes | None:
        try:
            return bytes(self._client.storage.from_(self._bucket).download(self._path))
        except Exception as exc:
            if _is_not_found(exc):
                return None
            raise PersistenceError(
                f"Could not read ledger {self._bucket}/{self._path}: {exc}"
            ) from exc

    def read(self) -> Snapshot:
        data = self._download()
        return Snapshot(data, content_version(data) if data is not None else None)

    def write(self, data: bytes, expected_version: str | None) -> str:
        bucket = self._client.storage.from_(self._bucket)
        options = {"content-type": "application/json", "cache-control": "no-cache"}

        if expected_version is None:
            try:
                bucket.upload(self._path, data, file_options={**options, "upsert": "false"})
            except Exception as exc:
                if _is_duplicate(exc):
                    raise LedgerConflictError("Ledger was created by another writer") from exc
                raise PersistenceError(f"Could not create ledger: {exc}") from exc
            return content_version(data)

        current = self._download()
        current_version = content_version(current) if current is not None else None
        if current_version != expected_version:
            raise LedgerConflictError("Ledger changed since read")

        try:
            bucket.upload(self._path, data, file_options={**options, "upsert": "true"})
        except Exception as exc:
            raise PersistenceError(f"Could not write ledger: {exc}") from exc
        return content_version(data)
