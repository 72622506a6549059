"""Supabase storage helpers for media assets."""

from __future__ import annotations

import logging

import httpx
from supabase import Client, create_client

from src.config import settings
from src.errors import CleanupError, IngestionError

logger = logging.getLogger(__name__)


def get_supabase_client() -> Client:
    """Create and return a Supabase client from the configured credentials."""
    return create_client(
        settings.supabase_url,
        settings.supabase_key,
    )


class MediaStore:
    """Fetch and delete media assets referenced by the pipeline.

    A media reference is either an ``http(s)`` URL or an object path inside
    the media bucket. Only objects living in the media bucket can be deleted;
    public URLs of that bucket are mapped back to their object path.
    """

    def __init__(
        self,
        client: Client,
        bucket: str,
        public_base_url: str = "",
        timeout: float = 120.0,
    ) -> None:
        self._client = client
        self._bucket = bucket
        self._public_prefix = (
            f"{public_base_url.rstrip('/')}/storage/v1/object/public/{bucket}/"
            if public_base_url
            else ""
        )
        self._timeout = timeout

    def fetch(self, ref: str) -> bytes:
        """Return the raw bytes behind *ref*.

        Raises:
            IngestionError: The asset is unreachable or empty.
        """
        try:
            if _is_url(ref):
                response = httpx.get(ref, timeout=self._timeout, follow_redirects=True)
                response.raise_for_status()
                data = response.content
            else:
                data = self._client.storage.from_(self._bucket).download(ref)
        except Exception as exc:
            raise IngestionError(f"Could not fetch media asset {ref!r}: {exc}") from exc

        if not data:
            raise IngestionError(f"Media asset {ref!r} is empty")
        return bytes(data)

    def delete(self, ref: str) -> None:
        """Remove the asset from the media bucket.

        Raises:
            CleanupError: The ref is outside the bucket or the removal failed.
        """
        path = self.object_path(ref)
        if path is None:
            raise CleanupError(f"Media asset {ref!r} is not stored in bucket {self._bucket!r}")

        try:
            removed = self._client.storage.from_(self._bucket).remove([path])
        except Exception as exc:
            raise CleanupError(f"Could not delete media asset {path!r}: {exc}") from exc

        if not removed:
            logger.warning("Media asset %s was already gone when cleanup ran", path)

    def object_path(self, ref: str) -> str | None:
        """Map *ref* to an object path in the media bucket, or None if foreign."""
        if not _is_url(ref):
            return ref.lstrip("/")
        if self._public_prefix and ref.startswith(self._public_prefix):
            return ref[len(self._public_prefix) :].split("?", 1)[0]
        return None


def _is_url(ref: str) -> bool:
    return ref.startswith(("http://", "https://"))
