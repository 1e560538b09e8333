"""Time-bounded cache over storage bucket existence checks."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict

from showcase.clients import SupabaseError, SupabaseStorageClient
from showcase.services.errors import (
    AUTHENTICATION,
    NETWORK,
    BucketNotFoundError,
    UnreachableError,
    classify_backend_error,
)

logger = logging.getLogger(__name__)


@dataclass
class BucketExistenceEntry:
    exists: bool
    observed_at: float


class BucketExistenceCache:
    """
    Remember buckets known to exist for a fixed window.

    Only positive results short-circuit; a cached negative is always
    re-checked, and any failure evicts the entry. Expiry is evaluated lazily on
    read, measured from when the entry was populated.
    """

    DEFAULT_TTL_SECONDS = 5 * 60

    def __init__(
        self,
        storage: SupabaseStorageClient,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._storage = storage
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, BucketExistenceEntry] = {}

    def get(self, bucket: str) -> BucketExistenceEntry | None:
        """Return the live entry for ``bucket``, dropping it if expired."""
        entry = self._entries.get(bucket)
        if entry is None:
            return None
        if self._clock() - entry.observed_at >= self._ttl:
            del self._entries[bucket]
            return None
        return entry

    def invalidate(self, bucket: str | None = None) -> None:
        if bucket is None:
            self._entries.clear()
        else:
            self._entries.pop(bucket, None)

    async def ensure(self, bucket: str) -> None:
        """Raise unless ``bucket`` exists in storage."""
        cached = self.get(bucket)
        if cached is not None and cached.exists:
            logger.debug("Bucket %s known to exist (cached)", bucket)
            return

        logger.info("Checking whether bucket %s exists", bucket)
        try:
            buckets = await self._storage.list_buckets()
        except SupabaseError as exc:
            self.invalidate(bucket)
            raise self._classify(exc) from exc

        names = [item.name for item in buckets]
        if bucket not in names:
            self.invalidate(bucket)
            logger.warning("Bucket %s is missing; available: %s", bucket, ", ".join(names) or "none")
            raise BucketNotFoundError(bucket, names)
        self._entries[bucket] = BucketExistenceEntry(exists=True, observed_at=self._clock())

    @staticmethod
    def _classify(exc: SupabaseError) -> UnreachableError:
        category = classify_backend_error(exc)
        if category == NETWORK:
            message = f"Network connection failed; check network settings or retry later. ({exc.message})"
        elif category == AUTHENTICATION:
            message = (
                "Authentication with the storage service failed; "
                f"check the configured project keys. ({exc.message})"
            )
        else:
            message = f"Unable to reach the storage service: {exc.message}"
        logger.error("Listing buckets failed (%s): %s", category, exc.message)
        return UnreachableError(message, category=category, detail=exc.message)


__all__ = ["BucketExistenceCache", "BucketExistenceEntry"]
