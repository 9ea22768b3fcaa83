"""
Caching Provider Decorators

Read-through caches in front of a ContentProvider or MetadataProvider,
for read-mostly workloads where the same objects are fetched repeatedly.

Cache Model:
    Key: canonical reference string (``s3://[connection@]bucket/key``)
    Content: key -> bytes, kept until ``clear_cache()``
    Metadata: key -> (snapshot, inserted_at), served while
        ``now - inserted_at < ttl``; expired entries are dropped lazily
        on the next read of that key

Concurrency:
    Instances belong to one event loop. The check-fetch-insert sequence
    runs under a per-key ``asyncio.Lock``, so concurrent readers of the
    same key share one upstream fetch while different keys fetch in
    parallel. A key's lock exists only while a reader holds or awaits it.
    A failed or cancelled fetch leaves the cache untouched, and a fetch
    that straddles ``clear_cache()`` is not stored.

Not a general-purpose cache: no size bound, no LRU eviction, no
persistence, no background expiry.
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Callable, NamedTuple, Optional

from s3mesh.core import constants as C
from s3mesh.core.errors import S3MeshError
from s3mesh.core.types import Ok, Result
from s3mesh.integration.providers import ContentProvider, MetadataProvider
from s3mesh.integration.reference import ObjectMetadata, ObjectReference
from s3mesh.observability.logging import StructuredLogger

logger = StructuredLogger(__name__)


# =============================================================================
# CACHE STATISTICS
# =============================================================================
@dataclass
class CacheStats:
    """Cache performance statistics."""
    hits: int = 0
    misses: int = 0
    expirations: int = 0
    fetch_errors: int = 0
    entry_count: int = 0

    @property
    def hit_rate(self) -> float:
        """Cache hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


class _LockSlot:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.holders = 0


class _KeyedLocks:
    """
    Per-key asyncio locks that exist only while someone holds or awaits them.

    A key's slot is created by its first holder and dropped when the last
    holder or waiter leaves, so lookups that store nothing leave no trace.
    """

    __slots__ = ("_slots",)

    def __init__(self) -> None:
        self._slots: dict[str, _LockSlot] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        slot = self._slots.get(key)
        if slot is None:
            slot = self._slots[key] = _LockSlot()
        slot.holders += 1
        try:
            async with slot.lock:
                yield
        finally:
            slot.holders -= 1
            if slot.holders == 0:
                del self._slots[key]

    def __len__(self) -> int:
        return len(self._slots)


# =============================================================================
# CONTENT CACHE
# =============================================================================
class CachedContentProvider(ContentProvider):
    """
    ContentProvider decorator that memoizes object bodies.

    Entries never expire on their own; ``clear_cache()`` drops all of
    them. ``get_content_type`` and ``get_size`` always go to the inner
    provider.

    Usage:
        provider = CachedContentProvider(store)
        body = await provider.get_content(ref)      # upstream fetch
        body = await provider.get_content(ref)      # served from cache
    """

    __slots__ = ("_inner", "_cache", "_locks", "_stats", "_generation")

    def __init__(self, inner: ContentProvider) -> None:
        self._inner = inner
        self._cache: dict[str, bytes] = {}
        self._locks = _KeyedLocks()
        self._stats = CacheStats()
        self._generation = 0

    @property
    def inner(self) -> ContentProvider:
        return self._inner

    async def get_content(self, ref: ObjectReference) -> Result[bytes, S3MeshError]:
        key = ref.cache_key

        if key in self._cache:
            self._stats.hits += 1
            return Ok(self._cache[key])

        async with self._locks.hold(key):
            # Another reader may have filled the entry while we waited
            if key in self._cache:
                self._stats.hits += 1
                return Ok(self._cache[key])

            self._stats.misses += 1
            generation = self._generation
            logger.debug("Content cache miss", reference=key)

            result = await self._inner.get_content(ref)
            if result.is_err():
                self._stats.fetch_errors += 1
                return result

            if generation == self._generation:
                self._cache[key] = result.value
                self._stats.entry_count = len(self._cache)
            return result

    async def get_content_type(self, ref: ObjectReference) -> Result[str, S3MeshError]:
        return await self._inner.get_content_type(ref)

    async def get_size(self, ref: ObjectReference) -> Result[int, S3MeshError]:
        return await self._inner.get_size(ref)

    def clear_cache(self) -> None:
        """Drop every cached body."""
        self._cache = {}
        self._generation += 1
        self._stats.entry_count = 0
        logger.debug("Content cache cleared")

    def contains(self, ref: ObjectReference) -> bool:
        return ref.cache_key in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    @property
    def stats(self) -> CacheStats:
        return self._stats


# =============================================================================
# METADATA CACHE
# =============================================================================
class _MetadataEntry(NamedTuple):
    metadata: ObjectMetadata
    inserted_at: float


class CachedMetadataProvider(MetadataProvider):
    """
    MetadataProvider decorator that memoizes snapshots for a fixed TTL.

    An entry is served while its age is strictly less than ``ttl_seconds``;
    a TTL of zero therefore disables caching. ``exists`` and ``get_etag``
    go through the cached ``get_metadata``.

    Args:
        inner: Provider to fetch from on miss or expiry.
        ttl_seconds: Maximum age of a served entry.
        clock: Monotonic clock in seconds; replaceable for tests.
    """

    __slots__ = (
        "_inner", "_ttl", "_clock", "_entries",
        "_locks", "_stats", "_generation",
    )

    def __init__(
        self,
        inner: MetadataProvider,
        ttl_seconds: float = C.DEFAULT_METADATA_TTL_SECONDS,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError(f"ttl_seconds must be >= 0, got {ttl_seconds}")
        self._inner = inner
        self._ttl = float(ttl_seconds)
        self._clock = clock or time.monotonic
        self._entries: dict[str, _MetadataEntry] = {}
        self._locks = _KeyedLocks()
        self._stats = CacheStats()
        self._generation = 0

    @property
    def inner(self) -> MetadataProvider:
        return self._inner

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def _is_fresh(self, entry: _MetadataEntry) -> bool:
        return self._clock() - entry.inserted_at < self._ttl

    async def get_metadata(
        self, ref: ObjectReference
    ) -> Result[ObjectMetadata, S3MeshError]:
        key = ref.cache_key

        entry = self._entries.get(key)
        if entry is not None and self._is_fresh(entry):
            self._stats.hits += 1
            return Ok(entry.metadata)

        async with self._locks.hold(key):
            entry = self._entries.get(key)
            if entry is not None:
                if self._is_fresh(entry):
                    self._stats.hits += 1
                    return Ok(entry.metadata)
                del self._entries[key]
                self._stats.expirations += 1
                self._stats.entry_count = len(self._entries)

            self._stats.misses += 1
            generation = self._generation
            logger.debug("Metadata cache miss", reference=key)

            result = await self._inner.get_metadata(ref)
            if result.is_err():
                self._stats.fetch_errors += 1
                return result

            if generation == self._generation:
                self._entries[key] = _MetadataEntry(result.value, self._clock())
                self._stats.entry_count = len(self._entries)
            return result

    def clear_cache(self) -> None:
        """Drop every cached snapshot together with its timestamp."""
        self._entries = {}
        self._generation += 1
        self._stats.entry_count = 0
        logger.debug("Metadata cache cleared")

    def contains(self, ref: ObjectReference) -> bool:
        """True if an entry is stored for ``ref``, fresh or not."""
        return ref.cache_key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def stats(self) -> CacheStats:
        return self._stats
