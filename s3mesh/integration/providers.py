"""
Provider Capability Contracts

Independent capability interfaces that decouple consumers from a concrete
store client:

- ContentProvider: object bytes, content type, size
- MetadataProvider: metadata snapshots, existence, ETag
- ListProvider: bucket and object listing
- ContentWriter: object upload

Every operation is a coroutine returning ``Result``; store failures come
back as ``Err`` values and are never raised. ``asyncio.CancelledError``
propagates unchanged.

Also provides adapters that turn plain async fetch functions into full
providers (``SimpleContentProvider``, ``SimpleMetadataProvider``) and the
one-shot ``ContentStream`` reader returned by ``get_content_stream``.
"""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from typing import Awaitable, BinaryIO, Callable, Optional

from s3mesh.core import constants as C
from s3mesh.core.errors import S3MeshError
from s3mesh.core.types import Ok, Result
from s3mesh.integration.reference import ObjectMetadata, ObjectReference
from s3mesh.observability.logging import LogLevel, StructuredLogger

logger = StructuredLogger(__name__)

ContentFetcher = Callable[[ObjectReference], Awaitable[Result[bytes, S3MeshError]]]
ContentTypeFetcher = Callable[[ObjectReference], Awaitable[Result[str, S3MeshError]]]
SizeFetcher = Callable[[ObjectReference], Awaitable[Result[int, S3MeshError]]]
MetadataFetcher = Callable[
    [ObjectReference], Awaitable[Result[ObjectMetadata, S3MeshError]]
]


# =============================================================================
# ONE-SHOT READER
# =============================================================================
class ContentStream(io.RawIOBase):
    """
    Sequential, non-seekable reader over an in-memory object body.

    Reads advance a cursor that cannot be rewound; once exhausted every
    read returns ``b""``. Iterating yields fixed-size chunks.
    """

    def __init__(self, data: bytes, chunk_size: int = C.STREAM_CHUNK_BYTES) -> None:
        super().__init__()
        self._view = memoryview(data)
        self._pos = 0
        self._chunk_size = chunk_size

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        self._check_open()
        remaining = len(self._view) - self._pos
        n = min(len(buffer), remaining)
        if n <= 0:
            return 0
        buffer[:n] = self._view[self._pos:self._pos + n]
        self._pos += n
        return n

    def readall(self) -> bytes:
        self._check_open()
        data = bytes(self._view[self._pos:])
        self._pos = len(self._view)
        return data

    def __iter__(self):
        return self

    def __next__(self) -> bytes:
        chunk = self.read(self._chunk_size)
        if not chunk:
            raise StopIteration
        return chunk

    def close(self) -> None:
        self._view = memoryview(b"")
        super().close()

    def _check_open(self) -> None:
        if self.closed:
            raise ValueError("I/O operation on closed stream")


# =============================================================================
# CAPABILITY CONTRACTS
# =============================================================================
class ContentProvider(ABC):
    """Read access to object bytes."""

    @abstractmethod
    async def get_content(self, ref: ObjectReference) -> Result[bytes, S3MeshError]:
        """Retrieve the full object body."""

    async def get_content_stream(
        self, ref: ObjectReference
    ) -> Result[ContentStream, S3MeshError]:
        """Retrieve the object body as a one-shot reader."""
        return (await self.get_content(ref)).map(ContentStream)

    @abstractmethod
    async def get_content_type(self, ref: ObjectReference) -> Result[str, S3MeshError]:
        """Retrieve only the content type."""

    @abstractmethod
    async def get_size(self, ref: ObjectReference) -> Result[int, S3MeshError]:
        """Retrieve the object size in bytes."""


class MetadataProvider(ABC):
    """
    Read access to object metadata.

    ``exists`` and ``get_etag`` are defined in terms of ``get_metadata``.
    ``exists`` maps every fetch failure to ``Ok(False)``, so an unreachable
    store is reported the same as a missing object.
    """

    @abstractmethod
    async def get_metadata(
        self, ref: ObjectReference
    ) -> Result[ObjectMetadata, S3MeshError]:
        """Retrieve a metadata snapshot."""

    async def exists(self, ref: ObjectReference) -> Result[bool, S3MeshError]:
        result = await self.get_metadata(ref)
        if result.is_err():
            logger.failure(
                "Existence check treated failure as missing",
                result.error,
                level=LogLevel.DEBUG,
                reference=str(ref),
            )
            return Ok(False)
        return Ok(True)

    async def get_etag(self, ref: ObjectReference) -> Result[str, S3MeshError]:
        return (await self.get_metadata(ref)).map(lambda meta: meta.etag)


class ListProvider(ABC):
    """Bucket and object listing."""

    @abstractmethod
    async def list_objects(
        self,
        connection: str,
        bucket: str,
        prefix: str = "",
        max_keys: int = C.DEFAULT_MAX_KEYS,
    ) -> Result[list[ObjectMetadata], S3MeshError]:
        """List objects in ``bucket`` whose key starts with ``prefix``."""

    @abstractmethod
    async def list_buckets(self, connection: str) -> Result[list[str], S3MeshError]:
        """List bucket names visible to ``connection``."""


class ContentWriter(ABC):
    """Write access to object bytes."""

    @abstractmethod
    async def put_content(
        self,
        ref: ObjectReference,
        content: bytes,
        content_type: str = C.DEFAULT_CONTENT_TYPE,
    ) -> Result[None, S3MeshError]:
        """Upload ``content`` as the object at ``ref``."""

    @abstractmethod
    async def put_content_stream(
        self,
        ref: ObjectReference,
        reader: BinaryIO,
        size: int = -1,
        content_type: str = C.DEFAULT_CONTENT_TYPE,
    ) -> Result[None, S3MeshError]:
        """
        Upload the bytes read from ``reader`` as the object at ``ref``.

        ``size`` is the exact byte count when known; a negative size means
        the length is unknown and the reader is consumed to its end.
        """


# =============================================================================
# FUNCTION ADAPTERS
# =============================================================================
class SimpleContentProvider(ContentProvider):
    """
    ContentProvider built from plain async functions.

    Args:
        get_content: Fetches the object body.
        get_content_type: Optional dedicated content-type lookup. Without it
            every object reports ``application/octet-stream``.
        get_size: Optional dedicated size lookup. Without it the size is
            the length of the fetched body, which costs a full download.
    """

    __slots__ = ("_get_content", "_get_content_type", "_get_size")

    def __init__(
        self,
        get_content: ContentFetcher,
        get_content_type: Optional[ContentTypeFetcher] = None,
        get_size: Optional[SizeFetcher] = None,
    ) -> None:
        self._get_content = get_content
        self._get_content_type = get_content_type
        self._get_size = get_size

    async def get_content(self, ref: ObjectReference) -> Result[bytes, S3MeshError]:
        return await self._get_content(ref)

    async def get_content_type(self, ref: ObjectReference) -> Result[str, S3MeshError]:
        if self._get_content_type is None:
            return Ok(C.DEFAULT_CONTENT_TYPE)
        return await self._get_content_type(ref)

    async def get_size(self, ref: ObjectReference) -> Result[int, S3MeshError]:
        if self._get_size is None:
            return (await self._get_content(ref)).map(len)
        return await self._get_size(ref)


class SimpleMetadataProvider(MetadataProvider):
    """MetadataProvider built from a single async fetch function."""

    __slots__ = ("_get_metadata",)

    def __init__(self, get_metadata: MetadataFetcher) -> None:
        self._get_metadata = get_metadata

    async def get_metadata(
        self, ref: ObjectReference
    ) -> Result[ObjectMetadata, S3MeshError]:
        return await self._get_metadata(ref)
