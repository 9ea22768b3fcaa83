"""
Object identity and metadata snapshots.

``ObjectReference`` is the canonical {connection, bucket, key} triple; its
string form ``s3://[connection@]bucket/key`` is the cache key used by every
caching decorator.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional

from s3mesh.core import constants as C


@dataclass(frozen=True, slots=True)
class ObjectReference:
    """
    Reference to one object in an S3-compatible store.

    Attributes:
        bucket: Bucket name; never empty once resolved.
        key: Object key within the bucket; may contain ``/``.
        connection: Logical connection name; empty means "use default".
    """

    bucket: str
    key: str
    connection: str = ""

    @property
    def cache_key(self) -> str:
        """Canonical string form, shared by all caches."""
        return str(self)

    def with_connection(self, connection: str) -> ObjectReference:
        """Return a copy pointing at another connection."""
        return replace(self, connection=connection)

    def __str__(self) -> str:
        if self.connection:
            return f"{C.URI_SCHEME}{self.connection}@{self.bucket}/{self.key}"
        return f"{C.URI_SCHEME}{self.bucket}/{self.key}"


@dataclass(frozen=True)
class ObjectMetadata:
    """
    Point-in-time metadata snapshot for one object.

    Produced fresh by the store on every uncached fetch. Cached snapshots
    are shared between callers, so ``custom_metadata`` is exposed as a
    read-only mapping.

    Attributes:
        reference: Object the snapshot describes.
        size: Object size in bytes.
        content_type: MIME content type.
        last_modified: Last modification time (aware), if reported.
        etag: Entity tag as reported by the store.
        custom_metadata: User-defined key-value metadata.
        storage_class: Store storage class.
        version_id: Version ID for versioned buckets.
    """

    reference: ObjectReference
    size: int = 0
    content_type: str = C.DEFAULT_CONTENT_TYPE
    last_modified: Optional[datetime] = None
    etag: str = ""
    custom_metadata: Mapping[str, str] = field(default_factory=dict, hash=False)
    storage_class: str = ""
    version_id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "custom_metadata", MappingProxyType(dict(self.custom_metadata))
        )
