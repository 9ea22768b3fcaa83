"""
Composite Provider

Aggregates content, metadata, listing and resolution capabilities behind
one handle. Pure delegation: no caching, no validation that the parts
agree on addressing. Any part may be omitted; calling an operation whose
part is missing returns ``Err(ProviderError)`` with code
``PROVIDER_CAPABILITY_MISSING``.
"""

from __future__ import annotations

from typing import Optional

from s3mesh.core import constants as C
from s3mesh.core.errors import AddressError, ProviderError, S3MeshError
from s3mesh.core.types import Err, Result
from s3mesh.integration.providers import (
    ContentProvider,
    ContentStream,
    ListProvider,
    MetadataProvider,
)
from s3mesh.integration.reference import ObjectMetadata, ObjectReference
from s3mesh.integration.resolver import ObjectResolver


def _missing(capability: str, operation: str) -> Err[ProviderError]:
    return Err(ProviderError.capability_missing(capability, operation))


class CompositeProvider(ContentProvider, MetadataProvider, ListProvider, ObjectResolver):
    """
    One handle over four independent capabilities.

    Args:
        content: Backing ContentProvider, or None.
        metadata: Backing MetadataProvider, or None.
        listing: Backing ListProvider, or None.
        resolver: Backing ObjectResolver, or None.
    """

    def __init__(
        self,
        content: Optional[ContentProvider] = None,
        metadata: Optional[MetadataProvider] = None,
        listing: Optional[ListProvider] = None,
        resolver: Optional[ObjectResolver] = None,
    ) -> None:
        self.content = content
        self.metadata = metadata
        self.listing = listing
        self.resolver = resolver

    # -------------------------------------------------------------------------
    # CONTENT
    # -------------------------------------------------------------------------

    async def get_content(self, ref: ObjectReference) -> Result[bytes, S3MeshError]:
        if self.content is None:
            return _missing("content provider", "get_content")
        return await self.content.get_content(ref)

    async def get_content_stream(
        self, ref: ObjectReference
    ) -> Result[ContentStream, S3MeshError]:
        if self.content is None:
            return _missing("content provider", "get_content_stream")
        return await self.content.get_content_stream(ref)

    async def get_content_type(self, ref: ObjectReference) -> Result[str, S3MeshError]:
        if self.content is None:
            return _missing("content provider", "get_content_type")
        return await self.content.get_content_type(ref)

    async def get_size(self, ref: ObjectReference) -> Result[int, S3MeshError]:
        if self.content is None:
            return _missing("content provider", "get_size")
        return await self.content.get_size(ref)

    # -------------------------------------------------------------------------
    # METADATA
    # -------------------------------------------------------------------------

    async def get_metadata(
        self, ref: ObjectReference
    ) -> Result[ObjectMetadata, S3MeshError]:
        if self.metadata is None:
            return _missing("metadata provider", "get_metadata")
        return await self.metadata.get_metadata(ref)

    async def exists(self, ref: ObjectReference) -> Result[bool, S3MeshError]:
        if self.metadata is None:
            return _missing("metadata provider", "exists")
        return await self.metadata.exists(ref)

    async def get_etag(self, ref: ObjectReference) -> Result[str, S3MeshError]:
        if self.metadata is None:
            return _missing("metadata provider", "get_etag")
        return await self.metadata.get_etag(ref)

    # -------------------------------------------------------------------------
    # LISTING
    # -------------------------------------------------------------------------

    async def list_objects(
        self,
        connection: str,
        bucket: str,
        prefix: str = "",
        max_keys: int = C.DEFAULT_MAX_KEYS,
    ) -> Result[list[ObjectMetadata], S3MeshError]:
        if self.listing is None:
            return _missing("list provider", "list_objects")
        return await self.listing.list_objects(connection, bucket, prefix, max_keys)

    async def list_buckets(self, connection: str) -> Result[list[str], S3MeshError]:
        if self.listing is None:
            return _missing("list provider", "list_buckets")
        return await self.listing.list_buckets(connection)

    # -------------------------------------------------------------------------
    # RESOLUTION
    # -------------------------------------------------------------------------

    def parse_uri(self, uri: str) -> Result[ObjectReference, AddressError | ProviderError]:
        if self.resolver is None:
            return _missing("resolver", "parse_uri")
        return self.resolver.parse_uri(uri)

    def parse_arn(self, arn: str) -> Result[ObjectReference, AddressError | ProviderError]:
        if self.resolver is None:
            return _missing("resolver", "parse_arn")
        return self.resolver.parse_arn(arn)

    def resolve(self, ref: str) -> Result[ObjectReference, AddressError | ProviderError]:
        if self.resolver is None:
            return _missing("resolver", "resolve")
        return self.resolver.resolve(ref)
