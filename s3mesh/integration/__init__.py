"""
Integration module: object references, resolvers, providers and caches.
"""

from s3mesh.integration.reference import ObjectReference, ObjectMetadata
from s3mesh.integration.resolver import (
    ObjectResolver,
    DefaultResolver,
    AliasResolver,
    with_connection_aliases,
    build_resolver,
)
from s3mesh.integration.providers import (
    ContentProvider,
    MetadataProvider,
    ListProvider,
    ContentWriter,
    ContentStream,
    SimpleContentProvider,
    SimpleMetadataProvider,
)
from s3mesh.integration.cache import (
    CacheStats,
    CachedContentProvider,
    CachedMetadataProvider,
)
from s3mesh.integration.composite import CompositeProvider

__all__ = [
    "ObjectReference",
    "ObjectMetadata",
    "ObjectResolver",
    "DefaultResolver",
    "AliasResolver",
    "with_connection_aliases",
    "build_resolver",
    "ContentProvider",
    "MetadataProvider",
    "ListProvider",
    "ContentWriter",
    "ContentStream",
    "SimpleContentProvider",
    "SimpleMetadataProvider",
    "CacheStats",
    "CachedContentProvider",
    "CachedMetadataProvider",
    "CompositeProvider",
]
