"""
s3mesh: Object Reference Resolution and Caching Providers for S3

An abstraction layer for addressing and reading objects in S3-compatible
stores without depending on a concrete client:
- Resolver: s3:// URIs, S3 ARNs and bare keys -> canonical references
- Connection aliasing as a composable resolver decorator
- Provider contracts for content, metadata and listing
- Read-through caches (content: until cleared; metadata: TTL)
- Composite provider and a boto3-backed store

License: MIT
"""

__version__ = "0.1.0"

# =============================================================================
# PUBLIC API EXPORTS
# =============================================================================
from s3mesh.core.types import Result, Ok, Err
from s3mesh.core.errors import (
    ErrorCode,
    S3MeshError,
    AddressError,
    ProviderError,
    UpstreamError,
)
from s3mesh.core.config import (
    ConnectionConfig,
    ResolverConfig,
    CacheConfig,
    S3MeshConfig,
)

from s3mesh.integration import (
    ObjectReference,
    ObjectMetadata,
    ObjectResolver,
    DefaultResolver,
    AliasResolver,
    with_connection_aliases,
    build_resolver,
    ContentProvider,
    MetadataProvider,
    ListProvider,
    ContentWriter,
    ContentStream,
    SimpleContentProvider,
    SimpleMetadataProvider,
    CacheStats,
    CachedContentProvider,
    CachedMetadataProvider,
    CompositeProvider,
)
from s3mesh.integration.factory import build_provider
from s3mesh.storage import BotoObjectStore

from s3mesh.observability.logging import (
    StructuredLogger,
    LogLevel,
    setup_logging,
    setup_logging_from_config,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "Result",
    "Ok",
    "Err",
    "ErrorCode",
    "S3MeshError",
    "AddressError",
    "ProviderError",
    "UpstreamError",
    "ConnectionConfig",
    "ResolverConfig",
    "CacheConfig",
    "S3MeshConfig",
    # References and resolution
    "ObjectReference",
    "ObjectMetadata",
    "ObjectResolver",
    "DefaultResolver",
    "AliasResolver",
    "with_connection_aliases",
    "build_resolver",
    # Providers
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
    "build_provider",
    "BotoObjectStore",
    # Observability
    "StructuredLogger",
    "LogLevel",
    "setup_logging",
    "setup_logging_from_config",
]
