"""
Provider wiring from configuration.

Builds the standard stack:

    BotoObjectStore
      -> CachedContentProvider   (when content caching is enabled)
      -> CachedMetadataProvider  (when the metadata TTL is positive)
    + resolver with connection aliases
    = CompositeProvider
"""

from __future__ import annotations

from typing import Optional

from s3mesh.core.config import S3MeshConfig
from s3mesh.integration.cache import CachedContentProvider, CachedMetadataProvider
from s3mesh.integration.composite import CompositeProvider
from s3mesh.integration.providers import ContentProvider, MetadataProvider
from s3mesh.integration.resolver import build_resolver
from s3mesh.observability.logging import StructuredLogger
from s3mesh.storage.boto_store import BotoObjectStore, ClientFactory

logger = StructuredLogger(__name__)


def build_provider(
    config: S3MeshConfig,
    store: Optional[BotoObjectStore] = None,
    client_factory: Optional[ClientFactory] = None,
) -> CompositeProvider:
    """
    Assemble a CompositeProvider from ``config``.

    Args:
        config: Validated configuration.
        store: Store to wrap; built from ``config.connections`` when omitted.
        client_factory: Client factory for the built store.
    """
    if store is None:
        store = BotoObjectStore(
            config.connections,
            default_connection=config.default_connection_name,
            client_factory=client_factory,
        )

    content: ContentProvider = store
    if config.cache.content_cache_enabled:
        content = CachedContentProvider(store)

    metadata: MetadataProvider = store
    if config.cache.metadata_ttl_seconds > 0:
        metadata = CachedMetadataProvider(store, config.cache.metadata_ttl_seconds)

    logger.info(
        "Provider stack built",
        content_cache=config.cache.content_cache_enabled,
        metadata_ttl_seconds=config.cache.metadata_ttl_seconds,
        aliases=sorted(config.resolver.aliases),
    )

    return CompositeProvider(
        content=content,
        metadata=metadata,
        listing=store,
        resolver=build_resolver(config.resolver),
    )
