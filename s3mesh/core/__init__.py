"""
Core module: Type definitions, error hierarchy, and configuration.

This module provides the foundational abstractions:
- Result/Either monad for zero-exception control flow
- Error hierarchy with codes for programmatic handling
- Configuration management with validation
"""

from s3mesh.core.types import (
    Result,
    Ok,
    Err,
    Timestamp,
)
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
    ObservabilityConfig,
    S3MeshConfig,
)

__all__ = [
    "Result",
    "Ok",
    "Err",
    "Timestamp",
    "ErrorCode",
    "S3MeshError",
    "AddressError",
    "ProviderError",
    "UpstreamError",
    "ConnectionConfig",
    "ResolverConfig",
    "CacheConfig",
    "ObservabilityConfig",
    "S3MeshConfig",
]
