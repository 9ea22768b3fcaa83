"""
Error Hierarchy for s3mesh

Errors travel inside ``Err`` values and are not raised for control flow.
Every error has an ``ErrorCode``, a message, a correlation id and a
creation timestamp. Upstream client exceptions are kept verbatim as
``cause``; ``context`` holds the address, operation or connection involved.

Usage:
    result = resolver.resolve(address)
    match result:
        case Ok(ref):
            fetch(ref)
        case Err(AddressError(code=ErrorCode.ADDRESS_NO_DEFAULT_BUCKET)):
            ask_for_bucket()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from s3mesh.core.types import Timestamp


# =============================================================================
# ERROR CODE ENUMERATION
# =============================================================================
class ErrorCode(Enum):
    """
    Stable numeric codes, grouped by the layer that reports them:
    - 1xxx: Address parsing errors
    - 2xxx: Provider wiring errors
    - 3xxx: Upstream store errors
    """

    # Address errors (1xxx)
    ADDRESS_INVALID = 1001
    ADDRESS_NO_DEFAULT_BUCKET = 1002

    # Provider errors (2xxx)
    PROVIDER_CAPABILITY_MISSING = 2001
    PROVIDER_UNKNOWN_CONNECTION = 2002

    # Upstream errors (3xxx)
    UPSTREAM_FETCH_FAILED = 3001
    UPSTREAM_NOT_FOUND = 3002


# =============================================================================
# BASE ERROR CLASS
# =============================================================================
@dataclass
class S3MeshError(Exception):
    """Base class for all s3mesh errors; subclasses add named factories."""

    code: ErrorCode
    message: str
    error_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: Timestamp = field(default_factory=Timestamp.now)
    cause: Optional[BaseException] = None
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def with_context(self, **kwargs: Any) -> S3MeshError:
        """Add context to error (returns new instance of the same class)."""
        return type(self)(
            code=self.code,
            message=self.message,
            error_id=self.error_id,
            timestamp=self.timestamp,
            cause=self.cause,
            context={**self.context, **kwargs},
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize error to dictionary for logging.

        The cause is reduced to its type name and message.
        """
        data: dict[str, Any] = {
            "error_id": self.error_id,
            "code": self.code.name,
            "code_value": self.code.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "context": self.context,
        }
        if self.cause is not None:
            data["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return data

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message} (id={self.error_id[:8]})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"code={self.code.name}, "
            f"message={self.message!r}, "
            f"error_id={self.error_id!r})"
        )


# =============================================================================
# ADDRESS ERRORS (RESOLVER)
# =============================================================================
@dataclass
class AddressError(S3MeshError):
    """
    Errors from parsing object addresses.

    Never retried: the caller has to correct the address.
    """

    @classmethod
    def invalid_address(cls, address: str, reason: str) -> AddressError:
        """Malformed URI or ARN."""
        return cls(
            code=ErrorCode.ADDRESS_INVALID,
            message=f"Invalid object address {address!r}: {reason}",
            context={"address": address[:256], "reason": reason},
        )

    @classmethod
    def no_default_bucket(cls, address: str) -> AddressError:
        """Bare key given but the resolver has no default bucket."""
        return cls(
            code=ErrorCode.ADDRESS_NO_DEFAULT_BUCKET,
            message=f"Cannot resolve {address!r}: no default bucket configured",
            context={"address": address[:256]},
        )


# =============================================================================
# PROVIDER ERRORS (WIRING)
# =============================================================================
@dataclass
class ProviderError(S3MeshError):
    """Errors from assembling providers rather than from the store."""

    @classmethod
    def capability_missing(cls, capability: str, operation: str) -> ProviderError:
        """Composite invoked without the needed backing provider."""
        return cls(
            code=ErrorCode.PROVIDER_CAPABILITY_MISSING,
            message=f"Cannot call {operation}: no {capability} configured",
            context={"capability": capability, "operation": operation},
        )

    @classmethod
    def unknown_connection(cls, connection: str, known: list[str]) -> ProviderError:
        """Reference names a connection the store has no configuration for."""
        return cls(
            code=ErrorCode.PROVIDER_UNKNOWN_CONNECTION,
            message=f"Unknown connection {connection!r}",
            context={"connection": connection, "known": sorted(known)},
        )


# =============================================================================
# UPSTREAM ERRORS (OBJECT STORE)
# =============================================================================
@dataclass
class UpstreamError(S3MeshError):
    """
    Errors reported by the object store client.

    The client exception is kept as ``cause``; caching layers pass
    these through without wrapping.
    """

    @classmethod
    def fetch_failed(
        cls,
        operation: str,
        target: str,
        cause: Optional[BaseException] = None,
    ) -> UpstreamError:
        """Store call failed (network, auth, throttling, ...)."""
        return cls(
            code=ErrorCode.UPSTREAM_FETCH_FAILED,
            message=f"{operation} failed for {target}",
            cause=cause,
            context={"operation": operation, "target": target},
        )

    @classmethod
    def not_found(
        cls,
        operation: str,
        target: str,
        cause: Optional[BaseException] = None,
    ) -> UpstreamError:
        """Store reported that the object or bucket does not exist."""
        return cls(
            code=ErrorCode.UPSTREAM_NOT_FOUND,
            message=f"{target} not found ({operation})",
            cause=cause,
            context={"operation": operation, "target": target},
        )

