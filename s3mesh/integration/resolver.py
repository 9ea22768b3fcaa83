"""
Object Reference Resolution

Parses the three accepted address forms into ``ObjectReference`` values:

    s3://[connection@]bucket/key     URI form
    arn:aws:s3:::bucket/key          ARN form (no connection information)
    some/key                         bare key, combined with defaults

Resolution Order:
-----------------
``resolve`` tries URI, then ARN, then bare key; the first form that parses
wins. There is no further disambiguation: a string that fails both URI and
ARN parsing (``s3://bucket`` for instance) is treated as a bare key.

Aliasing:
---------
``AliasResolver`` decorates any resolver and rewrites connection names
through an alias table. Decorators compose in wrap order.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Mapping

from s3mesh.core import constants as C
from s3mesh.core.config import ResolverConfig
from s3mesh.core.errors import AddressError
from s3mesh.core.types import Err, Ok, Result
from s3mesh.integration.reference import ObjectReference

logger = logging.getLogger(__name__)

_ARN_PREFIX = f"arn:{C.ARN_PARTITION}:{C.ARN_SERVICE}:::"


class ObjectResolver(ABC):
    """Resolves object references from address strings."""

    @abstractmethod
    def parse_uri(self, uri: str) -> Result[ObjectReference, AddressError]:
        """Parse ``s3://[connection@]bucket/key``."""

    @abstractmethod
    def parse_arn(self, arn: str) -> Result[ObjectReference, AddressError]:
        """Parse ``arn:aws:s3:::bucket/key``."""

    @abstractmethod
    def resolve(self, ref: str) -> Result[ObjectReference, AddressError]:
        """Resolve a URI, ARN, or bare key."""


class DefaultResolver(ObjectResolver):
    """
    Resolver backed by a default connection and an optional default bucket.

    Args:
        default_connection: Connection used when the address names none.
        default_bucket: Bucket combined with bare keys; empty disables
            bare-key resolution.
    """

    __slots__ = ("default_connection", "default_bucket")

    def __init__(self, default_connection: str = "", default_bucket: str = "") -> None:
        self.default_connection = default_connection
        self.default_bucket = default_bucket

    @classmethod
    def from_config(cls, config: ResolverConfig) -> DefaultResolver:
        return cls(
            default_connection=config.default_connection,
            default_bucket=config.default_bucket,
        )

    def parse_uri(self, uri: str) -> Result[ObjectReference, AddressError]:
        if not uri.startswith(C.URI_SCHEME):
            return Err(AddressError.invalid_address(uri, "scheme must be s3://"))

        rest = uri[len(C.URI_SCHEME):]
        authority, sep, key = rest.partition("/")
        if not sep:
            return Err(AddressError.invalid_address(
                uri, "missing '/' separator between bucket and key"
            ))

        connection, at, bucket = authority.partition("@")
        if not at:
            connection, bucket = "", authority
        elif not connection:
            return Err(AddressError.invalid_address(uri, "empty connection before '@'"))

        if not bucket:
            return Err(AddressError.invalid_address(uri, "empty bucket"))
        if "@" in bucket:
            return Err(AddressError.invalid_address(uri, "bucket may not contain '@'"))

        return Ok(ObjectReference(
            bucket=bucket,
            key=key,
            connection=connection or self.default_connection,
        ))

    def parse_arn(self, arn: str) -> Result[ObjectReference, AddressError]:
        if not arn.startswith(_ARN_PREFIX):
            return Err(AddressError.invalid_address(
                arn, f"ARN must start with {_ARN_PREFIX}"
            ))

        bucket, sep, key = arn[len(_ARN_PREFIX):].partition("/")
        if not bucket:
            return Err(AddressError.invalid_address(arn, "empty bucket"))
        if not sep or not key:
            return Err(AddressError.invalid_address(arn, "no key after bucket"))

        return Ok(ObjectReference(
            bucket=bucket,
            key=key,
            connection=self.default_connection,
        ))

    def resolve(self, ref: str) -> Result[ObjectReference, AddressError]:
        parsed = self.parse_uri(ref)
        if parsed.is_ok():
            return parsed

        parsed = self.parse_arn(ref)
        if parsed.is_ok():
            return parsed

        if not self.default_bucket:
            return Err(AddressError.no_default_bucket(ref))

        return Ok(ObjectReference(
            bucket=self.default_bucket,
            key=ref,
            connection=self.default_connection,
        ))

    def __repr__(self) -> str:
        return (
            f"DefaultResolver(default_connection={self.default_connection!r}, "
            f"default_bucket={self.default_bucket!r})"
        )


class AliasResolver(ObjectResolver):
    """
    Decorator that maps connection aliases to real connection names.

    References produced by ``parse_uri`` and ``resolve`` have their
    connection replaced when it is a key of ``aliases``. ``parse_arn`` is
    passed through: an ARN never names a connection.
    """

    __slots__ = ("_inner", "_aliases")

    def __init__(self, inner: ObjectResolver, aliases: Mapping[str, str]) -> None:
        self._inner = inner
        self._aliases = dict(aliases)

    @property
    def inner(self) -> ObjectResolver:
        return self._inner

    @property
    def aliases(self) -> Mapping[str, str]:
        return dict(self._aliases)

    def _rewrite(self, ref: ObjectReference) -> ObjectReference:
        target = self._aliases.get(ref.connection)
        if target is None:
            return ref
        logger.debug("Connection alias %r -> %r for %s", ref.connection, target, ref)
        return ref.with_connection(target)

    def parse_uri(self, uri: str) -> Result[ObjectReference, AddressError]:
        return self._inner.parse_uri(uri).map(self._rewrite)

    def parse_arn(self, arn: str) -> Result[ObjectReference, AddressError]:
        return self._inner.parse_arn(arn)

    def resolve(self, ref: str) -> Result[ObjectReference, AddressError]:
        return self._inner.resolve(ref).map(self._rewrite)


ResolverMiddleware = Callable[[ObjectResolver], ObjectResolver]


def with_connection_aliases(aliases: Mapping[str, str]) -> ResolverMiddleware:
    """Middleware form of ``AliasResolver``."""
    def wrap(resolver: ObjectResolver) -> ObjectResolver:
        return AliasResolver(resolver, aliases)
    return wrap


def build_resolver(config: ResolverConfig) -> ObjectResolver:
    """Default resolver for ``config``, alias-wrapped when aliases are set."""
    resolver: ObjectResolver = DefaultResolver.from_config(config)
    if config.aliases:
        resolver = with_connection_aliases(config.aliases)(resolver)
    return resolver
