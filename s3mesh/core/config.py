"""
Configuration Management for s3mesh

Provides validated configuration with sensible defaults.
Supports environment variable overrides.

Design:
- Immutable after construction
- Fail-fast on invalid configuration
- Type-safe with dataclasses
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional

from s3mesh.core import constants as C
from s3mesh.core.types import Err, Ok, Result

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


def _env(env: Mapping[str, str], name: str, default: str = "") -> str:
    return (env.get(name, default) or "").strip()


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = _env(env, name, "").lower()
    if name not in env:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def parse_aliases(raw: str) -> dict[str, str]:
    """
    Parse an alias table of the form ``alias=target,alias2=target2``.

    Whitespace around names is ignored; empty items are skipped.
    """
    aliases: dict[str, str] = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        alias, sep, target = item.partition("=")
        alias, target = alias.strip(), target.strip()
        if not sep or not alias or not target:
            raise ValueError(f"Malformed alias entry {item!r}, expected alias=target")
        aliases[alias] = target
    return aliases


@dataclass(frozen=True)
class ConnectionConfig:
    """Settings for one S3-compatible endpoint/credential set."""

    name: str = ""
    region: str = C.DEFAULT_REGION
    endpoint_url: Optional[str] = None
    access_key_id: str = ""
    secret_access_key: str = ""
    session_token: str = ""
    profile: str = ""
    use_path_style: bool = False
    timeout_seconds: float = C.DEFAULT_TIMEOUT_SECONDS
    disable_ssl: bool = False

    @property
    def has_credentials(self) -> bool:
        """True if explicit credentials are configured."""
        return bool(self.access_key_id and self.secret_access_key)

    @property
    def has_endpoint(self) -> bool:
        return bool(self.endpoint_url)

    @classmethod
    def from_env(
        cls,
        name: str = "",
        env: Optional[Mapping[str, str]] = None,
    ) -> Result[ConnectionConfig, str]:
        """
        Load connection settings from the standard AWS/S3 variables.

        Environment variables:
            AWS_REGION, AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY,
            AWS_SESSION_TOKEN, AWS_PROFILE, S3_ENDPOINT,
            S3_USE_PATH_STYLE, S3_TIMEOUT (seconds), S3_DISABLE_SSL,
            S3_CONNECTION_NAME (used when ``name`` is empty)
        """
        env = os.environ if env is None else env
        try:
            return Ok(cls(
                name=name or _env(env, "S3_CONNECTION_NAME"),
                region=_env(env, "AWS_REGION") or C.DEFAULT_REGION,
                endpoint_url=_env(env, "S3_ENDPOINT") or None,
                access_key_id=_env(env, "AWS_ACCESS_KEY_ID"),
                secret_access_key=_env(env, "AWS_SECRET_ACCESS_KEY"),
                session_token=_env(env, "AWS_SESSION_TOKEN"),
                profile=_env(env, "AWS_PROFILE"),
                use_path_style=_env_bool(env, "S3_USE_PATH_STYLE", False),
                timeout_seconds=float(
                    _env(env, "S3_TIMEOUT") or C.DEFAULT_TIMEOUT_SECONDS
                ),
                disable_ssl=_env_bool(env, "S3_DISABLE_SSL", False),
            ))
        except (ValueError, TypeError) as e:
            return Err(f"Configuration error: {e}")

    def validate(self) -> Result[None, str]:
        if self.timeout_seconds <= 0:
            return Err("Connection timeout must be > 0")
        if bool(self.access_key_id) != bool(self.secret_access_key):
            return Err("Access key id and secret access key must be set together")
        return Ok(None)


@dataclass(frozen=True)
class ResolverConfig:
    """Defaults applied when an address leaves parts unspecified."""

    default_connection: str = ""
    default_bucket: str = ""
    aliases: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CacheConfig:
    """Caching decorator settings."""

    content_cache_enabled: bool = True
    metadata_ttl_seconds: float = C.DEFAULT_METADATA_TTL_SECONDS


@dataclass(frozen=True)
class ObservabilityConfig:
    log_level: str = "INFO"
    log_json: bool = True


@dataclass(frozen=True)
class S3MeshConfig:
    """Root configuration."""

    connections: tuple[ConnectionConfig, ...] = (ConnectionConfig(),)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    @property
    def default_connection_name(self) -> str:
        """
        Connection that references without one end up on.

        The resolver default after alias lookup, or the first configured
        connection when the resolver has no default.
        """
        default = self.resolver.default_connection
        if default:
            return self.resolver.aliases.get(default, default)
        return self.connections[0].name if self.connections else ""

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> Result[S3MeshConfig, str]:
        """
        Load configuration from environment variables.

        Library settings are prefixed with S3MESH_:
            S3MESH_DEFAULT_CONNECTION, S3MESH_DEFAULT_BUCKET,
            S3MESH_CONNECTION_ALIASES, S3MESH_CONTENT_CACHE,
            S3MESH_METADATA_TTL_SECONDS, S3MESH_LOG_LEVEL, S3MESH_LOG_JSON

        The single connection is read with ``ConnectionConfig.from_env``
        and named after S3MESH_DEFAULT_CONNECTION (through the alias table)
        when set, else after S3_CONNECTION_NAME. Without
        S3MESH_DEFAULT_CONNECTION the resolver defaults to that connection.
        """
        env = os.environ if env is None else env
        try:
            resolver = ResolverConfig(
                default_connection=_env(env, "S3MESH_DEFAULT_CONNECTION"),
                default_bucket=_env(env, "S3MESH_DEFAULT_BUCKET"),
                aliases=parse_aliases(_env(env, "S3MESH_CONNECTION_ALIASES")),
            )

            cache = CacheConfig(
                content_cache_enabled=_env_bool(env, "S3MESH_CONTENT_CACHE", True),
                metadata_ttl_seconds=float(
                    _env(env, "S3MESH_METADATA_TTL_SECONDS")
                    or C.DEFAULT_METADATA_TTL_SECONDS
                ),
            )

            observability = ObservabilityConfig(
                log_level=(_env(env, "S3MESH_LOG_LEVEL") or "INFO").upper(),
                log_json=_env_bool(env, "S3MESH_LOG_JSON", True),
            )
        except (ValueError, TypeError) as e:
            return Err(f"Configuration error: {e}")

        default = resolver.default_connection
        connection = ConnectionConfig.from_env(
            name=resolver.aliases.get(default, default), env=env
        )
        if connection.is_err():
            return connection
        if not default:
            resolver = replace(resolver, default_connection=connection.unwrap().name)

        return Ok(cls(
            connections=(connection.unwrap(),),
            resolver=resolver,
            cache=cache,
            observability=observability,
        ))

    def validate(self) -> Result[None, str]:
        """Validate configuration invariants."""
        if not self.connections:
            return Err("At least one connection must be configured")
        names = [c.name for c in self.connections]
        if len(set(names)) != len(names):
            return Err("Connection names must be unique")
        for connection in self.connections:
            checked = connection.validate()
            if checked.is_err():
                return checked
        if self.default_connection_name not in names:
            return Err(
                f"Default connection {self.resolver.default_connection!r} "
                f"matches no configured connection {sorted(names)}"
            )
        if self.cache.metadata_ttl_seconds < 0:
            return Err("Metadata TTL cannot be negative")
        if self.observability.log_level not in {
            "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL",
        }:
            return Err(f"Unknown log level {self.observability.log_level!r}")
        return Ok(None)
