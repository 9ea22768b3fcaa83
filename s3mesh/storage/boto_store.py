"""
boto3-Backed Object Store

Implements the provider capability contracts on top of boto3 S3 clients,
for AWS S3 and S3-compatible services (MinIO, Cloudflare R2, SeaweedFS,
LocalStack).

Connections:
------------
Each named ``ConnectionConfig`` gets its own client, created on first use.
A reference with an empty connection uses the store's default connection.

Threading:
----------
boto3 clients are blocking; every call runs in the default executor via
``asyncio.to_thread`` so the event loop stays responsive. boto3 clients
are thread-safe, so one client per connection is shared by all calls.

Error Mapping:
--------------
| boto/botocore failure               | Err value                   |
|-------------------------------------|-----------------------------|
| 404 / NoSuchKey / NoSuchBucket      | UpstreamError.not_found     |
| any other boto/botocore error       | UpstreamError.fetch_failed  |
| unknown connection name             | ProviderError.unknown_...   |
"""

from __future__ import annotations

import asyncio
from typing import Any, BinaryIO, Callable, Iterable, Optional, TypeVar

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from s3mesh.core import constants as C
from s3mesh.core.config import ConnectionConfig
from s3mesh.core.errors import ProviderError, S3MeshError, UpstreamError
from s3mesh.core.types import Err, Ok, Result
from s3mesh.integration.providers import (
    ContentProvider,
    ContentWriter,
    ListProvider,
    MetadataProvider,
)
from s3mesh.integration.reference import ObjectMetadata, ObjectReference
from s3mesh.observability.logging import StructuredLogger

logger = StructuredLogger(__name__)

T = TypeVar("T")

ClientFactory = Callable[[ConnectionConfig], Any]

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NoSuchBucket", "NotFound"})


def create_s3_client(config: ConnectionConfig) -> Any:
    """
    Build a boto3 S3 client for one connection.

    Explicit credentials win over the profile; with neither, boto3's
    default credential chain applies (env, shared config, IAM role).
    """
    session = boto3.Session(profile_name=config.profile or None)

    client_config = Config(
        retries={"max_attempts": C.CLIENT_MAX_ATTEMPTS, "mode": "standard"},
        connect_timeout=config.timeout_seconds,
        read_timeout=config.timeout_seconds,
        s3={"addressing_style": "path" if config.use_path_style else "auto"},
    )

    kwargs: dict[str, Any] = {
        "region_name": config.region,
        "config": client_config,
        "use_ssl": not config.disable_ssl,
    }
    if config.endpoint_url:
        kwargs["endpoint_url"] = config.endpoint_url
    if config.has_credentials:
        kwargs["aws_access_key_id"] = config.access_key_id
        kwargs["aws_secret_access_key"] = config.secret_access_key
        if config.session_token:
            kwargs["aws_session_token"] = config.session_token

    return session.client("s3", **kwargs)


def _translate(operation: str, target: str, error: Exception) -> UpstreamError:
    """Map a boto exception onto the upstream error kinds."""
    if isinstance(error, ClientError):
        code = str(error.response.get("Error", {}).get("Code", ""))
        status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        if code in _NOT_FOUND_CODES or status == 404:
            return UpstreamError.not_found(operation, target, cause=error)
    return UpstreamError.fetch_failed(operation, target, cause=error)


class BotoObjectStore(ContentProvider, MetadataProvider, ListProvider, ContentWriter):
    """
    Object store client over one or more named S3 connections.

    Example:
        >>> store = BotoObjectStore([ConnectionConfig(name="prod")], "prod")
        >>> result = await store.get_content(ObjectReference("bucket", "a.json"))
        >>> if result.is_ok():
        ...     payload = result.unwrap()

    Args:
        connections: Connection settings, unique by name.
        default_connection: Connection used for references without one.
        client_factory: Builds a client from a ``ConnectionConfig``;
            defaults to ``create_s3_client``.
    """

    def __init__(
        self,
        connections: Iterable[ConnectionConfig],
        default_connection: str = "",
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self._configs = {config.name: config for config in connections}
        self._default_connection = default_connection
        self._client_factory = client_factory or create_s3_client
        self._clients: dict[str, Any] = {}

    @property
    def connection_names(self) -> list[str]:
        return sorted(self._configs)

    @property
    def default_connection(self) -> str:
        return self._default_connection

    # -------------------------------------------------------------------------
    # CLIENT MANAGEMENT
    # -------------------------------------------------------------------------

    def _client(self, connection: str) -> Result[Any, S3MeshError]:
        """Lazily create the client for ``connection``."""
        name = connection or self._default_connection
        client = self._clients.get(name)
        if client is not None:
            return Ok(client)

        config = self._configs.get(name)
        if config is None:
            return Err(ProviderError.unknown_connection(name, list(self._configs)))

        try:
            client = self._client_factory(config)
        except (BotoCoreError, ClientError) as e:
            error = UpstreamError.fetch_failed("create_client", name or "<default>", cause=e)
            logger.failure("Client creation failed", error, connection=name)
            return Err(error)

        logger.info(
            "Created S3 client",
            connection=name,
            region=config.region,
            endpoint=config.endpoint_url or "aws",
        )
        self._clients[name] = client
        return Ok(client)

    async def _call(
        self,
        connection: str,
        operation: str,
        target: str,
        fn: Callable[[Any], T],
    ) -> Result[T, S3MeshError]:
        """Run ``fn(client)`` off the event loop, mapping boto failures."""
        client = self._client(connection)
        if client.is_err():
            return client

        try:
            value = await asyncio.to_thread(fn, client.unwrap())
        except (BotoCoreError, ClientError, S3UploadFailedError) as e:
            error = _translate(operation, target, e)
            logger.failure(
                "Upstream call failed",
                error,
                connection=connection or self._default_connection,
                operation=operation,
                target=target,
            )
            return Err(error)
        return Ok(value)

    # -------------------------------------------------------------------------
    # CONTENT
    # -------------------------------------------------------------------------

    async def get_content(self, ref: ObjectReference) -> Result[bytes, S3MeshError]:
        def fetch(client: Any) -> bytes:
            body = client.get_object(Bucket=ref.bucket, Key=ref.key)["Body"]
            try:
                return body.read()
            finally:
                body.close()

        return await self._call(ref.connection, "GetObject", str(ref), fetch)

    async def _head(self, ref: ObjectReference) -> Result[dict[str, Any], S3MeshError]:
        return await self._call(
            ref.connection,
            "HeadObject",
            str(ref),
            lambda client: client.head_object(Bucket=ref.bucket, Key=ref.key),
        )

    async def get_content_type(self, ref: ObjectReference) -> Result[str, S3MeshError]:
        return (await self._head(ref)).map(
            lambda head: head.get("ContentType") or C.DEFAULT_CONTENT_TYPE
        )

    async def get_size(self, ref: ObjectReference) -> Result[int, S3MeshError]:
        return (await self._head(ref)).map(lambda head: int(head.get("ContentLength", 0)))

    async def put_content(
        self,
        ref: ObjectReference,
        content: bytes,
        content_type: str = C.DEFAULT_CONTENT_TYPE,
    ) -> Result[None, S3MeshError]:
        def put(client: Any) -> None:
            client.put_object(
                Bucket=ref.bucket,
                Key=ref.key,
                Body=content,
                ContentType=content_type or C.DEFAULT_CONTENT_TYPE,
            )

        return await self._call(ref.connection, "PutObject", str(ref), put)

    async def put_content_stream(
        self,
        ref: ObjectReference,
        reader: BinaryIO,
        size: int = -1,
        content_type: str = C.DEFAULT_CONTENT_TYPE,
    ) -> Result[None, S3MeshError]:
        content_type = content_type or C.DEFAULT_CONTENT_TYPE

        if size >= 0:
            def put(client: Any) -> None:
                client.put_object(
                    Bucket=ref.bucket,
                    Key=ref.key,
                    Body=reader,
                    ContentLength=size,
                    ContentType=content_type,
                )

            return await self._call(ref.connection, "PutObject", str(ref), put)

        # unknown length: managed transfer, multipart once the body is large
        def upload(client: Any) -> None:
            client.upload_fileobj(
                reader, ref.bucket, ref.key, ExtraArgs={"ContentType": content_type}
            )

        return await self._call(ref.connection, "UploadObject", str(ref), upload)

    # -------------------------------------------------------------------------
    # METADATA
    # -------------------------------------------------------------------------

    async def get_metadata(
        self, ref: ObjectReference
    ) -> Result[ObjectMetadata, S3MeshError]:
        return (await self._head(ref)).map(
            lambda head: ObjectMetadata(
                reference=ref,
                size=int(head.get("ContentLength", 0)),
                content_type=head.get("ContentType") or C.DEFAULT_CONTENT_TYPE,
                last_modified=head.get("LastModified"),
                etag=head.get("ETag", ""),
                custom_metadata=head.get("Metadata") or {},
                storage_class=head.get("StorageClass") or C.DEFAULT_STORAGE_CLASS,
                version_id=head.get("VersionId") or "",
            )
        )

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
        if max_keys <= 0:
            max_keys = C.DEFAULT_MAX_KEYS

        def list_page(client: Any) -> list[dict[str, Any]]:
            response = client.list_objects_v2(
                Bucket=bucket, Prefix=prefix, MaxKeys=max_keys
            )
            return response.get("Contents", [])

        # Listings do not report content types
        return (await self._call(connection, "ListObjectsV2", bucket, list_page)).map(
            lambda contents: [
                ObjectMetadata(
                    reference=ObjectReference(
                        bucket=bucket, key=item["Key"], connection=connection
                    ),
                    size=int(item.get("Size", 0)),
                    content_type="",
                    last_modified=item.get("LastModified"),
                    etag=item.get("ETag", ""),
                    storage_class=item.get("StorageClass") or C.DEFAULT_STORAGE_CLASS,
                )
                for item in contents
            ]
        )

    async def list_buckets(self, connection: str) -> Result[list[str], S3MeshError]:
        return (await self._call(
            connection,
            "ListBuckets",
            connection or self._default_connection or "<default>",
            lambda client: client.list_buckets(),
        )).map(lambda response: [b["Name"] for b in response.get("Buckets", [])])
