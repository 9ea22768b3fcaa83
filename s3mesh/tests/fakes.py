"""
Test doubles: instrumented providers, a manual clock and an in-memory
stand-in for a boto3 S3 client.
"""

from __future__ import annotations

import asyncio
import io
from datetime import datetime, timezone
from typing import Any, Optional

from botocore.exceptions import ClientError, EndpointConnectionError

from s3mesh.core.errors import S3MeshError, UpstreamError
from s3mesh.core.types import Err, Ok, Result
from s3mesh.integration.providers import ContentProvider, MetadataProvider
from s3mesh.integration.reference import ObjectMetadata, ObjectReference


class ManualClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingContentProvider(ContentProvider):
    """ContentProvider over a dict that counts every call."""

    def __init__(self, objects: Optional[dict[str, bytes]] = None, delay: float = 0.0) -> None:
        self.objects = dict(objects or {})
        self.delay = delay
        self.content_calls = 0
        self.type_calls = 0
        self.size_calls = 0
        self.fail_with: Optional[S3MeshError] = None

    async def get_content(self, ref: ObjectReference) -> Result[bytes, S3MeshError]:
        self.content_calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            return Err(self.fail_with)
        if ref.cache_key not in self.objects:
            return Err(UpstreamError.not_found("GetObject", str(ref)))
        return Ok(self.objects[ref.cache_key])

    async def get_content_type(self, ref: ObjectReference) -> Result[str, S3MeshError]:
        self.type_calls += 1
        return Ok("text/plain")

    async def get_size(self, ref: ObjectReference) -> Result[int, S3MeshError]:
        self.size_calls += 1
        return Ok(len(self.objects.get(ref.cache_key, b"")))


class CountingMetadataProvider(MetadataProvider):
    """MetadataProvider that fabricates a fresh snapshot per call."""

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.calls = 0
        self.fail_with: Optional[S3MeshError] = None

    async def get_metadata(
        self, ref: ObjectReference
    ) -> Result[ObjectMetadata, S3MeshError]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            return Err(self.fail_with)
        return Ok(ObjectMetadata(
            reference=ref,
            size=42,
            content_type="application/json",
            etag=f'"etag-{self.calls}"',
            custom_metadata={"owner": "tests"},
            storage_class="STANDARD",
        ))


def _client_error(code: str, status: int, operation: str) -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": code},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


class FakeS3Client:
    """Subset of the boto3 S3 client API backed by dicts."""

    LAST_MODIFIED = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __init__(self, buckets: Optional[dict[str, dict[str, bytes]]] = None) -> None:
        self.buckets: dict[str, dict[str, bytes]] = {
            name: dict(objects) for name, objects in (buckets or {}).items()
        }
        self.content_types: dict[tuple[str, str], str] = {}
        self.calls: list[str] = []
        self.offline = False

    def _object(self, bucket: str, key: str, operation: str) -> bytes:
        if self.offline:
            raise EndpointConnectionError(endpoint_url="https://s3.test")
        if bucket not in self.buckets:
            raise _client_error("NoSuchBucket", 404, operation)
        if key not in self.buckets[bucket]:
            # HeadObject reports a bare 404 without an S3 error code
            code = "404" if operation == "HeadObject" else "NoSuchKey"
            raise _client_error(code, 404, operation)
        return self.buckets[bucket][key]

    def get_object(self, Bucket: str, Key: str) -> dict[str, Any]:
        self.calls.append("get_object")
        return {"Body": io.BytesIO(self._object(Bucket, Key, "GetObject"))}

    def head_object(self, Bucket: str, Key: str) -> dict[str, Any]:
        self.calls.append("head_object")
        data = self._object(Bucket, Key, "HeadObject")
        return {
            "ContentLength": len(data),
            "ContentType": self.content_types.get((Bucket, Key), "binary/octet-stream"),
            "LastModified": self.LAST_MODIFIED,
            "ETag": '"d41d8cd98f00b204e9800998ecf8427e"',
            "Metadata": {"source": "fake"},
        }

    def _store(self, bucket: str, key: str, data: bytes, content_type: str, operation: str) -> None:
        if self.offline:
            raise EndpointConnectionError(endpoint_url="https://s3.test")
        if bucket not in self.buckets:
            raise _client_error("NoSuchBucket", 404, operation)
        self.buckets[bucket][key] = data
        self.content_types[(bucket, key)] = content_type

    def put_object(
        self,
        Bucket: str,
        Key: str,
        Body: Any,
        ContentType: str,
        ContentLength: Optional[int] = None,
    ) -> dict[str, Any]:
        self.calls.append("put_object")
        if hasattr(Body, "read"):
            Body = Body.read() if ContentLength is None else Body.read(ContentLength)
        self._store(Bucket, Key, bytes(Body), ContentType, "PutObject")
        return {"ETag": '"new"'}

    def upload_fileobj(
        self, Fileobj: Any, Bucket: str, Key: str, ExtraArgs: Optional[dict] = None
    ) -> None:
        self.calls.append("upload_fileobj")
        content_type = (ExtraArgs or {}).get("ContentType", "binary/octet-stream")
        self._store(Bucket, Key, Fileobj.read(), content_type, "PutObject")

    def list_objects_v2(self, Bucket: str, Prefix: str, MaxKeys: int) -> dict[str, Any]:
        self.calls.append("list_objects_v2")
        if Bucket not in self.buckets:
            raise _client_error("NoSuchBucket", 404, "ListObjectsV2")
        keys = sorted(k for k in self.buckets[Bucket] if k.startswith(Prefix))[:MaxKeys]
        return {
            "KeyCount": len(keys),
            "Contents": [
                {
                    "Key": key,
                    "Size": len(self.buckets[Bucket][key]),
                    "LastModified": self.LAST_MODIFIED,
                    "ETag": '"etag"',
                    "StorageClass": "STANDARD_IA",
                }
                for key in keys
            ],
        }

    def list_buckets(self) -> dict[str, Any]:
        self.calls.append("list_buckets")
        if self.offline:
            raise EndpointConnectionError(endpoint_url="https://s3.test")
        return {"Buckets": [{"Name": name} for name in sorted(self.buckets)]}
