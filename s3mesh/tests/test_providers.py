"""
Unit Tests: Provider Adapters and Content Stream

Tests:
    - SimpleContentProvider defaults and size computation
    - SimpleMetadataProvider existence and ETag semantics
    - One-shot ContentStream reads
"""

import asyncio

import pytest

from s3mesh.core.errors import ErrorCode, UpstreamError
from s3mesh.core.types import Err, Ok
from s3mesh.integration.providers import (
    ContentStream,
    SimpleContentProvider,
    SimpleMetadataProvider,
)
from s3mesh.integration.reference import ObjectMetadata, ObjectReference


REF = ObjectReference(bucket="b", key="k")


class TestSimpleContentProvider:
    """Tests for SimpleContentProvider."""

    def test_get_content_delegates(self):
        async def fetch(ref):
            return Ok(f"body of {ref.key}".encode())

        provider = SimpleContentProvider(fetch)
        assert asyncio.run(provider.get_content(REF)).unwrap() == b"body of k"

    def test_default_content_type(self):
        async def fetch(ref):
            return Ok(b"")

        provider = SimpleContentProvider(fetch)
        assert asyncio.run(provider.get_content_type(REF)).unwrap() == "application/octet-stream"

    def test_custom_content_type(self):
        async def fetch(ref):
            return Ok(b"")

        async def content_type(ref):
            return Ok("image/png")

        provider = SimpleContentProvider(fetch, get_content_type=content_type)
        assert asyncio.run(provider.get_content_type(REF)).unwrap() == "image/png"

    def test_size_without_size_function(self):
        """Size falls back to the length of the fetched body."""
        calls = []

        async def fetch(ref):
            calls.append(ref)
            return Ok(b"0123456789")

        provider = SimpleContentProvider(fetch)
        assert asyncio.run(provider.get_size(REF)).unwrap() == 10
        assert calls == [REF]

    def test_size_function_never_fetches_content(self):
        calls = []

        async def fetch(ref):
            calls.append(ref)
            return Ok(b"0123456789")

        async def size(ref):
            return Ok(1234)

        provider = SimpleContentProvider(fetch, get_size=size)
        assert asyncio.run(provider.get_size(REF)).unwrap() == 1234
        assert calls == []

    def test_size_propagates_fetch_error(self):
        error = UpstreamError.fetch_failed("GetObject", str(REF))

        async def fetch(ref):
            return Err(error)

        result = asyncio.run(SimpleContentProvider(fetch).get_size(REF))
        assert result.is_err()
        assert result.error is error

    def test_content_stream(self):
        async def fetch(ref):
            return Ok(b"streamed")

        stream = asyncio.run(SimpleContentProvider(fetch).get_content_stream(REF)).unwrap()
        assert isinstance(stream, ContentStream)
        assert stream.read() == b"streamed"


class TestSimpleMetadataProvider:
    """Tests for SimpleMetadataProvider."""

    def test_exists_true_on_success(self):
        async def fetch(ref):
            return Ok(ObjectMetadata(reference=ref))

        result = asyncio.run(SimpleMetadataProvider(fetch).exists(REF))
        assert result.is_ok()
        assert result.unwrap() is True

    @pytest.mark.parametrize("error", [
        UpstreamError.not_found("HeadObject", str(REF)),
        UpstreamError.fetch_failed("HeadObject", str(REF)),
    ])
    def test_exists_false_on_any_failure(self, error):
        """Missing and unreachable are indistinguishable; never an Err."""
        async def fetch(ref):
            return Err(error)

        result = asyncio.run(SimpleMetadataProvider(fetch).exists(REF))
        assert result.is_ok()
        assert result.unwrap() is False

    def test_get_etag(self):
        async def fetch(ref):
            return Ok(ObjectMetadata(reference=ref, etag='"abc"'))

        assert asyncio.run(SimpleMetadataProvider(fetch).get_etag(REF)).unwrap() == '"abc"'

    def test_get_etag_propagates_error(self):
        async def fetch(ref):
            return Err(UpstreamError.not_found("HeadObject", str(ref)))

        result = asyncio.run(SimpleMetadataProvider(fetch).get_etag(REF))
        assert result.is_err()
        assert result.error.code == ErrorCode.UPSTREAM_NOT_FOUND


class TestContentStream:
    """Tests for the one-shot reader."""

    def test_sequential_reads(self):
        stream = ContentStream(b"abcdef")
        assert stream.read(2) == b"ab"
        assert stream.read(3) == b"cde"
        assert stream.read() == b"f"
        assert stream.read() == b""

    def test_cannot_rewind(self):
        stream = ContentStream(b"abc")
        assert not stream.seekable()
        stream.read()
        with pytest.raises(OSError):
            stream.seek(0)

    def test_chunk_iteration(self):
        stream = ContentStream(b"abcdefg", chunk_size=3)
        assert list(stream) == [b"abc", b"def", b"g"]
        assert list(stream) == []

    def test_readinto(self):
        stream = ContentStream(b"xyz")
        buffer = bytearray(5)
        assert stream.readinto(buffer) == 3
        assert bytes(buffer[:3]) == b"xyz"

    def test_closed_stream_rejects_reads(self):
        stream = ContentStream(b"abc")
        stream.close()
        assert stream.closed
        with pytest.raises(ValueError):
            stream.read()

    def test_context_manager(self):
        with ContentStream(b"abc") as stream:
            assert stream.read() == b"abc"
        assert stream.closed
