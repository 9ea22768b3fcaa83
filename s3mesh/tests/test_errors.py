"""
Unit Tests: Result and Error Types

Tests:
    - Ok/Err behaviour
    - Error factories, serialization and context
"""

import pytest

from s3mesh.core.errors import (
    AddressError,
    ErrorCode,
    ProviderError,
    UpstreamError,
)
from s3mesh.core.types import Err, Ok, Timestamp


class TestResult:
    """Tests for Ok and Err."""

    def test_ok(self):
        result = Ok(2)
        assert result.is_ok() and not result.is_err()
        assert result.map(lambda v: v * 3) == Ok(6)
        assert result.unwrap() == 2

    def test_err_map_is_identity(self):
        error = AddressError.no_default_bucket("k")
        result = Err(error)
        assert result.map(lambda v: v * 3) is result
        assert result.error is error

    def test_err_unwrap_raises(self):
        with pytest.raises(RuntimeError, match="ADDRESS_INVALID"):
            Err(AddressError.invalid_address("x", "bad")).unwrap()


class TestTimestamp:
    """Tests for Timestamp."""

    def test_ordering(self):
        assert Timestamp(1) < Timestamp(2)

    def test_isoformat(self):
        assert Timestamp(0).isoformat() == "1970-01-01T00:00:00+00:00"


class TestErrors:
    """Tests for the error hierarchy."""

    def test_invalid_address(self):
        error = AddressError.invalid_address("s3://", "empty bucket")
        assert error.code == ErrorCode.ADDRESS_INVALID
        assert error.context == {"address": "s3://", "reason": "empty bucket"}
        assert "ADDRESS_INVALID" in str(error)

    def test_unknown_connection_sorts_known(self):
        error = ProviderError.unknown_connection("x", ["b", "a"])
        assert error.code == ErrorCode.PROVIDER_UNKNOWN_CONNECTION
        assert error.context["known"] == ["a", "b"]

    def test_errors_are_exceptions(self):
        with pytest.raises(UpstreamError):
            raise UpstreamError.not_found("HeadObject", "s3://b/k")

    def test_to_dict(self):
        cause = TimeoutError("slow")
        data = UpstreamError.fetch_failed("GetObject", "s3://b/k", cause=cause).to_dict()
        assert data["code"] == "UPSTREAM_FETCH_FAILED"
        assert data["code_value"] == 3001
        assert data["cause"] == "TimeoutError: slow"
        assert data["context"] == {"operation": "GetObject", "target": "s3://b/k"}
        assert data["timestamp"].endswith("+00:00")

    def test_with_context_keeps_type_and_id(self):
        error = UpstreamError.not_found("HeadObject", "s3://b/k")
        enriched = error.with_context(attempt=2)
        assert type(enriched) is UpstreamError
        assert enriched.error_id == error.error_id
        assert enriched.context["attempt"] == 2
        assert "attempt" not in error.context
