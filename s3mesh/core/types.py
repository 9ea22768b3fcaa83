"""
Core Types for s3mesh

``Result`` is the return type of every resolver and provider operation:
``Ok(value)`` on success, ``Err(error)`` with an ``S3MeshError`` otherwise.
Store failures never unwind the stack; only cancellation does.

    result = await provider.get_content(ref)
    if result.is_err():
        log(result.error)
    else:
        use(result.value)
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Generic, Literal, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


# =============================================================================
# RESULT
# =============================================================================
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying ``value``."""

    value: T

    def is_ok(self) -> Literal[True]:
        return True

    def is_err(self) -> Literal[False]:
        return False

    def unwrap(self) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        """Transform the value, keeping the Ok wrapper."""
        return Ok(fn(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed outcome carrying ``error``, passed along untouched by ``map``."""

    error: E

    def is_ok(self) -> Literal[False]:
        return False

    def is_err(self) -> Literal[True]:
        return True

    def unwrap(self) -> Any:
        """
        Unwrapping a failure is a programming error.

        Raises:
            RuntimeError: always, mentioning the carried error
        """
        raise RuntimeError(f"Called unwrap() on Err: {self.error}")

    def map(self, fn: Callable[[Any], U]) -> Err[E]:
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[E]]


# =============================================================================
# TIMESTAMP
# =============================================================================
@dataclass(frozen=True, slots=True, order=True)
class Timestamp:
    """
    Wall-clock instant in nanoseconds since the Unix epoch.

    Stamps errors for correlation with log records. Cache ages use a
    monotonic clock instead.
    """

    nanos: int

    @classmethod
    def now(cls) -> Timestamp:
        return cls(nanos=time.time_ns())

    def to_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.nanos / 1e9, tz=timezone.utc)

    def isoformat(self) -> str:
        return self.to_datetime().isoformat()
