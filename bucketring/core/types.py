"""
Core Types for the Bucket Ring

- Ok/Err: Result values returned by configuration loading and validation,
  so a bad environment is reported instead of raised
- Position: a point on the ring
- BytesConverter / HashFunction: the collaborators a ring is built from

Positions are plain bytes. Python orders bytes lexicographically as
unsigned octets with a strict prefix first, which is exactly the ring
order, so no wrapper type is needed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Literal, Protocol, TypeVar, Union, runtime_checkable

T = TypeVar("T")
E = TypeVar("E")
T_contra = TypeVar("T_contra", contravariant=True)


# =============================================================================
# RESULT
# =============================================================================
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome holding value."""

    value: T

    def is_ok(self) -> Literal[True]:
        return True

    def is_err(self) -> Literal[False]:
        return False

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed outcome holding a description of what went wrong."""

    error: E

    def is_ok(self) -> Literal[False]:
        return False

    def is_err(self) -> Literal[True]:
        return True

    def unwrap(self) -> Any:
        """
        Raises:
            RuntimeError: always; check is_ok() first
        """
        raise RuntimeError(f"unwrap() on Err: {self.error}")


Result = Union[Ok[T], Err[E]]


# =============================================================================
# RING POSITIONS
# =============================================================================
Position = bytes


# =============================================================================
# COLLABORATORS
# =============================================================================
@runtime_checkable
class BytesConverter(Protocol[T_contra]):
    """Encodes a bucket or member identity into bytes before hashing."""

    def __call__(self, value: T_contra) -> bytes: ...


@runtime_checkable
class HashFunction(Protocol):
    """
    Deterministic bytes -> bytes hash producing ring positions.

    Called concurrently from every thread that touches the ring, so it
    must not keep mutable state.
    """

    def __call__(self, data: bytes) -> bytes: ...
