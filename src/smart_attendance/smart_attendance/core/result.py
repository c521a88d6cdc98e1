from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from .enums import ErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class AttendanceError:
    kind: ErrorKind
    message: str
    cause: Optional[BaseException] = None


@dataclass(frozen=True)
class Result(Generic[T]):
    """Tagged result: exactly one of ``value`` / ``error`` is meaningful."""

    value: Optional[T] = None
    error: Optional[AttendanceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error else None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, cause: Optional[BaseException] = None) -> "Result[T]":
        return cls(error=AttendanceError(kind=kind, message=message, cause=cause))
