"""Explicit outcome values returned by service operations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    conflict = "conflict"
    not_found = "not_found"
    upstream_failure = "upstream_failure"
    invalid_argument = "invalid_argument"


@dataclass(slots=True, frozen=True)
class ServiceError:
    kind: ErrorKind
    message: str


@dataclass(slots=True, frozen=True)
class Result(Generic[T]):
    """Success or failure of a service operation.

    A result with a value and a ``warning`` is a partial success: the operation
    took effect but a non-essential step failed, and ``details`` carries the
    underlying error text.
    """

    value: T | None = None
    error: ServiceError | None = None
    message: str = ""
    warning: str | None = None
    details: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def partial(self) -> bool:
        return self.error is None and self.warning is not None

    @classmethod
    def success(cls, value: T, message: str = "") -> "Result[T]":
        return cls(value=value, message=message)

    @classmethod
    def partial_success(cls, value: T, warning: str, details: tuple[str, ...] = ()) -> "Result[T]":
        return cls(value=value, message=warning, warning=warning, details=details)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, details: tuple[str, ...] = ()) -> "Result[T]":
        return cls(error=ServiceError(kind, message), message=message, details=details)
