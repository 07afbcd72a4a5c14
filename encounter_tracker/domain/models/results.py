"""Uniform outcome and paging envelopes returned by every data-service call."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    NONE = "none"
    VALIDATION_ERROR = "validation_error"
    UNAUTHORIZED_ACCESS = "unauthorized_access"
    NOT_FOUND = "not_found"
    STORE_ERROR = "store_error"
    CONCURRENCY_ERROR = "concurrency_error"
    OPERATION_CANCELLED = "operation_cancelled"
    UNKNOWN_ERROR = "unknown_error"


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    """Tagged success/failure outcome.

    Branch on is_success before reading data: a failure always carries
    data=None together with an error message and kind.
    """

    is_success: bool
    data: T | None = None
    error_message: str | None = None
    error_kind: ErrorKind = ErrorKind.NONE

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        return cls(is_success=True, data=data)

    @classmethod
    def failure(cls, message: str, kind: ErrorKind) -> ServiceResult[T]:
        if kind is ErrorKind.NONE:
            raise ValueError("A failure needs an error kind")
        return cls(is_success=False, error_message=message, error_kind=kind)

    def unwrap(self) -> T:
        """Return data, raising RuntimeError for a failure."""
        if not self.is_success:
            raise RuntimeError(f"{self.error_kind.value}: {self.error_message}")
        return self.data  # type: ignore[return-value]


@dataclass(frozen=True)
class PagedResult(Generic[T]):
    """One page of a filtered set.

    total_count is the size of the whole filtered set, not of this page.
    """

    items: list[T] = field(default_factory=list)
    total_count: int = 0
    page: int = 1
    page_size: int = 20

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size) if self.page_size else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1
