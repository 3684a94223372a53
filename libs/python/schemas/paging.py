"""Generic page envelope returned by list endpoints."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PageView(BaseModel, Generic[T]):
    data: list[T] = Field(default_factory=list)
    current_page: int
    per_page: int
    total_count: int
    total_page_count: int
