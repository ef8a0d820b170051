"""
Paginated result containers.

A Page wraps one slice of a larger result set together with the request
that produced it and the total number of elements across all pages.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Generic, Iterator, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    """Zero-based page request."""

    page_number: int = 0
    page_size: int = 20
    sort: tuple[str, ...] = ()

    def __post_init__(self):
        if self.page_number < 0:
            raise ValueError("page_number must not be negative")
        if self.page_size < 1:
            raise ValueError("page_size must be at least 1")

    @property
    def offset(self) -> int:
        return self.page_number * self.page_size


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of content plus the paging metadata."""

    content: list[T] = field(default_factory=list)
    pageable: PageRequest = field(default_factory=PageRequest)
    total_elements: int = 0

    @classmethod
    def empty(cls, pageable: PageRequest | None = None) -> Page[Any]:
        return cls(content=[], pageable=pageable or PageRequest(), total_elements=0)

    @property
    def number_of_elements(self) -> int:
        return len(self.content)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.pageable.page_size)

    @property
    def is_empty(self) -> bool:
        return not self.content

    def __iter__(self) -> Iterator[T]:
        return iter(self.content)
