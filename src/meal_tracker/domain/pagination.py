"""Paged API results."""

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    """One page of items with the number of pages the server reports."""

    items: tuple[T, ...]
    page_count: int

    @classmethod
    def from_server_page(
        cls, reported_total_count: int, results_per_page: int, items: Sequence[T]
    ) -> "PaginatedResult[T]":
        """Build a page from the server's total count and the page items."""
        if results_per_page <= 0:
            raise ValueError(f"results_per_page must be positive: {results_per_page}")
        if reported_total_count < 0:
            raise ValueError(
                f"reported_total_count must not be negative: {reported_total_count}"
            )
        page_count = math.ceil(reported_total_count / results_per_page)
        return cls(items=tuple(items), page_count=page_count)

    def has_page(self, page: int) -> bool:
        """Return True when a 1-based page number exists."""
        return 1 <= page <= self.page_count

    def map(self, func: Callable[[T], U]) -> "PaginatedResult[U]":
        """Transform the items while keeping the page count."""
        return PaginatedResult(
            items=tuple(func(item) for item in self.items),
            page_count=self.page_count,
        )


def query_params(page: int, results_per_page: int) -> list[tuple[str, str]]:
    """Return the limit/offset query parameters for a 1-based page."""
    if page < 1:
        raise ValueError(f"page must be at least 1: {page}")
    if results_per_page <= 0:
        raise ValueError(f"results_per_page must be positive: {results_per_page}")
    offset = (page - 1) * results_per_page
    return [("limit", str(results_per_page)), ("offset", str(offset))]
