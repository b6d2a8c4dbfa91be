"""Paging for the home page's new arrivals strip."""

from __future__ import annotations

from typing import Generic, Sequence, TypeVar

T = TypeVar("T")

PAGE_SIZE = 3


class Carousel(Generic[T]):
    def __init__(self, items: Sequence[T], offset: int = 0, page_size: int = PAGE_SIZE) -> None:
        self.items = list(items)
        self.page_size = page_size
        if offset < 0 or offset >= len(self.items):
            offset = 0
        self.offset = offset

    @property
    def visible(self) -> list[T]:
        return self.items[self.offset : self.offset + self.page_size]

    @property
    def has_prev(self) -> bool:
        return self.offset > 0

    @property
    def has_next(self) -> bool:
        return self.offset + self.page_size < len(self.items)

    @property
    def next_offset(self) -> int:
        if self.offset + self.page_size >= len(self.items):
            return 0
        return self.offset + self.page_size

    @property
    def prev_offset(self) -> int:
        if self.offset - self.page_size < 0:
            return max(0, len(self.items) - self.page_size)
        return self.offset - self.page_size
