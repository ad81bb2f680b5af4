# src/nav2d/heap.py
"""
Fixed-capacity binary heap for the A* open set.

Items carry their own slot index (heap_index), which gives O(1)
membership tests and lets a caller re-sift an item after its priority
improves. heapq cannot do either without a side table, hence this class.

Ordering comes from the item: a.compare_to(b) > 0 means a has higher
priority and belongs closer to the root.
"""

from __future__ import annotations

from typing import Generic, List, Optional, Protocol, TypeVar


class HeapItem(Protocol):
    heap_index: int

    def compare_to(self, other) -> int:  # noqa: ANN001
        ...


T = TypeVar("T", bound=HeapItem)


class Heap(Generic[T]):
    """Max-priority binary heap over HeapItem objects."""

    def __init__(self, max_size: int) -> None:
        if max_size < 0:
            raise ValueError(f"Heap size must be >= 0, got {max_size}")
        self._items: List[Optional[T]] = [None] * max_size
        self._count = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def count(self) -> int:
        return self._count

    def add(self, item: T) -> None:
        if self._count >= len(self._items):
            raise IndexError(f"Heap is full (capacity {len(self._items)})")
        item.heap_index = self._count
        self._items[self._count] = item
        self._sort_up(item)
        self._count += 1

    def remove_first(self) -> T:
        if self._count == 0:
            raise IndexError("remove_first on an empty heap")

        first = self._items[0]
        self._count -= 1

        last = self._items[self._count]
        self._items[self._count] = None
        if self._count > 0:
            self._items[0] = last
            last.heap_index = 0  # type: ignore[union-attr]
            self._sort_down(last)  # type: ignore[arg-type]
        else:
            self._items[0] = None
        return first  # type: ignore[return-value]

    def update_item(self, item: T) -> None:
        """Re-sift an item whose priority just improved."""
        self._sort_up(item)

    def contains(self, item: T) -> bool:
        index = item.heap_index
        return 0 <= index < self._count and self._items[index] is item

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _sort_up(self, item: T) -> None:
        while item.heap_index > 0:
            parent = self._items[(item.heap_index - 1) // 2]
            if item.compare_to(parent) > 0:
                self._swap(item, parent)  # type: ignore[arg-type]
            else:
                break

    def _sort_down(self, item: T) -> None:
        while True:
            left = item.heap_index * 2 + 1
            right = left + 1

            if left >= self._count:
                return

            swap_index = left
            if right < self._count:
                if self._items[left].compare_to(self._items[right]) < 0:  # type: ignore[union-attr]
                    swap_index = right

            if item.compare_to(self._items[swap_index]) < 0:
                self._swap(item, self._items[swap_index])  # type: ignore[arg-type]
            else:
                return

    def _swap(self, a: T, b: T) -> None:
        self._items[a.heap_index] = b
        self._items[b.heap_index] = a
        a.heap_index, b.heap_index = b.heap_index, a.heap_index
