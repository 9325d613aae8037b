"""
Bounded Ranking Collections
============================

:class:`TopNCollector` keeps the *N* smallest items (by a key function)
out of an arbitrarily long stream, iterable in ascending order.

The held items are kept in a plain sorted list maintained with
:func:`bisect.insort`; *N* is small (a handful of ranked candidates), so
insertion cost is dominated by the comparison, not the list shift.
"""

from __future__ import annotations

import bisect
import itertools
import threading
from typing import Any, Callable, Generic, Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")


class TopNCollector(Generic[T]):
    """Retains the *capacity* items with the smallest key seen so far.

    Items whose keys compare equal are ordered by arrival, so the held
    set is deterministic for a fixed insertion order. All mutation goes
    through an internal lock; :meth:`maybe_add` is atomic with respect to
    concurrent callers.

    Usage::

        top = TopNCollector(3)
        for value in (3, 13, 1, 8, 25, 7):
            top.maybe_add(value)
        list(top)   # [1, 3, 7]

    Args:
        capacity: Maximum number of items held (must be >= 1).
        key:      Sort key; smaller is better. Defaults to the item itself.
    """

    def __init__(
        self,
        capacity: int,
        key: Optional[Callable[[T], Any]] = None,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._key: Callable[[T], Any] = key if key is not None else (lambda item: item)
        self._entries: list[tuple[Any, int, T]] = []
        self._sequence = itertools.count()
        self._lock = threading.Lock()

    def maybe_add(self, item: T) -> Optional[T]:
        """Offer *item* to the collection.

        Returns:
            ``None`` if the item was added while there was room, the
            displaced former worst item if *item* replaced it, or *item*
            itself if it was rejected.
        """
        item_key = self._key(item)
        with self._lock:
            if len(self._entries) < self._capacity:
                bisect.insort(self._entries, (item_key, next(self._sequence), item))
                return None

            worst_key, _, worst = self._entries[-1]
            if item_key < worst_key:
                self._entries.pop()
                bisect.insort(self._entries, (item_key, next(self._sequence), item))
                return worst

        return item

    def extend(self, items: Iterable[T]) -> None:
        """Offer every item of *items* in order."""
        for item in items:
            self.maybe_add(item)

    # ------------------------------------------------------------------ #
    #  Inspection
    # ------------------------------------------------------------------ #

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def best(self) -> Optional[T]:
        """The item with the smallest key, or ``None`` when empty."""
        with self._lock:
            return self._entries[0][2] if self._entries else None

    @property
    def worst(self) -> Optional[T]:
        """The held item with the largest key, or ``None`` when empty."""
        with self._lock:
            return self._entries[-1][2] if self._entries else None

    def to_list(self) -> list[T]:
        """Snapshot of the held items in ascending key order."""
        with self._lock:
            return [entry[2] for entry in self._entries]

    def __iter__(self) -> Iterator[T]:
        return iter(self.to_list())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        return f"TopNCollector(capacity={self._capacity}, size={len(self)})"
