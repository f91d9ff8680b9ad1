"""A small least-recently-used cache."""

from __future__ import annotations

from collections import OrderedDict
from typing import Generic, Hashable, Optional, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class LRUCache(Generic[K, V]):
    """Mapping of bounded size that evicts the least recently used key.

    Only :meth:`find` counts as a use; inserting a key that is already
    present leaves the cache unchanged.
    """

    def __init__(self, capacity: int = 80) -> None:
        self.capacity = capacity
        # Most recently used keys live at the end.
        self._data: OrderedDict[K, V] = OrderedDict()

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def insert(self, key: K, value: V) -> Optional[V]:
        """Store ``value`` under a new ``key``.

        Returns the stored value, or ``None`` if the key was already present.
        """
        if key in self._data:
            return None
        if len(self._data) >= self.capacity and self._data:
            self._data.popitem(last=False)
        self._data[key] = value
        return value

    def find(self, key: K) -> Optional[V]:
        """Return the value for ``key`` and mark it most recently used."""
        if key not in self._data:
            return None
        self._data.move_to_end(key)
        return self._data[key]

    def erase(self, key: K) -> None:
        """Remove ``key`` if it is present."""
        self._data.pop(key, None)

    def clear(self) -> None:
        """Remove every entry."""
        self._data.clear()