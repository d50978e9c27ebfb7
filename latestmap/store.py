"""Exact-key value storage"""

from __future__ import annotations

from typing import Dict, Generator, Optional, override

from latestmap.common import Box, Sized

__all__ = ["ValueStore"]


class ValueStore[K, V](Sized):
    """Hash-based mapping from key to a boxed value.

    Every value lives in its own ``Box`` so ``get_mut`` can hand out a handle
    that writes through to the store. Overwriting a key reuses its box.
    """

    def __init__(self):
        self._data: Dict[K, Box[V]] = {}

    @override
    def size(self) -> int:
        return len(self._data)

    def put(self, key: K, value: V) -> None:
        box = self._data.get(key)
        if box is None:
            self._data[key] = Box(value)
        else:
            box.value = value

    def get(self, key: K) -> Optional[V]:
        box = self._data.get(key)
        return None if box is None else box.value

    def get_mut(self, key: K) -> Optional[Box[V]]:
        """Exact lookup returning the mutable cell for ``key``, or None."""
        return self._data.get(key)

    def remove(self, key: K) -> Optional[V]:
        box = self._data.pop(key, None)
        return None if box is None else box.value

    def contains(self, key: K) -> bool:
        return key in self._data

    def keys(self) -> Generator[K]:
        yield from self._data.keys()

    def copy(self) -> ValueStore[K, V]:
        """Copy with fresh boxes; the values themselves are shared."""
        store: ValueStore[K, V] = ValueStore()
        store._data = {key: Box(box.value) for key, box in self._data.items()}
        return store
