"""Floor-lookup map answering "what was the value as of key K" queries.

``LatestMap`` keeps a hash-based ``ValueStore`` and a sorted ``OrderIndex``
in lockstep: the index holds exactly the keys that have a stored value.
Queries resolve a target key first (the key itself for exact operations,
its floor for the ``*_latest`` operations) and then touch the store.

Example:
    >>> from latestmap import LatestMap
    >>> configs = LatestMap.mk([(1, "a"), (20, "b")])
    >>> configs.get_latest(37)
    'b'
    >>> configs.get_latest(0) is None
    True
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple, Type, override

from latestmap.common import Box, Impossible, Sized
from latestmap.index import OrderIndex
from latestmap.store import ValueStore

__all__ = ["LatestMap"]


class LatestMap[K, V](Sized):
    """Map from ordered keys to values with floor ("as of") lookup.

    Keys need a consistent strict total order and a stable hash. An
    inconsistent order is not detected and corrupts floor results.

    The container does no locking: a single owner mutates it, and concurrent
    readers are only safe while no mutation is in progress.
    """

    def __init__(self):
        self._store: ValueStore[K, V] = ValueStore()
        self._index: OrderIndex[K] = OrderIndex()

    @staticmethod
    def empty(
        _kty: Optional[Type[K]] = None, _vty: Optional[Type[V]] = None
    ) -> LatestMap[K, V]:
        """Create an empty map.

        Args:
            _kty: Optional key type hint (unused).
            _vty: Optional value type hint (unused).

        Returns:
            A new empty map.
        """
        return LatestMap[K, V]()

    @staticmethod
    def mk(pairs: Iterable[Tuple[K, V]]) -> LatestMap[K, V]:
        """Create a map by inserting each pair in order.

        Later pairs overwrite earlier pairs with the same key.
        """
        latest_map: LatestMap[K, V] = LatestMap()
        for key, value in pairs:
            latest_map.insert(key, value)
        return latest_map

    @override
    def size(self) -> int:
        """Number of stored entries.

        Time Complexity: O(1)
        """
        return self._store.size()

    def insert(self, key: K, value: V) -> None:
        """Insert a value, overwriting any value stored under the same key.

        Time Complexity: O(log n)

        Args:
            key: The key to insert or update.
            value: The value to associate with the key.
        """
        # The index update either fully succeeds or leaves the old root
        previous = self._index.tree()
        self._index.insert(key)
        try:
            self._store.put(key, value)
        except Exception:
            self._index.reset(previous)
            raise

    def get_latest(self, key: K) -> Optional[V]:
        """Get the value stored under the greatest key <= ``key``.

        An exact match takes precedence. Use ``get_latest_with_key`` when
        stored values may themselves be None.

        Time Complexity: O(log n)

        Args:
            key: The query key.

        Returns:
            The floor entry's value, or None if every stored key is greater
            than ``key``.
        """
        target = self._index.floor(key)
        if target is None:
            return None
        return self._store.get(target)

    def get_latest_with_key(self, key: K) -> Optional[Tuple[K, V]]:
        """Like ``get_latest`` but also returns the resolved key.

        Returns:
            None if no stored key is <= ``key``, otherwise a tuple of the
            resolved key and its value.
        """
        target = self._index.floor(key)
        if target is None:
            return None
        box = self._store.get_mut(target)
        if box is None:
            raise Impossible
        return (target, box.value)

    def get_last_with_key(self) -> Optional[Tuple[K, V]]:
        """Get the entry with the greatest key.

        Time Complexity: O(log n)

        Returns:
            None if the map is empty, otherwise a tuple of the greatest key
            and its value.
        """
        target = self._index.max()
        if target is None:
            return None
        box = self._store.get_mut(target)
        if box is None:
            raise Impossible
        return (target, box.value)

    def get_mut(self, key: K) -> Optional[Box[V]]:
        """Get a mutable handle to the value stored under exactly ``key``.

        No floor resolution is applied. Assigning ``handle.value`` (or an
        in-place operator such as ``handle += 1``) updates the stored value.

        Args:
            key: The exact key.

        Returns:
            The value's box, or None if ``key`` was never inserted or has
            been removed.
        """
        return self._store.get_mut(key)

    def contains_key(self, key: K) -> bool:
        """Check whether exactly ``key`` is stored (no floor resolution)."""
        return self._index.contains(key)

    def __contains__(self, key: K) -> bool:
        return self.contains_key(key)

    def pop_latest(self, key: K) -> Optional[Tuple[K, V]]:
        """Remove the entry ``get_latest(key)`` would return.

        This is the floor entry for ``key``, not necessarily the entry with
        the greatest key overall.

        Time Complexity: O(log n)

        Args:
            key: The query key.

        Returns:
            None if nothing was removed, otherwise a tuple of the removed
            key and its value.
        """
        target = self._index.floor(key)
        if target is None:
            logging.debug("pop_latest(%s): no entry at or below key", key)
            return None
        self._index.remove(target)
        box = self._store.get_mut(target)
        if box is None:
            raise Impossible
        self._store.remove(target)
        logging.debug("pop_latest(%s): removed entry %s", key, target)
        return (target, box.value)

    def copy(self) -> LatestMap[K, V]:
        """Independent map holding the same entries.

        Values are shared, boxes are not: ``get_mut`` handles from one map
        never affect the other.
        """
        latest_map: LatestMap[K, V] = LatestMap()
        latest_map._store = self._store.copy()
        latest_map._index = self._index.copy()
        return latest_map

    def check(self) -> None:
        """Verify that the index and the store hold the same key set.

        Also checks that the index enumerates keys in strictly ascending
        order.

        Raises:
            Impossible: If the two structures have diverged.
        """
        index_keys: List[K] = self._index.list()
        for prev, cur in zip(index_keys, index_keys[1:]):
            if not prev < cur:
                logging.error("index keys out of order: %s before %s", prev, cur)
                raise Impossible
        if len(index_keys) != self._store.size():
            logging.error(
                "index holds %d keys but store holds %d",
                len(index_keys),
                self._store.size(),
            )
            raise Impossible
        for key in self._store.keys():
            if not self._index.contains(key):
                logging.error("stored key %s is missing from the index", key)
                raise Impossible

    def __repr__(self) -> str:
        entries = ", ".join(
            f"{key!r}: {self._store.get(key)!r}" for key in self._index.iter()
        )
        return f"LatestMap({{{entries}}})"
