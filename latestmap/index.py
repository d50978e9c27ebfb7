"""Sorted key index based on weight-balanced trees.

``KeyTree`` is a persistent tree: every update returns a new root and shares
untouched subtrees with the old one. ``OrderIndex`` owns the current root and
exposes the mutable interface used by ``LatestMap``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generator, Iterable, Optional, Tuple, Type, override

from latestmap.common import Impossible, Iterating, Ordering, Sized, compare

__all__ = ["KeyTree", "OrderIndex"]


# sealed
class KeyTree[K](Sized, Iterating[K]):
    @staticmethod
    def empty(_kty: Optional[Type[K]] = None) -> KeyTree[K]:
        """Create an empty tree.

        Args:
            _kty: Optional key type hint (unused).

        Returns:
            The shared empty tree.
        """
        return _KTREE_EMPTY

    @staticmethod
    def mk(keys: Iterable[K]) -> KeyTree[K]:
        tree: KeyTree[K] = KeyTree.empty()
        for key in keys:
            tree = tree.insert(key)
        return tree

    @override
    def null(self) -> bool:
        match self:
            case KeyTreeEmpty():
                return True
            case KeyTreeBranch():
                return False
            case _:
                raise Impossible

    @override
    def size(self) -> int:
        match self:
            case KeyTreeEmpty():
                return 0
            case KeyTreeBranch(_size, _, _, _):
                return _size
            case _:
                raise Impossible

    @override
    def iter(self) -> Generator[K]:
        match self:
            case KeyTreeEmpty():
                return
            case KeyTreeBranch(_, left, key, right):
                yield from left.iter()
                yield key
                yield from right.iter()

    def insert(self, key: K) -> KeyTree[K]:
        """Insert a key, leaving the tree unchanged if it is already present.

        Time Complexity: O(log n)
        Space Complexity: O(log n) for path copying
        """
        return _ktree_insert(self, key)

    def remove(self, key: K) -> KeyTree[K]:
        """Remove a key, leaving the tree unchanged if it is absent.

        Time Complexity: O(log n)
        Space Complexity: O(log n) for path copying
        """
        return _ktree_remove(self, key)

    def contains(self, key: K) -> bool:
        """Exact membership test.

        Time Complexity: O(log n)
        """
        return _ktree_contains(self, key)

    def __contains__(self, key: K) -> bool:
        return self.contains(key)

    def floor(self, key: K) -> Optional[K]:
        """Find the greatest stored key that is less than or equal to ``key``.

        An exact match always wins. When every stored key is greater than
        ``key`` (or the tree is empty) there is no floor.

        Time Complexity: O(log n)
        Space Complexity: O(log n) for recursion stack

        Args:
            key: The query key.

        Returns:
            The floor key, or None if no stored key qualifies.
        """
        return _ktree_floor(self, key)

    def max(self) -> Optional[K]:
        """Greatest stored key, or None when empty.

        Time Complexity: O(log n)
        """
        return _ktree_max(self)

    def find_min(self) -> Optional[Tuple[K, KeyTree[K]]]:
        """Find the minimum key.

        Returns:
            None if the tree is empty, otherwise a tuple containing:
            - The minimum key
            - A new tree with the minimum key removed
        """
        return _ktree_find_min(self)


@dataclass(frozen=True, eq=False)
class KeyTreeEmpty[K](KeyTree[K]):
    pass


_KTREE_EMPTY: KeyTree[Any] = KeyTreeEmpty()


@dataclass(frozen=True, eq=False)
class KeyTreeBranch[K](KeyTree[K]):
    _size: int
    _left: KeyTree[K]
    _key: K
    _right: KeyTree[K]


def _ktree_insert[K](tree: KeyTree[K], key: K) -> KeyTree[K]:
    match tree:
        case KeyTreeEmpty():
            return KeyTreeBranch(1, _KTREE_EMPTY, key, _KTREE_EMPTY)
        case KeyTreeBranch(_, left, branch_key, right):
            cmp = compare(key, branch_key)
            if cmp == Ordering.Lt:
                new_left = _ktree_insert(left, key)
                if new_left is left:
                    return tree
                return _ktree_balance(new_left, branch_key, right)
            elif cmp == Ordering.Gt:
                new_right = _ktree_insert(right, key)
                if new_right is right:
                    return tree
                return _ktree_balance(left, branch_key, new_right)
            else:
                # Key already present, share the existing tree
                return tree
        case _:
            raise Impossible


def _ktree_remove[K](tree: KeyTree[K], key: K) -> KeyTree[K]:
    match tree:
        case KeyTreeEmpty():
            return tree
        case KeyTreeBranch(_, left, branch_key, right):
            cmp = compare(key, branch_key)
            if cmp == Ordering.Lt:
                new_left = _ktree_remove(left, key)
                if new_left is left:
                    return tree
                return _ktree_balance(new_left, branch_key, right)
            elif cmp == Ordering.Gt:
                new_right = _ktree_remove(right, key)
                if new_right is right:
                    return tree
                return _ktree_balance(left, branch_key, new_right)
            else:
                return _ktree_join(left, right)
        case _:
            raise Impossible


def _ktree_join[K](left: KeyTree[K], right: KeyTree[K]) -> KeyTree[K]:
    """Join two trees where every key in left is smaller than every key in right."""
    match (left, right):
        case (KeyTreeEmpty(), _):
            return right
        case (_, KeyTreeEmpty()):
            return left
        case (KeyTreeBranch(), KeyTreeBranch()):
            # Successor becomes the new root
            min_result = _ktree_find_min(right)
            if min_result is None:
                raise Impossible
            min_key, new_right = min_result
            return _ktree_balance(left, min_key, new_right)
        case _:
            raise Impossible


def _ktree_contains[K](tree: KeyTree[K], key: K) -> bool:
    match tree:
        case KeyTreeEmpty():
            return False
        case KeyTreeBranch(_, left, branch_key, right):
            cmp = compare(key, branch_key)
            if cmp == Ordering.Lt:
                return _ktree_contains(left, key)
            elif cmp == Ordering.Gt:
                return _ktree_contains(right, key)
            else:
                return True
        case _:
            raise Impossible


def _ktree_floor[K](tree: KeyTree[K], key: K) -> Optional[K]:
    match tree:
        case KeyTreeEmpty():
            return None
        case KeyTreeBranch(_, left, branch_key, right):
            cmp = compare(key, branch_key)
            if cmp == Ordering.Lt:
                # Everything at or right of this node is too large
                return _ktree_floor(left, key)
            elif cmp == Ordering.Gt:
                # This node qualifies unless a closer key sits to the right
                found = _ktree_floor(right, key)
                return branch_key if found is None else found
            else:
                return branch_key
        case _:
            raise Impossible


def _ktree_max[K](tree: KeyTree[K]) -> Optional[K]:
    match tree:
        case KeyTreeEmpty():
            return None
        case KeyTreeBranch(_, _, key, right):
            if right.null():
                return key
            return _ktree_max(right)
        case _:
            raise Impossible


def _ktree_find_min[K](tree: KeyTree[K]) -> Optional[Tuple[K, KeyTree[K]]]:
    match tree:
        case KeyTreeEmpty():
            return None
        case KeyTreeBranch(_, left, key, right):
            if left.null():
                return (key, right)
            else:
                min_result = _ktree_find_min(left)
                if min_result is None:
                    raise Impossible
                min_key, new_left = min_result
                return (min_key, _ktree_balance(new_left, key, right))
        case _:
            raise Impossible


_DELTA = 3
_RATIO = 2


def _ktree_balance[K](left: KeyTree[K], key: K, right: KeyTree[K]) -> KeyTree[K]:
    left_size = left.size()
    right_size = right.size()
    total_size = left_size + 1 + right_size

    # Weight-balanced tree invariant: unless the node has at most one child
    # entry, neither subtree is more than _DELTA times larger than the other
    if left_size + right_size > 1:
        if left_size > _DELTA * right_size:
            match left:
                case KeyTreeBranch(_, left_left, left_key, left_right):
                    if left_right.size() < _RATIO * left_left.size():
                        # Single rotation right
                        return _ktree_node(
                            left_left, left_key, _ktree_node(left_right, key, right)
                        )
                    match left_right:
                        case KeyTreeBranch(_, lrl, left_right_key, lrr):
                            # Double rotation left-right
                            return _ktree_node(
                                _ktree_node(left_left, left_key, lrl),
                                left_right_key,
                                _ktree_node(lrr, key, right),
                            )
        elif right_size > _DELTA * left_size:
            match right:
                case KeyTreeBranch(_, right_left, right_key, right_right):
                    if right_left.size() < _RATIO * right_right.size():
                        # Single rotation left
                        return _ktree_node(
                            _ktree_node(left, key, right_left), right_key, right_right
                        )
                    match right_left:
                        case KeyTreeBranch(_, rll, right_left_key, rlr):
                            # Double rotation right-left
                            return _ktree_node(
                                _ktree_node(left, key, rll),
                                right_left_key,
                                _ktree_node(rlr, right_key, right_right),
                            )

    return KeyTreeBranch(total_size, left, key, right)


def _ktree_node[K](left: KeyTree[K], key: K, right: KeyTree[K]) -> KeyTree[K]:
    """Build a branch without rebalancing, computing its size."""
    return KeyTreeBranch(left.size() + 1 + right.size(), left, key, right)


class OrderIndex[K](Sized, Iterating[K]):
    """Mutable owner of the sorted key set.

    Keys are enumerated in ascending order with no duplicates. Exact
    membership (``contains``) and floor search (``floor``) are deliberately
    separate entry points.
    """

    def __init__(self):
        self._tree: KeyTree[K] = KeyTree.empty()

    @override
    def size(self) -> int:
        return self._tree.size()

    @override
    def iter(self) -> Generator[K]:
        return self._tree.iter()

    def insert(self, key: K) -> None:
        self._tree = self._tree.insert(key)

    def contains(self, key: K) -> bool:
        return self._tree.contains(key)

    def __contains__(self, key: K) -> bool:
        return self.contains(key)

    def remove(self, key: K) -> None:
        self._tree = self._tree.remove(key)

    def floor(self, key: K) -> Optional[K]:
        return self._tree.floor(key)

    def max(self) -> Optional[K]:
        return self._tree.max()

    def tree(self) -> KeyTree[K]:
        """Current persistent root, as of this call."""
        return self._tree

    def reset(self, tree: KeyTree[K]) -> None:
        """Replace the current root, e.g. with one previously taken from ``tree``."""
        self._tree = tree

    def copy(self) -> OrderIndex[K]:
        """Independent index sharing the current tree.

        Time Complexity: O(1)
        """
        index: OrderIndex[K] = OrderIndex()
        index._tree = self._tree
        return index
