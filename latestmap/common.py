"""Shared primitives for the latestmap containers.

Comparison helpers used by the ordered key index, the mutable cell handed out
for in-place value access, and the sizing/iteration mixins.
"""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Generator, List

__all__ = [
    "Box",
    "Impossible",
    "Iterating",
    "Ordering",
    "Sized",
    "compare",
]


class Impossible(Exception):
    """Exception raised when encountering theoretically impossible states.

    Raised for unreachable tree shapes and for index/store divergence
    detected by ``LatestMap.check``.
    """

    pass


@dataclass
class Box[T]:
    """Mutable cell holding a single stored value.

    The value store keeps every value in a box and hands the box itself out
    from ``get_mut``, so assigning ``box.value`` (or applying an in-place
    operator to the box) writes straight through to the container.
    """

    value: T

    def __iadd__(self, other):
        """Defer += operator to the underlying value."""
        self.value = self.value + other
        return self

    def __isub__(self, other):
        """Defer -= operator to the underlying value."""
        self.value = self.value - other
        return self

    def __imul__(self, other):
        """Defer *= operator to the underlying value."""
        self.value = self.value * other
        return self

    def __ior__(self, other):
        """Defer |= operator to the underlying value."""
        self.value = self.value | other
        return self

    def __iand__(self, other):
        """Defer &= operator to the underlying value."""
        self.value = self.value & other
        return self


class Sized(metaclass=ABCMeta):
    @abstractmethod
    def size(self) -> int: ...

    def null(self) -> bool:
        return self.size() == 0

    def __bool__(self) -> bool:
        return not self.null()

    def __len__(self) -> int:
        return self.size()


class Iterating[U](metaclass=ABCMeta):
    @abstractmethod
    def iter(self) -> Generator[U]: ...

    def list(self) -> List[U]:
        return list(self.iter())

    def __iter__(self) -> Generator[U]:
        return self.iter()


class Ordering(Enum):
    """Enumeration representing the result of a comparison operation."""

    Lt = -1
    Eq = 0
    Gt = 1


def compare[T](a: T, b: T) -> Ordering:
    """Compare two keys and return their ordering relationship.

    Only ``__eq__`` and ``__lt__`` are consulted, so any key type with a
    consistent strict total order works. An inconsistent order is not
    detected here; it silently yields wrong floor results.

    Args:
        a: First key.
        b: Second key.

    Returns:
        Ordering of ``a`` relative to ``b``.
    """
    # Operators, not dunder calls, so mixed numeric keys use reflected methods
    if a == b:
        return Ordering.Eq
    elif a < b:  # type: ignore[operator]
        return Ordering.Lt
    else:
        return Ordering.Gt
