from latestmap.common import Box, Impossible, Ordering
from latestmap.index import KeyTree, OrderIndex
from latestmap.latest import LatestMap
from latestmap.store import ValueStore

__all__ = [
    "Box",
    "Impossible",
    "KeyTree",
    "LatestMap",
    "Ordering",
    "OrderIndex",
    "ValueStore",
]
