"""
Live (ephemeral) index structures
"""

from stquery._internal.index.base import EphemeralIndex, create_index, ephemeral_index
from stquery._internal.index.interval_tree import IntervalIndex
from stquery._internal.index.rtree import RTreeIndex

__all__ = [
    "EphemeralIndex",
    "IntervalIndex",
    "RTreeIndex",
    "create_index",
    "ephemeral_index",
]
