"""
Partitioner Protocols

A partitioner assigns records to numbered partitions and answers bounds
lookups for each partition. Query pruning only consumes the bounds lookup.
"""

from abc import ABC, abstractmethod
from typing import Tuple

from stquery.core.stobject import Interval, STObject

Bounds = Tuple[float, float, float, float]


class Partitioner(ABC):
    """Common partitioner contract"""

    @property
    @abstractmethod
    def num_partitions(self) -> int:
        """Number of partitions produced by this scheme"""
        ...

    @abstractmethod
    def partition_for(self, key: STObject) -> int:
        """
        Partition id a record key is assigned to

        Args:
            key: Record key

        Returns:
            Partition id in [0, num_partitions)
        """
        ...

    @abstractmethod
    def widen(self, extents: dict) -> "Partitioner":
        """Copy of this partitioner whose bounds also cover the given per-partition extents"""
        ...


class SpatialPartitioner(Partitioner):
    """Partitioner whose bounds are envelopes"""

    @abstractmethod
    def bounds_of(self, partition_id: int) -> Bounds:
        """
        Envelope covering every record assigned to a partition

        Returns:
            Bounding box as (minx, miny, maxx, maxy)
        """
        ...


class TemporalPartitioner(Partitioner):
    """Partitioner whose bounds are time intervals"""

    @abstractmethod
    def bounds_of(self, partition_id: int) -> Interval:
        """Interval covering every record start assigned to a partition"""
        ...


def bounds_intersect(a: Bounds, b: Bounds) -> bool:
    """Closed envelope intersection test"""
    return a[0] <= b[2] and b[0] <= a[2] and a[1] <= b[3] and b[1] <= a[3]


def bounds_union(a: Bounds, b: Bounds) -> Bounds:
    return (min(a[0], b[0]), min(a[1], b[1]), max(a[2], b[2]), max(a[3], b[3]))


def expand_bounds(bounds: Bounds, margin: float) -> Bounds:
    minx, miny, maxx, maxy = bounds
    return (minx - margin, miny - margin, maxx + margin, maxy + margin)
