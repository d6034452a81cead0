"""
Temporal bucket partitioner

Records are bucketed by the start of their interval.
"""

import bisect
from typing import Dict, Iterable, Optional, Sequence

import numpy as np

from stquery.core.exceptions import ValidationError
from stquery.core.stobject import Interval, Record, STObject
from stquery.grid.base import TemporalPartitioner


class TemporalRangePartitioner(TemporalPartitioner):
    """
    Buckets records by interval start

    Bucket i covers ``[starts[i], starts[i + 1])``; the last bucket covers
    ``[starts[-1], end]``. A record that starts in a bucket may end long
    after it, so ``bounds_of`` widens each bucket to the intervals actually
    assigned to it.

    Examples:
        >>> from shapely.geometry import Point
        >>> parts = TemporalRangePartitioner([0, 10, 20], end=30)
        >>> parts.partition_for(STObject(Point(0, 0), Interval(12, 40)))
        1
        >>> parts.bounds_of(0)
        Interval(start=0, end=10, right_closed=False)
    """

    def __init__(
        self,
        starts: Sequence[float],
        end: Optional[float] = None,
        extents: Optional[Dict[int, Interval]] = None,
    ):
        """
        Args:
            starts: Strictly increasing bucket start instants
            end: Declared end of the last bucket (None: unbounded)
            extents: Optional per-bucket spans of assigned intervals
        """
        if len(starts) == 0:
            raise ValidationError("A temporal partitioner needs at least one bucket")
        if any(b <= a for a, b in zip(starts, starts[1:])):
            raise ValidationError(f"Bucket starts must be strictly increasing: {list(starts)}")
        if end is not None and end < starts[-1]:
            raise ValidationError(f"End {end} is before the last bucket start {starts[-1]}")

        self.starts = tuple(starts)
        self.end = end
        self._extents = dict(extents or {})

    @classmethod
    def from_records(cls, records: Iterable[Record], num_partitions: int) -> "TemporalRangePartitioner":
        """
        Choose bucket starts at quantiles of the record start times

        Args:
            records: Timed records
            num_partitions: Desired number of buckets (fewer when starts repeat)
        """
        if num_partitions <= 0:
            raise ValidationError(f"num_partitions must be positive, got {num_partitions}")

        intervals = [_interval_of(r.key) for r in records]
        if not intervals:
            raise ValidationError("Cannot build temporal buckets over an empty record set")

        start_times = np.array([i.start for i in intervals], dtype=float)
        quantiles = np.quantile(start_times, np.linspace(0.0, 1.0, num_partitions, endpoint=False))
        starts = np.unique(quantiles)
        end = max(i.upper for i in intervals)

        return cls(starts.tolist(), None if end == float("inf") else end)

    @property
    def num_partitions(self) -> int:
        return len(self.starts)

    def bucket(self, partition_id: int) -> Interval:
        """Declared bucket interval, without widening"""
        if not 0 <= partition_id < self.num_partitions:
            raise ValidationError(
                f"Partition id {partition_id} out of range [0, {self.num_partitions})"
            )
        if partition_id == self.num_partitions - 1:
            return Interval(self.starts[partition_id], self.end)
        return Interval(self.starts[partition_id], self.starts[partition_id + 1], right_closed=False)

    def bounds_of(self, partition_id: int) -> Interval:
        bucket = self.bucket(partition_id)
        extent = self._extents.get(partition_id)
        return bucket if extent is None else bucket.span(extent)

    def partition_for(self, key: STObject) -> int:
        start = _interval_of(key).start
        # Starts before the first bucket fall into bucket 0
        return max(bisect.bisect_right(self.starts, start) - 1, 0)

    def widen(self, extents: Dict[int, Interval]) -> "TemporalRangePartitioner":
        merged = dict(self._extents)
        for partition_id, interval in extents.items():
            current = merged.get(partition_id)
            merged[partition_id] = interval if current is None else current.span(interval)
        return TemporalRangePartitioner(self.starts, self.end, merged)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TemporalRangePartitioner):
            return NotImplemented
        return self.starts == other.starts and self.end == other.end

    def __hash__(self) -> int:
        return hash((self.starts, self.end))

    def __repr__(self) -> str:
        return f"TemporalRangePartitioner(starts={list(self.starts)}, end={self.end})"


def _interval_of(key: STObject) -> Interval:
    if key.time is None:
        raise ValidationError(f"Temporal partitioning needs timed keys, got {key!r}")
    return key.time
