"""
Partitioned collection

An immutable list of partitions plus the partitioner (if any) that
produced them. Operations either run one task per partition through the
ExecutionContext or act on the driver.
"""

import heapq
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Generic, Iterable, Iterator, List, Optional, Sequence, TypeVar, Union

from stquery.core.exceptions import ValidationError
from stquery.core.stobject import Interval, Record
from stquery.grid.base import (
    Bounds,
    Partitioner,
    SpatialPartitioner,
    TemporalPartitioner,
    bounds_union,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PrunedPartition:
    """
    A partition that survived pruning

    Attributes:
        index: Dense position among surviving partitions (0..k-1)
        parent_index: Id of the original partition holding the data
    """

    index: int
    parent_index: int


def _map_items(fn: Callable[[Any], Any], partition_id: int, items: List[Any]) -> Iterator[Any]:
    return (fn(item) for item in items)


def _drop_index(
    task: Callable[[List[Any]], Iterable[Any]], partition_id: int, items: List[Any]
) -> Iterable[Any]:
    return task(items)


def _assign_task(partitioner: Partitioner, partition_id: int, items: List[Record]) -> List[Any]:
    return [(partitioner.partition_for(r.key), r) for r in items]


def _extents(partitioner: Partitioner, partitions: Sequence[Sequence[Record]]) -> dict:
    """Per-partition envelope or interval span of the assigned keys"""
    extents: dict = {}
    for partition_id, records in enumerate(partitions):
        current: Optional[Union[Bounds, Interval]] = None
        for record in records:
            if isinstance(partitioner, SpatialPartitioner):
                b = record.key.bounds
                current = b if current is None else bounds_union(current, b)  # type: ignore[arg-type]
            elif isinstance(partitioner, TemporalPartitioner) and record.key.time is not None:
                t = record.key.time
                current = t if current is None else current.span(t)  # type: ignore[union-attr]
        if current is not None:
            extents[partition_id] = current
    return extents


class PartitionedCollection(Generic[T]):
    """
    Ordered, numbered partitions of items

    Items are usually Records; derived collections (join output, counts)
    may hold anything.

    Attributes:
        partitioner: Scheme that assigned items to partitions, or None
        context: ExecutionContext running the partition tasks

    Examples:
        >>> ctx = ExecutionContext()
        >>> points = ctx.from_records(records, num_partitions=4)
        >>> gridded = points.partition_by(GridPartitioner.from_records(records, 4))
        >>> gridded.live_index(tree_order=10).intersects(qry).collect()
    """

    def __init__(
        self,
        partitions: Iterable[Iterable[T]],
        partitioner: Optional[Partitioner] = None,
        context: Any = None,
    ):
        if context is None:
            from stquery.engine.context import ExecutionContext

            context = ExecutionContext()

        self._partitions = [list(p) for p in partitions]
        self.partitioner = partitioner
        self.context = context

        if partitioner is not None and partitioner.num_partitions != len(self._partitions):
            raise ValidationError(
                f"{partitioner!r} declares {partitioner.num_partitions} partitions, "
                f"collection has {len(self._partitions)}"
            )

    @property
    def num_partitions(self) -> int:
        return len(self._partitions)

    def partition(self, partition_id: int) -> List[T]:
        """Items of one partition (a copy)"""
        return list(self._partitions[partition_id])

    def partition_sizes(self) -> List[int]:
        return [len(p) for p in self._partitions]

    def collect(self) -> List[T]:
        """All items, partition by partition"""
        return [item for p in self._partitions for item in p]

    def count(self) -> int:
        return sum(len(p) for p in self._partitions)

    def __iter__(self) -> Iterator[T]:
        return iter(self.collect())

    def __len__(self) -> int:
        return self.count()

    def map_partitions_with_index(
        self,
        task: Callable[[int, List[T]], Iterable[Any]],
        partitions: Optional[Sequence[PrunedPartition]] = None,
        preserves_partitioning: bool = False,
    ) -> "PartitionedCollection[Any]":
        """
        Run one task per partition in parallel

        Args:
            task: Called as ``task(partition_id, items)``. ``partition_id``
                  is always the original id of the partition being read.
            partitions: Optional pruned subset to process; output partition
                        i holds the result for ``partitions[i]``
            preserves_partitioning: Keep this collection's partitioner on the
                                    result (only when no partition was dropped)

        Returns:
            New collection with one partition per task
        """
        if partitions is None:
            partitions = [PrunedPartition(i, i) for i in range(self.num_partitions)]

        inputs = [(p.parent_index, self._partitions[p.parent_index]) for p in partitions]
        results = self.context.run_tasks(task, inputs)

        keep = preserves_partitioning and len(partitions) == self.num_partitions
        return PartitionedCollection(
            results, self.partitioner if keep else None, context=self.context
        )

    def map_partitions(self, task: Callable[[List[T]], Iterable[Any]]) -> "PartitionedCollection[Any]":
        return self.map_partitions_with_index(partial(_drop_index, task))

    def map(self, fn: Callable[[T], Any]) -> "PartitionedCollection[Any]":
        return self.map_partitions_with_index(partial(_map_items, fn))

    def take_ordered(self, k: int, key: Callable[[T], Any]) -> List[T]:
        """
        Sort by ``key`` and take the first k items

        Equal keys keep partition order, then order within the partition.
        """
        return heapq.nsmallest(k, self.collect(), key=key)

    def partition_by(self, partitioner: Partitioner) -> "PartitionedCollection[T]":
        """
        Redistribute records under a partitioning scheme

        A no-op when the collection is already partitioned by an equal
        scheme. The resulting partitioner is widened so its bounds cover
        every key that was assigned to each partition.
        """
        if self.partitioner is not None and self.partitioner == partitioner:
            return self

        assigned = self.map_partitions_with_index(partial(_assign_task, partitioner)).collect()

        buckets: List[List[Record]] = [[] for _ in range(partitioner.num_partitions)]
        for partition_id, record in assigned:
            buckets[partition_id].append(record)

        widened = partitioner.widen(_extents(partitioner, buckets))
        logger.debug(
            "Repartitioned %d records into %d partitions with %r",
            len(assigned),
            partitioner.num_partitions,
            partitioner,
        )
        return PartitionedCollection(buckets, widened, context=self.context)  # type: ignore[arg-type]

    def live_index(self, tree_order: Optional[int] = None):
        """Spatial query functions backed by per-task live indexes"""
        from stquery.engine.config import DEFAULT_TREE_ORDER
        from stquery.query.functions import LiveIndexedFunctions

        return LiveIndexedFunctions(self, DEFAULT_TREE_ORDER if tree_order is None else tree_order)

    def __repr__(self) -> str:
        return (
            f"PartitionedCollection(partitions={self.num_partitions}, "
            f"items={self.count()}, partitioner={self.partitioner!r})"
        )
