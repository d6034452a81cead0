"""
Partition pruning

Decides, from the query object, the predicate and the partitioner, which
partitions cannot hold a match. Pruning is sound, not complete: a kept
partition may hold nothing, but a dropped one never holds a match.
"""

import logging
from typing import Callable, List, Optional, Union

from stquery.core.predicates import JoinPredicate, PredicateFunction
from stquery.core.stobject import Interval, STObject
from stquery.engine.collection import PrunedPartition
from stquery.grid.base import (
    Bounds,
    Partitioner,
    SpatialPartitioner,
    TemporalPartitioner,
    bounds_intersect,
    expand_bounds,
)

logger = logging.getLogger(__name__)


def all_partitions(num_partitions: int) -> List[PrunedPartition]:
    """Identity selection, nothing pruned"""
    return [PrunedPartition(i, i) for i in range(num_partitions)]


def _select(num_partitions: int, keep: Callable[[int], bool]) -> List[PrunedPartition]:
    """Renumber the kept original ids densely, preserving their order"""
    survivors = [i for i in range(num_partitions) if keep(i)]
    return [PrunedPartition(new_id, parent_id) for new_id, parent_id in enumerate(survivors)]


def spatial_candidates(
    partitioner: SpatialPartitioner, qry: STObject, margin: float = 0.0
) -> List[PrunedPartition]:
    """
    Partitions whose envelope intersects the query envelope

    Args:
        partitioner: Spatial partitioner
        qry: Query object
        margin: Distance by which each partition envelope is expanded first
    """
    qry_bounds: Bounds = qry.bounds

    def keep(partition_id: int) -> bool:
        bounds = partitioner.bounds_of(partition_id)
        if margin:
            bounds = expand_bounds(bounds, margin)
        return bounds_intersect(bounds, qry_bounds)

    return _select(partitioner.num_partitions, keep)


def temporal_candidates(
    partitioner: TemporalPartitioner, qry: STObject, predicate: Optional[JoinPredicate]
) -> List[PrunedPartition]:
    """
    Partitions whose time bounds can hold a match for ``predicate``

    INTERSECTS and CONTAINS test the partition interval directly.
    CONTAINEDBY tests the span from the partition start to the next
    partition start (the last partition uses its own bounds), because
    records are bucketed by start time. Any other predicate keeps every
    partition, as does a timeless query.
    """
    n = partitioner.num_partitions
    qry_time = qry.time

    if qry_time is None or predicate is None:
        return all_partitions(n)

    if predicate is JoinPredicate.INTERSECTS:
        return _select(n, lambda i: partitioner.bounds_of(i).intersects(qry_time))

    if predicate is JoinPredicate.CONTAINS:
        return _select(n, lambda i: partitioner.bounds_of(i).contains(qry_time))

    if predicate is JoinPredicate.CONTAINEDBY:

        def starts_within(i: int) -> bool:
            if i == n - 1:
                span = partitioner.bounds_of(i)
            else:
                span = Interval(
                    partitioner.bounds_of(i).start,
                    partitioner.bounds_of(i + 1).start,
                    right_closed=False,
                )
            return span.intersects(qry_time)

        return _select(n, starts_within)

    return all_partitions(n)


def prune_partitions(
    num_partitions: int,
    partitioner: Optional[Partitioner],
    qry: STObject,
    predicate: Optional[Union[JoinPredicate, PredicateFunction]],
) -> List[PrunedPartition]:
    """
    Select the partitions a filter query has to read

    Args:
        num_partitions: Partitions in the collection
        partitioner: Partitioner of the collection, or None
        qry: Query object
        predicate: Fixed predicate kind, or a caller-supplied function
                   (which disables pruning)

    Returns:
        Surviving partitions, renumbered 0..k-1, each pointing at its
        original partition

    Examples:
        >>> parts = TemporalRangePartitioner([0, 10, 20], end=30)
        >>> qry = STObject(Point(0, 0), Interval(5, 25))
        >>> [p.parent_index for p in prune_partitions(3, parts, qry, JoinPredicate.CONTAINEDBY)]
        [0, 1, 2]
    """
    if partitioner is None or not isinstance(predicate, JoinPredicate):
        selected = all_partitions(num_partitions)
    elif isinstance(partitioner, SpatialPartitioner):
        selected = spatial_candidates(partitioner, qry)
    elif isinstance(partitioner, TemporalPartitioner):
        selected = temporal_candidates(partitioner, qry, predicate)
    else:
        selected = all_partitions(num_partitions)

    logger.debug(
        "Partition pruning kept %d of %d partitions (%s)",
        len(selected),
        num_partitions,
        type(partitioner).__name__ if partitioner is not None else "no partitioner",
    )
    return selected
