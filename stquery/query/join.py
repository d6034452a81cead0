"""
Spatio-temporal joins

Two strategies:

- ``unpartitioned_join``: every left partition against every right
  partition with a caller-supplied predicate function. Quadratic in the
  input sizes and never index-accelerated, because an arbitrary predicate
  may match pairs whose envelopes do not intersect. This is the expensive
  fallback.
- ``partitioned_join``: both inputs are brought under the same
  partitioner, and only partition pairs whose bounds can hold a match are
  joined. Inside each pair a live index over the right side yields
  candidates that are then checked with the exact predicate.

Join rows are (left_value, right_value) pairs.
"""

import logging
from functools import partial
from typing import Any, List, Optional, Tuple, Union

from stquery._internal.index.base import ephemeral_index
from stquery.core.predicates import (
    IndexType,
    JoinPredicate,
    PredicateFunction,
    predicate_function,
    validate_tree_order,
)
from stquery.core.stobject import Record
from stquery.engine.collection import PartitionedCollection
from stquery.grid.base import Partitioner, SpatialPartitioner, TemporalPartitioner, bounds_intersect

logger = logging.getLogger(__name__)

PartitionPair = Tuple[List[Record], List[Record]]


def _join_task(
    predicate_fn: PredicateFunction,
    index_type: IndexType,
    tree_order: int,
    task_id: int,
    pair: PartitionPair,
) -> List[Tuple[Any, Any]]:
    """Join one left partition with one right partition"""
    left, right = pair

    if index_type is IndexType.NONE:
        return [(a.value, b.value) for a in left for b in right if predicate_fn(a.key, b.key)]

    with ephemeral_index(index_type, tree_order) as index:
        for record in right:
            index.insert(record.key, record)
        index.build()

        rows = []
        for a in left:
            for b in index.query(a.key):
                if predicate_fn(a.key, b.key):
                    rows.append((a.value, b.value))
        return rows


def _run_pairs(
    left: PartitionedCollection,
    right: PartitionedCollection,
    pairs: List[Tuple[int, int]],
    predicate_fn: PredicateFunction,
    index_type: IndexType,
    tree_order: int,
) -> PartitionedCollection:
    inputs = [
        (task_id, (left.partition(i), right.partition(j))) for task_id, (i, j) in enumerate(pairs)
    ]
    task = partial(_join_task, predicate_fn, index_type, tree_order)
    results = left.context.run_tasks(task, inputs)
    return PartitionedCollection(results, context=left.context)


def unpartitioned_join(
    left: PartitionedCollection,
    right: PartitionedCollection,
    predicate: PredicateFunction,
) -> PartitionedCollection:
    """
    Join with an arbitrary predicate over the full cross product

    Args:
        left: Left input
        right: Right input
        predicate: Called as ``predicate(left_key, right_key)``

    Returns:
        Collection of (left_value, right_value), one partition per
        (left partition, right partition) pair
    """
    predicate_fn = predicate_function(predicate)
    pairs = [(i, j) for i in range(left.num_partitions) for j in range(right.num_partitions)]
    logger.debug("Unpartitioned join over %d partition pairs", len(pairs))
    return _run_pairs(left, right, pairs, predicate_fn, IndexType.NONE, -1)


def _bounds_overlap(left: Partitioner, right: Partitioner, i: int, j: int) -> bool:
    if isinstance(left, SpatialPartitioner) and isinstance(right, SpatialPartitioner):
        return bounds_intersect(left.bounds_of(i), right.bounds_of(j))
    if isinstance(left, TemporalPartitioner) and isinstance(right, TemporalPartitioner):
        return left.bounds_of(i).intersects(right.bounds_of(j))
    return True


def candidate_pairs(
    left: PartitionedCollection, right: PartitionedCollection
) -> List[Tuple[int, int]]:
    """
    Partition pairs that can hold a matching record pair

    Under a shared partitioner, pair (i, j) is kept when i == j or the
    bounds of left partition i and right partition j intersect; all three
    fixed predicates imply intersecting bounds. For disjoint partition
    bounds this is exactly the per-shared-id join. Inputs without a shared
    partitioner pair every partition with every other one.
    """
    lp, rp = left.partitioner, right.partitioner
    co_partitioned = lp is not None and rp is not None and lp == rp

    left_sizes, right_sizes = left.partition_sizes(), right.partition_sizes()

    pairs = []
    for i in range(left.num_partitions):
        if not left_sizes[i]:
            continue
        for j in range(right.num_partitions):
            if not right_sizes[j]:
                continue
            if not co_partitioned or i == j or _bounds_overlap(lp, rp, i, j):  # type: ignore[arg-type]
                pairs.append((i, j))
    return pairs


def partitioned_join(
    left: PartitionedCollection,
    right: PartitionedCollection,
    predicate: Union[JoinPredicate, str],
    partitioner: Optional[Partitioner] = None,
    index_type: IndexType = IndexType.SPATIAL,
    tree_order: int = 10,
) -> PartitionedCollection:
    """
    Join on a fixed predicate kind with partition pruning

    Args:
        left: Left input
        right: Right input
        predicate: INTERSECTS, CONTAINS or CONTAINEDBY, evaluated as
                   ``predicate(left_key, right_key)``
        partitioner: Scheme applied to both inputs first (no-op for an
                     input already partitioned by an equal scheme)
        index_type: Live index built over the right side of each pair
        tree_order: Node capacity for SPATIAL indexes

    Returns:
        Collection of (left_value, right_value), one partition per joined
        partition pair
    """
    predicate = JoinPredicate.parse(predicate)
    validate_tree_order(index_type, tree_order)

    if partitioner is not None:
        left = left.partition_by(partitioner)
        right = right.partition_by(partitioner)

    pairs = candidate_pairs(left, right)
    logger.debug(
        "Partitioned join (%s) over %d of %d partition pairs",
        predicate.value,
        len(pairs),
        left.num_partitions * right.num_partitions,
    )
    return _run_pairs(left, right, pairs, predicate_function(predicate), index_type, tree_order)
