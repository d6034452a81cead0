"""
Within-distance scan

The distance function is opaque and need not grow with envelope distance,
so no partition can be skipped: every partition is scanned through a live
R-tree whose distance query evaluates the function exactly.
"""

import logging
from functools import partial
from typing import List

from stquery._internal.index.base import ephemeral_index
from stquery.core.distance import DistanceFunction
from stquery.core.exceptions import ValidationError
from stquery.core.predicates import IndexType, validate_tree_order
from stquery.core.stobject import Record, STObject
from stquery.engine.collection import PartitionedCollection

logger = logging.getLogger(__name__)


def scan_within_distance(
    qry: STObject,
    max_dist: float,
    distance_fn: DistanceFunction,
    tree_order: int,
    partition_id: int,
    records: List[Record],
) -> List[Record]:
    """Records of one partition with ``distance_fn(key, qry) <= max_dist``"""
    with ephemeral_index(IndexType.SPATIAL, tree_order) as index:
        for record in records:
            index.insert(record.key, record)
        index.build()
        return index.within_distance(qry, distance_fn, max_dist)


def within_distance(
    collection: PartitionedCollection,
    qry: STObject,
    max_dist: float,
    distance_fn: DistanceFunction,
    tree_order: int = 10,
) -> PartitionedCollection:
    """
    All records within ``max_dist`` of ``qry``

    Args:
        collection: Records to scan
        qry: Query object
        max_dist: Inclusive distance bound
        distance_fn: Distance over (key, qry)
        tree_order: Node capacity of the live R-trees

    Returns:
        Matching records, one output partition per input partition
    """
    if max_dist < 0:
        raise ValidationError(f"max_dist must not be negative, got {max_dist}")
    validate_tree_order(IndexType.SPATIAL, tree_order)

    logger.debug(
        "Within-distance scan over all %d partitions (max_dist=%s)",
        collection.num_partitions,
        max_dist,
    )
    task = partial(scan_within_distance, qry, max_dist, distance_fn, tree_order)
    return collection.map_partitions_with_index(task, preserves_partitioning=True)
