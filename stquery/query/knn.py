"""
Distributed k-nearest-neighbour query

Two explicit stages:

1. Local stage (parallel): every participating partition builds a live
   R-tree and emits its own k nearest records under the distance function.
2. Merge stage (driver): starts only after every local task finished,
   computes the true distance of each candidate to the query, sorts
   ascending and keeps the first k.

Partition selection: with a spatial partitioner, only partitions whose
envelope intersects the query envelope take part. This is a heuristic. A
true neighbour in a partition whose envelope misses the query envelope is
lost, even when it is closer than the k-th candidate found. Pass a
``safety_margin`` (partition envelopes are expanded by it before the
test) or ``prune=False`` when the answer must be exact.
"""

import logging
from functools import partial
from typing import Any, List, Optional, Tuple

from stquery._internal.index.base import ephemeral_index
from stquery.core.distance import DistanceFunction
from stquery.core.exceptions import ValidationError
from stquery.core.predicates import IndexType, validate_tree_order
from stquery.core.stobject import Record, STObject
from stquery.engine.collection import PartitionedCollection, PrunedPartition
from stquery.grid.base import SpatialPartitioner
from stquery.query.pruning import all_partitions, spatial_candidates

logger = logging.getLogger(__name__)

# Result rows are Record(key, (distance, value))
Neighbour = Record[Tuple[float, Any]]


def local_knn(
    qry: STObject,
    k: int,
    distance_fn: DistanceFunction,
    tree_order: int,
    partition_id: int,
    records: List[Record],
) -> List[Record]:
    """Up to k nearest records of one partition (not globally correct on its own)"""
    with ephemeral_index(IndexType.SPATIAL, tree_order) as index:
        for record in records:
            index.insert(record.key, record)
        index.build()
        return index.knn(qry, k, distance_fn)


def _with_distance(qry: STObject, distance_fn: DistanceFunction, record: Record) -> Neighbour:
    return Record(record.key, (distance_fn(record.key, qry), record.value))


def _distance_of(row: Neighbour) -> float:
    return row.value[0]


class KnnQuery:
    """
    k nearest records to a query object under a caller-supplied distance

    Attributes:
        qry: Query object
        k: Number of neighbours
        distance_fn: Distance function over (key, qry)
        tree_order: Node capacity of the live R-trees
        prune: Skip partitions whose envelope misses the query envelope
        safety_margin: Expand partition envelopes by this much before the
                       pruning test; None or 0 keeps the plain heuristic

    Examples:
        >>> query = KnnQuery(STObject(Point(0, 0)), k=2, distance_fn=euclidean_distance)
        >>> [(r.key, r.value[0]) for r in query.run(points).collect()]
        [(STObject(POINT (0 0)), 0.0), (STObject(POINT (1 1)), 1.4142135623730951)]
    """

    def __init__(
        self,
        qry: STObject,
        k: int,
        distance_fn: DistanceFunction,
        tree_order: int = 10,
        prune: bool = True,
        safety_margin: Optional[float] = None,
    ):
        if k <= 0:
            raise ValidationError(f"k must be positive, got {k}")
        if safety_margin is not None and safety_margin < 0:
            raise ValidationError(f"safety_margin must not be negative, got {safety_margin}")
        validate_tree_order(IndexType.SPATIAL, tree_order)

        self.qry = qry
        self.k = k
        self.distance_fn = distance_fn
        self.tree_order = tree_order
        self.prune = prune
        self.safety_margin = safety_margin

    def partitions(self, collection: PartitionedCollection) -> List[PrunedPartition]:
        """Partitions taking part in the local stage"""
        partitioner = collection.partitioner
        if not self.prune or not isinstance(partitioner, SpatialPartitioner):
            return all_partitions(collection.num_partitions)

        selected = spatial_candidates(partitioner, self.qry, self.safety_margin or 0.0)
        if len(selected) < collection.num_partitions and not self.safety_margin:
            logger.warning(
                "kNN pruned %d of %d partitions by envelope intersection without a "
                "safety margin; neighbours outside the kept partitions are not searched "
                "and the result may be approximate",
                collection.num_partitions - len(selected),
                collection.num_partitions,
            )
        return selected

    def local_stage(self, collection: PartitionedCollection) -> PartitionedCollection:
        """Map stage: local top-k per participating partition"""
        task = partial(local_knn, self.qry, self.k, self.distance_fn, self.tree_order)
        return collection.map_partitions_with_index(task, self.partitions(collection))

    def merge_stage(self, candidates: PartitionedCollection) -> List[Neighbour]:
        """Reduce stage: global top-k over all local candidates"""
        logger.debug(
            "Merging %d kNN candidates from %d partitions",
            candidates.count(),
            candidates.num_partitions,
        )
        rows = candidates.map(partial(_with_distance, self.qry, self.distance_fn))
        return rows.take_ordered(self.k, key=_distance_of)

    def run(self, collection: PartitionedCollection) -> PartitionedCollection:
        """
        Execute both stages

        Returns:
            Driver-materialized collection of Record(key, (distance, value)),
            ascending by distance
        """
        # local_stage returns only after all of its tasks completed
        candidates = self.local_stage(collection)
        nearest = self.merge_stage(candidates)
        return collection.context.parallelize(nearest)
