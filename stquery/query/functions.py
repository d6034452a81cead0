"""
Live-indexed query functions

Entry point bound to one partitioned collection. Every operation builds
its indexes inside the partition tasks and discards them afterwards.
"""

import logging
from typing import Any, Callable, Optional, Tuple, Union

from stquery.core.distance import DistanceFunction
from stquery.core.exceptions import NotImplementedOperationError
from stquery.core.predicates import IndexType, JoinPredicate, PredicateFunction
from stquery.core.stobject import STObject
from stquery.engine.collection import PartitionedCollection
from stquery.grid.base import Partitioner
from stquery.query.executor import SpatialFilter
from stquery.query.join import partitioned_join, unpartitioned_join
from stquery.query.knn import KnnQuery
from stquery.query.within_distance import within_distance

logger = logging.getLogger(__name__)


class LiveIndexedFunctions:
    """
    Spatio-temporal operations over a PartitionedCollection of Records

    Attributes:
        collection: Input records
        tree_order: Node capacity of the live R-trees

    Examples:
        >>> fns = points.live_index(tree_order=10)
        >>> fns.intersects(STObject(box(0, 0, 5, 5))).collect()
        >>> fns.knn(STObject(Point(0, 0)), k=5, distance_fn=euclidean_distance).collect()
        >>> fns.join(polygons, JoinPredicate.CONTAINS, partitioner=grid).collect()
    """

    def __init__(self, collection: PartitionedCollection, tree_order: int = 10):
        self.collection = collection
        self.tree_order = tree_order

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------

    def filter(
        self,
        qry: STObject,
        predicate: Union[JoinPredicate, PredicateFunction],
        index_type: IndexType = IndexType.SPATIAL,
    ) -> PartitionedCollection:
        """
        Records whose key satisfies ``predicate(key, qry)``

        Partitions are pruned for the three fixed predicates only. A
        callable predicate scans every partition; combined with an index it
        must only match keys whose envelope intersects the query envelope.
        """
        return SpatialFilter(qry, predicate, index_type, self.tree_order).run(self.collection)

    def intersects(self, qry: STObject) -> PartitionedCollection:
        return self.filter(qry, JoinPredicate.INTERSECTS)

    def contains(self, qry: STObject) -> PartitionedCollection:
        return self.filter(qry, JoinPredicate.CONTAINS)

    def containedby(self, qry: STObject) -> PartitionedCollection:
        return self.filter(qry, JoinPredicate.CONTAINEDBY)

    # -------------------------------------------------------------------------
    # Distance queries
    # -------------------------------------------------------------------------

    def within_distance(
        self, qry: STObject, max_dist: float, distance_fn: DistanceFunction
    ) -> PartitionedCollection:
        """All records within ``max_dist`` of ``qry`` (every partition is scanned)"""
        return within_distance(self.collection, qry, max_dist, distance_fn, self.tree_order)

    def knn(
        self,
        qry: STObject,
        k: int,
        distance_fn: DistanceFunction,
        prune: bool = True,
        safety_margin: Optional[float] = None,
    ) -> PartitionedCollection:
        """
        k nearest records as Record(key, (distance, value))

        With a spatial partitioner and ``prune=True`` the result is
        approximate unless ``safety_margin`` covers the distance to the
        k-th true neighbour; see ``stquery.query.knn``.
        """
        return KnnQuery(qry, k, distance_fn, self.tree_order, prune, safety_margin).run(
            self.collection
        )

    # -------------------------------------------------------------------------
    # Joins
    # -------------------------------------------------------------------------

    def join(
        self,
        other: PartitionedCollection,
        predicate: Union[JoinPredicate, str, PredicateFunction],
        partitioner: Optional[Partitioner] = None,
        index_type: IndexType = IndexType.SPATIAL,
    ) -> PartitionedCollection:
        """
        Join with another collection

        A fixed predicate (or its name) runs the partitioned join, with
        both sides partitioned by ``partitioner`` when given. A callable
        runs the unpartitioned cross-product join and ignores the
        partitioner and index.
        """
        if isinstance(predicate, (JoinPredicate, str)):
            return partitioned_join(
                self.collection, other, predicate, partitioner, index_type, self.tree_order
            )
        return unpartitioned_join(self.collection, other, predicate)

    # -------------------------------------------------------------------------
    # Not implemented
    # -------------------------------------------------------------------------

    def cluster(
        self,
        min_pts: int,
        epsilon: float,
        key_extractor: Callable[[Tuple[STObject, Any]], Any],
        include_noise: bool = True,
        max_partition_cost: int = 10,
        outfile: Optional[str] = None,
    ) -> PartitionedCollection:
        raise NotImplementedOperationError("cluster is not implemented for live-indexed collections")

    def skyline(
        self,
        ref: STObject,
        distance_fn: Callable[[STObject, STObject], Tuple[float, float]],
        dominates: Callable[[STObject, STObject], bool],
        points_per_dimension: int,
        allow_cache: bool = False,
    ) -> PartitionedCollection:
        raise NotImplementedOperationError("skyline is not implemented for live-indexed collections")

    def skyline_agg(
        self,
        ref: STObject,
        distance_fn: Callable[[STObject, STObject], Tuple[float, float]],
        dominates: Callable[[STObject, STObject], bool],
    ) -> PartitionedCollection:
        raise NotImplementedOperationError(
            "skyline_agg is not implemented for live-indexed collections"
        )
