"""
Filter executor - exact predicate evaluation inside each partition
"""

import logging
from typing import Iterable, Iterator, List, Union

from stquery._internal.index.base import ephemeral_index
from stquery.core.predicates import (
    IndexType,
    JoinPredicate,
    PredicateFunction,
    predicate_function,
    validate_tree_order,
)
from stquery.core.stobject import Record, STObject
from stquery.engine.collection import PartitionedCollection, PrunedPartition
from stquery.query.pruning import prune_partitions

logger = logging.getLogger(__name__)


def filter_records(
    records: Iterable[Record],
    qry: STObject,
    predicate_fn: PredicateFunction,
    index_type: IndexType = IndexType.NONE,
    tree_order: int = -1,
) -> Iterable[Record]:
    """
    Records of one partition whose key satisfies ``predicate_fn(key, qry)``

    With IndexType.NONE this is a lazy single pass in arrival order. With
    an index, all records go into a live index, the index returns a
    candidate superset for the query and the exact predicate removes the
    false positives. The index kind never changes the result.

    Args:
        records: One partition's records
        qry: Query object
        predicate_fn: Exact predicate, called as ``predicate_fn(key, qry)``
        index_type: Live index to build for this partition
        tree_order: Node capacity for SPATIAL indexes

    Returns:
        Matching records
    """
    if index_type is IndexType.NONE:
        return (r for r in records if predicate_fn(r.key, qry))

    with ephemeral_index(index_type, tree_order) as index:
        for record in records:
            index.insert(record.key, record)
        index.build()

        candidates: List[Record] = index.query(qry)
        logger.debug("%s index returned %d candidates", index_type.value, len(candidates))
        return [r for r in candidates if predicate_fn(r.key, qry)]


class SpatialFilter:
    """
    Partition-pruned filter over a partitioned collection

    Attributes:
        qry: Query object
        predicate: JoinPredicate, or a callable over (key, qry)
        index_type: Live index used inside each partition
        tree_order: Node capacity for SPATIAL indexes

    Examples:
        >>> flt = SpatialFilter(qry, JoinPredicate.INTERSECTS, IndexType.SPATIAL, tree_order=10)
        >>> matches = flt.run(collection).collect()
    """

    def __init__(
        self,
        qry: STObject,
        predicate: Union[JoinPredicate, PredicateFunction],
        index_type: IndexType = IndexType.NONE,
        tree_order: int = -1,
    ):
        """
        Raises:
            ValidationError: If index_type is SPATIAL and tree_order <= 0
        """
        validate_tree_order(index_type, tree_order)

        self.qry = qry
        self.predicate = predicate
        self.predicate_fn = predicate_function(predicate)
        self.index_type = index_type
        self.tree_order = tree_order

    @property
    def prunes_partitions(self) -> bool:
        """Pruning rules exist only for the fixed predicate kinds"""
        return isinstance(self.predicate, JoinPredicate)

    def partitions(self, collection: PartitionedCollection) -> List[PrunedPartition]:
        """Partitions that have to be read for this query"""
        return prune_partitions(
            collection.num_partitions, collection.partitioner, self.qry, self.predicate
        )

    def compute(self, partition_id: int, records: List[Record]) -> Iterator[Record]:
        """Task body for one partition; safe to run any number of times"""
        return iter(
            filter_records(records, self.qry, self.predicate_fn, self.index_type, self.tree_order)
        )

    def run(self, collection: PartitionedCollection) -> PartitionedCollection:
        """Execute on every surviving partition"""
        selected = self.partitions(collection)
        return collection.map_partitions_with_index(
            self.compute, selected, preserves_partitioning=True
        )
