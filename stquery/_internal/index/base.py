"""
Ephemeral Index Protocol

Indexes are built inside one partition task and discarded when the task
finishes. They are never shared between tasks or queries.
"""

import heapq
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Generic, Iterator, List, TypeVar

from stquery.core.distance import DistanceFunction
from stquery.core.exceptions import ValidationError
from stquery.core.predicates import IndexType, validate_tree_order
from stquery.core.stobject import STObject

logger = logging.getLogger(__name__)

P = TypeVar("P")


class EphemeralIndex(ABC, Generic[P]):
    """
    Base class for live indexes

    Subclasses implement ``build`` and ``query``; nearest-neighbour and
    distance queries evaluate the caller's distance function exactly.
    """

    def __init__(self):
        self._keys: List[STObject] = []
        self._payloads: List[P] = []
        self._built = False

    def __len__(self) -> int:
        return len(self._keys)

    def insert(self, key: STObject, payload: P) -> None:
        """Add an entry; invalidates a previous build"""
        self._keys.append(key)
        self._payloads.append(payload)
        self._built = False

    def build(self) -> None:
        """Finalize the structure after all inserts"""
        self._build()
        self._built = True

    def query(self, qry: STObject) -> List[P]:
        """
        Candidate payloads for a query object

        Returns a superset of the entries that satisfy any fixed join
        predicate with ``qry``, in insertion order. Callers re-check the
        exact predicate.
        """
        if not self._built:
            self.build()
        return [self._payloads[i] for i in self._candidates(qry)]

    def knn(self, qry: STObject, k: int, distance_fn: DistanceFunction) -> List[P]:
        """Up to k payloads nearest to ``qry``; ties keep insertion order"""
        if k <= 0:
            raise ValidationError(f"k must be positive, got {k}")
        nearest = heapq.nsmallest(
            k, range(len(self._keys)), key=lambda i: distance_fn(self._keys[i], qry)
        )
        return [self._payloads[i] for i in nearest]

    def within_distance(
        self, qry: STObject, distance_fn: DistanceFunction, max_dist: float
    ) -> List[P]:
        """Payloads whose key lies within ``max_dist`` of ``qry``"""
        return [
            payload
            for key, payload in zip(self._keys, self._payloads)
            if distance_fn(key, qry) <= max_dist
        ]

    def clear(self) -> None:
        self._keys = []
        self._payloads = []
        self._built = False
        self._release()

    @abstractmethod
    def _build(self) -> None:
        ...

    @abstractmethod
    def _candidates(self, qry: STObject) -> List[int]:
        """Ascending positions of candidate entries"""
        ...

    def _release(self) -> None:
        pass


def create_index(index_type: IndexType, tree_order: int = 10) -> EphemeralIndex[Any]:
    """
    Create an empty index of the given kind

    Args:
        index_type: SPATIAL or TEMPORAL
        tree_order: Node capacity for SPATIAL indexes

    Raises:
        ValidationError: for IndexType.NONE or a non-positive SPATIAL tree order
    """
    validate_tree_order(index_type, tree_order)

    if index_type is IndexType.SPATIAL:
        from stquery._internal.index.rtree import RTreeIndex

        return RTreeIndex(tree_order)
    if index_type is IndexType.TEMPORAL:
        from stquery._internal.index.interval_tree import IntervalIndex

        return IntervalIndex()
    raise ValidationError(f"No index structure for {index_type}")


@contextmanager
def ephemeral_index(index_type: IndexType, tree_order: int = 10) -> Iterator[EphemeralIndex[Any]]:
    """
    Scoped live index

    Yields a fresh, empty index and releases it when the block exits,
    whether or not the block raised.

    Examples:
        >>> with ephemeral_index(IndexType.SPATIAL, 10) as index:
        ...     for key, value in records:
        ...         index.insert(key, (key, value))
        ...     index.build()
        ...     candidates = index.query(qry)
    """
    index = create_index(index_type, tree_order)
    try:
        yield index
    finally:
        logger.debug("Releasing %s index with %d entries", index_type.value, len(index))
        index.clear()
