"""
R-tree live index backed by shapely's STRtree
"""

import logging
from typing import List, Optional

import numpy as np
from shapely.strtree import STRtree

from stquery._internal.index.base import EphemeralIndex, P
from stquery.core.exceptions import ValidationError
from stquery.core.stobject import STObject

logger = logging.getLogger(__name__)


class RTreeIndex(EphemeralIndex[P]):
    """
    Bulk-loaded (STR) R-tree over record geometries

    ``query`` returns every entry whose envelope intersects the envelope
    of the query geometry, which is a superset of the INTERSECTS, CONTAINS
    and CONTAINEDBY matches.

    Attributes:
        order: Maximum number of entries per tree node
    """

    def __init__(self, order: int):
        if order <= 0:
            raise ValidationError(f"R-tree order must be positive, got {order}")
        super().__init__()
        self.order = order
        self._tree: Optional[STRtree] = None

    def _build(self) -> None:
        self._tree = STRtree([k.geometry for k in self._keys], node_capacity=self.order)
        logger.debug("Built R-tree (order=%d) over %d geometries", self.order, len(self._keys))

    def _candidates(self, qry: STObject) -> List[int]:
        if not self._keys:
            return []
        # Without a predicate STRtree compares envelopes only
        hits = self._tree.query(qry.geometry)  # type: ignore[union-attr]
        return np.sort(hits).tolist()  # type: ignore[no-any-return]

    def _release(self) -> None:
        self._tree = None
