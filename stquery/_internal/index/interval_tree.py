"""
Interval live index

Entries are kept as numpy arrays sorted by interval start. A query cuts
the sorted starts at the query end with ``searchsorted`` and masks the
remaining entries by their end.
"""

import logging
from typing import List

import numpy as np
from numpy.typing import NDArray

from stquery._internal.index.base import EphemeralIndex, P
from stquery.core.stobject import STObject

logger = logging.getLogger(__name__)


class IntervalIndex(EphemeralIndex[P]):
    """
    Static interval index over record times

    Timeless records are indexed as unbounded intervals so they always
    come back as candidates. A timeless query returns every entry.
    """

    def __init__(self):
        super().__init__()
        self._order: NDArray[np.intp] = np.empty(0, dtype=np.intp)
        self._starts: NDArray[np.float64] = np.empty(0)
        self._ends: NDArray[np.float64] = np.empty(0)

    def _build(self) -> None:
        starts = np.array(
            [-np.inf if k.time is None else k.time.start for k in self._keys], dtype=float
        )
        ends = np.array([np.inf if k.time is None else k.time.upper for k in self._keys], dtype=float)

        self._order = np.argsort(starts, kind="stable")
        self._starts = starts[self._order]
        self._ends = ends[self._order]
        logger.debug("Built interval index over %d entries", len(self._keys))

    def _candidates(self, qry: STObject) -> List[int]:
        if qry.time is None:
            return list(range(len(self._keys)))

        # Closed comparison on both ends; open ends only add false positives
        cut = np.searchsorted(self._starts, qry.time.upper, side="right")
        mask = self._ends[:cut] >= qry.time.start
        return np.sort(self._order[:cut][mask]).tolist()  # type: ignore[no-any-return]

    def _release(self) -> None:
        self._order = np.empty(0, dtype=np.intp)
        self._starts = np.empty(0)
        self._ends = np.empty(0)
