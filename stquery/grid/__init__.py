"""
stquery Partitioners

Spatial grid and temporal bucket partitioning schemes.
"""

from stquery.grid.base import Partitioner, SpatialPartitioner, TemporalPartitioner
from stquery.grid.temporal import TemporalRangePartitioner
from stquery.grid.tile_grid import GridPartitioner

__all__ = [
    "GridPartitioner",
    "Partitioner",
    "SpatialPartitioner",
    "TemporalPartitioner",
    "TemporalRangePartitioner",
]
