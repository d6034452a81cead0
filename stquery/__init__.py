"""
stquery - Partition-pruned spatio-temporal queries over partitioned records

Range filters, joins, k-nearest-neighbour and within-distance queries run
one task per partition, skip partitions that cannot match, and build
throwaway indexes inside each task.

Quick Start:
    >>> import stquery as stq
    >>> from shapely.geometry import Point, box
    >>>
    >>> ctx = stq.ExecutionContext()
    >>> records = [(stq.STObject(Point(x, x)), f"p{x}") for x in range(10)]
    >>> points = ctx.from_records(records, num_partitions=4)
    >>> points = points.partition_by(stq.GridPartitioner.from_records(points.collect(), 2))
    >>>
    >>> fns = points.live_index(tree_order=10)
    >>> fns.intersects(stq.STObject(box(0, 0, 3, 3))).collect()
    >>> fns.knn(stq.STObject(Point(0, 0)), k=2, distance_fn=stq.euclidean_distance).collect()
"""

from stquery.core import (
    DistanceFunction,
    IndexType,
    Interval,
    JoinPredicate,
    NotImplementedOperationError,
    QueryError,
    Record,
    STObject,
    STQueryError,
    TaskError,
    ValidationError,
    centroid_distance,
    euclidean_distance,
    temporal_distance,
)
from stquery.engine import EngineConfig, ExecutionContext, PartitionedCollection, PrunedPartition
from stquery.grid import GridPartitioner, TemporalRangePartitioner
from stquery.query import LiveIndexedFunctions

__version__ = "0.1.0"

__all__ = [
    "DistanceFunction",
    "EngineConfig",
    "ExecutionContext",
    "GridPartitioner",
    "IndexType",
    "Interval",
    "JoinPredicate",
    "LiveIndexedFunctions",
    "NotImplementedOperationError",
    "PartitionedCollection",
    "PrunedPartition",
    "QueryError",
    "Record",
    "STObject",
    "STQueryError",
    "TaskError",
    "TemporalRangePartitioner",
    "ValidationError",
    "__version__",
    "centroid_distance",
    "euclidean_distance",
    "read_records",
    "temporal_distance",
]


# Lazy import keeps pyarrow off the import path until files are read
def __getattr__(name):
    if name == "read_records":
        from stquery.io.loader import read_records

        return read_records
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
