"""
stquery Query Module

Partition pruning, filtering, distance queries and joins.
"""

from stquery.query.executor import SpatialFilter, filter_records
from stquery.query.functions import LiveIndexedFunctions
from stquery.query.join import candidate_pairs, partitioned_join, unpartitioned_join
from stquery.query.knn import KnnQuery, local_knn
from stquery.query.pruning import prune_partitions, spatial_candidates, temporal_candidates
from stquery.query.within_distance import within_distance

__all__ = [
    "KnnQuery",
    "LiveIndexedFunctions",
    "SpatialFilter",
    "candidate_pairs",
    "filter_records",
    "local_knn",
    "partitioned_join",
    "prune_partitions",
    "spatial_candidates",
    "temporal_candidates",
    "unpartitioned_join",
    "within_distance",
]
