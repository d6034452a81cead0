"""
stquery Execution Engine

Local, pool-backed stand-in for a distributed partitioned-collection engine.
"""

from stquery.engine.collection import PartitionedCollection, PrunedPartition
from stquery.engine.config import DEFAULT_TREE_ORDER, EngineConfig
from stquery.engine.context import ExecutionContext

__all__ = [
    "DEFAULT_TREE_ORDER",
    "EngineConfig",
    "ExecutionContext",
    "PartitionedCollection",
    "PrunedPartition",
]
