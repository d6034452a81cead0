"""
stquery Core Module

Data model, predicates, distance functions and exceptions.
"""

from stquery.core.distance import (
    DistanceFunction,
    centroid_distance,
    euclidean_distance,
    temporal_distance,
)
from stquery.core.exceptions import (
    NotImplementedOperationError,
    QueryError,
    STQueryError,
    TaskError,
    ValidationError,
)
from stquery.core.predicates import (
    PREDICATE_FUNCTIONS,
    IndexType,
    JoinPredicate,
    PredicateFunction,
    predicate_function,
)
from stquery.core.stobject import Interval, Record, STObject

__all__ = [
    # Data model
    "Interval",
    "Record",
    "STObject",
    # Predicates
    "IndexType",
    "JoinPredicate",
    "PREDICATE_FUNCTIONS",
    "PredicateFunction",
    "predicate_function",
    # Distances
    "DistanceFunction",
    "centroid_distance",
    "euclidean_distance",
    "temporal_distance",
    # Exceptions
    "NotImplementedOperationError",
    "QueryError",
    "STQueryError",
    "TaskError",
    "ValidationError",
]
