"""
Join predicates and index kinds

JoinPredicate is a closed set of spatio-temporal relations, each backed by
a test function in PREDICATE_FUNCTIONS. Callers needing another relation
pass a plain callable instead of a JoinPredicate.
"""

from enum import Enum
from typing import Callable, Dict, Union

from stquery.core.exceptions import ValidationError
from stquery.core.stobject import STObject

PredicateFunction = Callable[[STObject, STObject], bool]


class JoinPredicate(Enum):
    """Relation tested between a record key (left) and a query object (right)"""

    INTERSECTS = "intersects"  # a and b share at least one point
    CONTAINS = "contains"  # every point of b lies within a
    CONTAINEDBY = "containedby"  # every point of a lies within b

    @classmethod
    def parse(cls, name: Union[str, "JoinPredicate"]) -> "JoinPredicate":
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).lower().replace("_", ""))
        except ValueError:
            raise ValidationError(
                f"Unknown join predicate {name!r}. Expected one of: "
                f"{', '.join(p.value for p in cls)}"
            ) from None


class IndexType(Enum):
    """Ephemeral index built inside each partition task"""

    NONE = "none"
    SPATIAL = "spatial"
    TEMPORAL = "temporal"

    @classmethod
    def parse(cls, name: Union[str, "IndexType"]) -> "IndexType":
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).lower())
        except ValueError:
            raise ValidationError(f"Unknown index type {name!r}") from None


def _intersects(a: STObject, b: STObject) -> bool:
    return a.intersects(b)


def _contains(a: STObject, b: STObject) -> bool:
    return a.contains(b)


def _contained_by(a: STObject, b: STObject) -> bool:
    return a.contained_by(b)


# Module-level functions so they pickle into process workers
PREDICATE_FUNCTIONS: Dict[JoinPredicate, PredicateFunction] = {
    JoinPredicate.INTERSECTS: _intersects,
    JoinPredicate.CONTAINS: _contains,
    JoinPredicate.CONTAINEDBY: _contained_by,
}


def predicate_function(predicate: Union[JoinPredicate, PredicateFunction]) -> PredicateFunction:
    """Resolve a JoinPredicate (or pass through a callable) to a test function"""
    if isinstance(predicate, JoinPredicate):
        return PREDICATE_FUNCTIONS[predicate]
    if callable(predicate):
        return predicate
    raise ValidationError(f"Not a join predicate or callable: {predicate!r}")


def validate_tree_order(index_type: IndexType, tree_order: int) -> None:
    """A SPATIAL index needs a positive fan-out"""
    if index_type is IndexType.SPATIAL and tree_order <= 0:
        raise ValidationError(
            f"IndexType.SPATIAL requires a positive tree order, got {tree_order}"
        )
