"""
Tests for join predicates, index kinds and distance functions
"""

import math

import pytest
from shapely.geometry import Point, box

from stquery.core.distance import centroid_distance, euclidean_distance, temporal_distance
from stquery.core.exceptions import ValidationError
from stquery.core.predicates import (
    PREDICATE_FUNCTIONS,
    IndexType,
    JoinPredicate,
    predicate_function,
    validate_tree_order,
)
from stquery.core.stobject import Interval, STObject


class TestJoinPredicate:
    """Test the predicate table"""

    def test_every_kind_has_a_function(self):
        assert set(PREDICATE_FUNCTIONS) == set(JoinPredicate)

    def test_parse(self):
        assert JoinPredicate.parse("intersects") is JoinPredicate.INTERSECTS
        assert JoinPredicate.parse("CONTAINS") is JoinPredicate.CONTAINS
        assert JoinPredicate.parse("contained_by") is JoinPredicate.CONTAINEDBY
        assert JoinPredicate.parse(JoinPredicate.CONTAINS) is JoinPredicate.CONTAINS

    def test_parse_unknown(self):
        with pytest.raises(ValidationError):
            JoinPredicate.parse("touches")

    def test_semantics(self):
        """Test predicates are evaluated as predicate(left, right)"""
        big = STObject(box(0, 0, 10, 10))
        small = STObject(box(2, 2, 3, 3))

        assert predicate_function(JoinPredicate.INTERSECTS)(big, small)
        assert predicate_function(JoinPredicate.CONTAINS)(big, small)
        assert not predicate_function(JoinPredicate.CONTAINS)(small, big)
        assert predicate_function(JoinPredicate.CONTAINEDBY)(small, big)
        assert not predicate_function(JoinPredicate.CONTAINEDBY)(big, small)

    def test_callable_passes_through(self):
        def always(a, b):
            return True

        assert predicate_function(always) is always

    def test_invalid_predicate(self):
        with pytest.raises(ValidationError):
            predicate_function("intersects")


class TestIndexType:
    """Test index kinds and tree order validation"""

    def test_parse(self):
        assert IndexType.parse("spatial") is IndexType.SPATIAL
        assert IndexType.parse("NONE") is IndexType.NONE
        with pytest.raises(ValidationError):
            IndexType.parse("btree")

    @pytest.mark.parametrize("order", [0, -1])
    def test_spatial_requires_positive_order(self, order):
        with pytest.raises(ValidationError):
            validate_tree_order(IndexType.SPATIAL, order)

    def test_other_kinds_ignore_order(self):
        validate_tree_order(IndexType.NONE, -1)
        validate_tree_order(IndexType.TEMPORAL, 0)
        validate_tree_order(IndexType.SPATIAL, 1)


class TestDistance:
    """Test distance functions"""

    def test_euclidean(self):
        a = STObject(Point(0, 0))
        b = STObject(Point(1, 1))
        assert euclidean_distance(a, b) == pytest.approx(math.sqrt(2))
        assert euclidean_distance(a, a) == 0.0

    def test_euclidean_polygon(self):
        """Test distance to a polygon is the gap, not centroid distance"""
        a = STObject(box(0, 0, 2, 2))
        b = STObject(Point(5, 1))
        assert euclidean_distance(a, b) == pytest.approx(3.0)
        assert centroid_distance(a, b) == pytest.approx(4.0)

    def test_temporal(self):
        p = Point(0, 0)
        a = STObject(p, Interval(0, 10))
        assert temporal_distance(a, STObject(p, Interval(5, 20))) == 0.0
        assert temporal_distance(a, STObject(p, Interval(15, 20))) == 5.0
        assert temporal_distance(STObject(p, Interval(15, 20)), a) == 5.0
        assert temporal_distance(a, STObject(p)) == math.inf
