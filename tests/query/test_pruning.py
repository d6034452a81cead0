"""
Tests for partition pruning
"""

import pytest
from shapely.geometry import Point, box

from stquery.core.predicates import JoinPredicate, predicate_function
from stquery.core.stobject import Interval, STObject
from stquery.engine import PrunedPartition
from stquery.grid import GridPartitioner, TemporalRangePartitioner
from stquery.query.pruning import all_partitions, prune_partitions, spatial_candidates


def parents(selected):
    return [p.parent_index for p in selected]


@pytest.fixture
def buckets():
    return TemporalRangePartitioner([0, 10, 20], end=30)


@pytest.fixture
def grid():
    return GridPartitioner((0, 0, 10, 10), 2)


class TestTemporalPruning:
    """Test pruning under a temporal range partitioner"""

    def test_containedby_wide_query(self, buckets):
        qry = STObject(Point(0, 0), Interval(5, 25))
        assert parents(prune_partitions(3, buckets, qry, JoinPredicate.CONTAINEDBY)) == [0, 1, 2]

    def test_containedby_narrow_query(self, buckets):
        qry = STObject(Point(0, 0), Interval(12, 15))
        assert prune_partitions(3, buckets, qry, JoinPredicate.CONTAINEDBY) == [PrunedPartition(0, 1)]

    def test_intersects(self, buckets):
        qry = STObject(Point(0, 0), Interval(12, 15))
        assert parents(prune_partitions(3, buckets, qry, JoinPredicate.INTERSECTS)) == [1]

    def test_intersects_at_bucket_boundary(self, buckets):
        """Test the half-open bucket end does not match its successor's start"""
        qry = STObject(Point(0, 0), Interval(10, 10))
        assert parents(prune_partitions(3, buckets, qry, JoinPredicate.INTERSECTS)) == [1]

    def test_contains(self, buckets):
        qry = STObject(Point(0, 0), Interval(22, 25))
        selected = prune_partitions(3, buckets, qry, JoinPredicate.CONTAINS)
        assert selected == [PrunedPartition(0, 2)]

    def test_timeless_query_keeps_everything(self, buckets):
        qry = STObject(Point(0, 0))
        assert parents(prune_partitions(3, buckets, qry, JoinPredicate.INTERSECTS)) == [0, 1, 2]


class TestSpatialPruning:
    """Test pruning under a grid partitioner"""

    def test_single_cell(self, grid):
        qry = STObject(box(1, 1, 2, 2))
        assert parents(prune_partitions(4, grid, qry, JoinPredicate.INTERSECTS)) == [0]

    def test_closed_boundaries(self, grid):
        """Test a query on the shared corner touches every cell"""
        qry = STObject(Point(5, 5))
        assert parents(prune_partitions(4, grid, qry, JoinPredicate.CONTAINEDBY)) == [0, 1, 2, 3]

    def test_dense_renumbering(self, grid):
        qry = STObject(box(6, 1, 7, 7))
        assert prune_partitions(4, grid, qry, JoinPredicate.INTERSECTS) == [
            PrunedPartition(0, 1),
            PrunedPartition(1, 3),
        ]

    def test_margin(self, grid):
        qry = STObject(Point(4.9, 0.5))
        assert parents(spatial_candidates(grid, qry)) == [0]
        assert parents(spatial_candidates(grid, qry, margin=0.5)) == [0, 1]


class TestNoPruning:
    """Test the cases where every partition is kept"""

    def test_no_partitioner(self):
        qry = STObject(Point(0, 0))
        assert prune_partitions(5, None, qry, JoinPredicate.INTERSECTS) == all_partitions(5)

    def test_callable_predicate(self, grid):
        qry = STObject(box(1, 1, 2, 2))
        selected = prune_partitions(4, grid, qry, lambda key, q: True)
        assert parents(selected) == [0, 1, 2, 3]


class TestPruningSoundness:
    """Test no dropped partition ever holds a match"""

    @pytest.mark.parametrize("predicate", list(JoinPredicate))
    def test_spatial(self, ctx, make_records, predicate):
        records = make_records(300, seed=3)
        gridded = ctx.from_records(records).partition_by(GridPartitioner.from_records(records, 4, 3))
        matches = predicate_function(predicate)

        for seed in range(5):
            qry = make_records(1, seed=100 + seed, box_ratio=1.0)[0].key
            kept = set(parents(prune_partitions(12, gridded.partitioner, qry, predicate)))
            for pid in range(gridded.num_partitions):
                if pid not in kept:
                    assert not any(matches(r.key, qry) for r in gridded.partition(pid))

    @pytest.mark.parametrize("predicate", list(JoinPredicate))
    def test_temporal(self, ctx, make_records, predicate):
        records = make_records(300, seed=5, timed=True)
        parts = TemporalRangePartitioner.from_records(records, 5)
        timed = ctx.from_records(records).partition_by(parts)
        matches = predicate_function(predicate)

        for start, end in [(0, 10), (20, 60), (45, 48), (90, 140), (10, 12)]:
            qry = STObject(box(0, 0, 20, 20), Interval(start, end))
            kept = set(parents(prune_partitions(timed.num_partitions, timed.partitioner, qry, predicate)))
            for pid in range(timed.num_partitions):
                if pid not in kept:
                    assert not any(matches(r.key, qry) for r in timed.partition(pid))
