"""
Tests for the within-distance scan
"""

import pytest
from shapely.geometry import Point

from stquery.core.distance import euclidean_distance
from stquery.core.exceptions import ValidationError
from stquery.core.stobject import STObject
from stquery.grid import GridPartitioner
from stquery.query.within_distance import scan_within_distance, within_distance


def ring_distance(key, qry):
    """Zero on a circle of radius 8 around the query, growing inwards and outwards"""
    return abs(8.0 - key.geometry.distance(qry.geometry))


class TestWithinDistance:
    """Test within-distance against brute force"""

    @pytest.mark.parametrize("distance_fn", [euclidean_distance, ring_distance])
    def test_matches_brute_force(self, ctx, make_records, distance_fn):
        records = make_records(300, seed=19)
        grid = GridPartitioner.from_records(records, 4)
        gridded = ctx.from_records(records).partition_by(grid)
        qry = STObject(Point(2.0, 2.0))

        expected = sorted(r.value for r in records if distance_fn(r.key, qry) <= 1.5)
        result = within_distance(gridded, qry, 1.5, distance_fn, tree_order=5)

        assert sorted(r.value for r in result.collect()) == expected
        assert result.num_partitions == gridded.num_partitions
        assert result.partitioner == grid

    def test_bound_is_inclusive(self, ctx, corner_points):
        result = within_distance(ctx.from_records(corner_points), STObject(Point(0, 0)), 2 ** 0.5, euclidean_distance)
        assert sorted(r.value for r in result.collect()) == ["a", "b"]

    def test_zero_distance(self, ctx, corner_points):
        result = within_distance(ctx.from_records(corner_points), STObject(Point(5, 5)), 0.0, euclidean_distance)
        assert [r.value for r in result.collect()] == ["c"]

    def test_negative_distance(self, ctx, corner_points):
        with pytest.raises(ValidationError):
            within_distance(ctx.from_records(corner_points), STObject(Point(0, 0)), -1.0, euclidean_distance)

    def test_scan_one_partition(self, corner_points):
        rows = scan_within_distance(STObject(Point(9, 9)), 6.0, euclidean_distance, 2, 0, corner_points)
        assert [r.value for r in rows] == ["c", "d"]
