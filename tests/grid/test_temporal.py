"""
Tests for TemporalRangePartitioner
"""

import pytest
from shapely.geometry import Point

from stquery.core.exceptions import ValidationError
from stquery.core.stobject import Interval, Record, STObject
from stquery.grid.temporal import TemporalRangePartitioner


def timed(start, end=None):
    return STObject(Point(0, 0), Interval(start, end))


class TestTemporalRangePartitioner:
    """Test temporal bucketing"""

    @pytest.fixture
    def buckets(self):
        """Buckets starting at 0, 10 and 20, last one ending at 30"""
        return TemporalRangePartitioner([0, 10, 20], end=30)

    def test_bucket_bounds(self, buckets):
        assert buckets.num_partitions == 3
        assert buckets.bounds_of(0) == Interval(0, 10, right_closed=False)
        assert buckets.bounds_of(1) == Interval(10, 20, right_closed=False)
        assert buckets.bounds_of(2) == Interval(20, 30)

    def test_partition_for(self, buckets):
        """Test records are bucketed by their start"""
        assert buckets.partition_for(timed(0, 5)) == 0
        assert buckets.partition_for(timed(9, 50)) == 0
        assert buckets.partition_for(timed(10, 11)) == 1
        assert buckets.partition_for(timed(25)) == 2

    def test_partition_for_clamps(self, buckets):
        assert buckets.partition_for(timed(-5, 1)) == 0
        assert buckets.partition_for(timed(99, 100)) == 2

    def test_timeless_key_rejected(self, buckets):
        with pytest.raises(ValidationError):
            buckets.partition_for(STObject(Point(0, 0)))

    def test_widen(self, buckets):
        """Test bounds widen to intervals reaching past the bucket"""
        widened = buckets.widen({0: Interval(2, 45)})
        assert widened.bounds_of(0) == Interval(0, 45)
        assert widened.bucket(0) == Interval(0, 10, right_closed=False)
        assert widened == buckets

    @pytest.mark.parametrize(
        "starts, end",
        [([], None), ([0, 0, 5], None), ([5, 1], None), ([0, 10], 5)],
    )
    def test_invalid(self, starts, end):
        with pytest.raises(ValidationError):
            TemporalRangePartitioner(starts, end)

    def test_unbounded_last_bucket(self):
        buckets = TemporalRangePartitioner([0, 10])
        assert buckets.bounds_of(1) == Interval(10)

    def test_from_records(self):
        records = [Record(timed(float(s), float(s) + 3), s) for s in range(0, 40)]
        buckets = TemporalRangePartitioner.from_records(records, 4)

        assert buckets.num_partitions == 4
        assert buckets.starts[0] == 0.0
        assert buckets.end == 42.0
        assert list(buckets.starts) == sorted(buckets.starts)

    def test_from_records_repeated_starts(self):
        """Test duplicate quantiles collapse into fewer buckets"""
        records = [Record(timed(5, 6), i) for i in range(10)]
        buckets = TemporalRangePartitioner.from_records(records, 4)
        assert buckets.num_partitions == 1
