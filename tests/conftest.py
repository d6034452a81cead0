"""
stquery Test Configuration

Shared pytest fixtures for all tests.
"""

import numpy as np
import pytest
from shapely.geometry import Point, box

from stquery.core.stobject import Interval, Record, STObject
from stquery.engine import EngineConfig, ExecutionContext


@pytest.fixture
def ctx():
    """Thread-pool context with a few workers"""
    return ExecutionContext(EngineConfig(max_workers=4, default_parallelism=4))


@pytest.fixture
def corner_points():
    """Four points on the diagonal"""
    return [
        Record(STObject(Point(0, 0)), "a"),
        Record(STObject(Point(1, 1)), "b"),
        Record(STObject(Point(5, 5)), "c"),
        Record(STObject(Point(9, 9)), "d"),
    ]


@pytest.fixture
def make_records():
    """Factory for seeded random points and boxes, optionally timed"""

    def _make(n, seed=0, timed=False, extent=20.0, box_ratio=0.5, first_value=0):
        rng = np.random.default_rng(seed)
        records = []
        for i in range(n):
            x, y = rng.uniform(0.0, extent, 2)
            if rng.random() < box_ratio:
                w, h = rng.uniform(0.1, 3.0, 2)
                geometry = box(x, y, x + w, y + h)
            else:
                geometry = Point(x, y)

            time = None
            if timed:
                start = float(rng.integers(0, 100))
                time = Interval(start, start + float(rng.integers(0, 30)))

            records.append(Record(STObject(geometry, time), first_value + i))
        return records

    return _make
