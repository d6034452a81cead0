"""
Tests for running partition tasks on a process pool
"""

import pytest
from shapely.geometry import Point, box

from stquery.core.distance import euclidean_distance
from stquery.core.exceptions import TaskError
from stquery.core.predicates import IndexType, JoinPredicate
from stquery.core.stobject import STObject
from stquery.engine import EngineConfig, ExecutionContext
from stquery.grid import GridPartitioner


@pytest.fixture
def process_ctx():
    """Process-pool context; task functions must be picklable"""
    return ExecutionContext(EngineConfig(max_workers=2, executor="process", default_parallelism=3))


class TestProcessExecutor:
    """Test stages on worker processes match the thread executor"""

    def test_map_partitions(self, ctx, process_ctx):
        items = [5, 3, 9, 1, 7, 2, 8]
        expected = ctx.parallelize(items, 3).map_partitions(sorted).collect()
        assert process_ctx.parallelize(items, 3).map_partitions(sorted).collect() == expected
        assert expected == [3, 5, 1, 9, 2, 7, 8]

    def test_map(self, process_ctx):
        assert process_ctx.parallelize(["1", "2", "3"], 3).map(int).collect() == [1, 2, 3]

    def test_failure_raises_task_error(self, process_ctx):
        with pytest.raises(TaskError):
            process_ctx.parallelize(["1", "x", "3"], 3).map(int).collect()

    @pytest.mark.parametrize("index_type", [IndexType.NONE, IndexType.SPATIAL])
    def test_filter(self, ctx, process_ctx, make_records, index_type):
        records = make_records(200, seed=47)
        grid = GridPartitioner.from_records(records, 3)
        qry = STObject(box(3, 3, 12, 10))

        def run(context):
            gridded = context.from_records(records).partition_by(grid)
            result = gridded.live_index(4).filter(qry, JoinPredicate.INTERSECTS, index_type)
            return [r.value for r in result.collect()]

        expected = run(ctx)
        assert expected
        assert run(process_ctx) == expected

    def test_knn(self, ctx, process_ctx, make_records):
        records = make_records(200, seed=53)
        grid = GridPartitioner.from_records(records, 3)
        qry = STObject(Point(10, 10))

        def run(context):
            gridded = context.from_records(records).partition_by(grid)
            result = gridded.live_index().knn(qry, 5, euclidean_distance, prune=False)
            return [(row.value[1], row.value[0]) for row in result.collect()]

        assert run(process_ctx) == run(ctx)
