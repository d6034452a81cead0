"""
Execution context

Runs one task per partition on a thread or process pool and returns the
task outputs in partition order. A stage returns only after every task in
it has finished.
"""

import logging
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar

from stquery.core.exceptions import TaskError, ValidationError
from stquery.engine.config import EngineConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

PartitionTask = Callable[[int, List[Any]], Iterable[T]]


def _run_task(
    task: PartitionTask, partition_id: int, items: List[Any], retries: int
) -> List[Any]:
    """
    Worker entry point

    Module-level so it pickles into process workers. Tasks are idempotent,
    so a failed attempt is simply run again.
    """
    attempt = 0
    while True:
        try:
            return list(task(partition_id, items))
        except Exception as e:
            if attempt >= retries:
                raise
            attempt += 1
            logger.warning(
                "Task for partition %d failed (%s), retry %d/%d", partition_id, e, attempt, retries
            )


class ExecutionContext:
    """
    Local execution engine

    Attributes:
        config: EngineConfig in effect

    Examples:
        >>> ctx = ExecutionContext(EngineConfig(max_workers=4))
        >>> points = ctx.from_records(records, num_partitions=8)
        >>> points.collect()
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def _executor(self, num_tasks: int) -> Executor:
        workers = min(self.config.max_workers, num_tasks)
        if self.config.executor == "process":
            return ProcessPoolExecutor(max_workers=workers)
        return ThreadPoolExecutor(max_workers=workers, thread_name_prefix="stquery")

    def run_tasks(
        self, task: PartitionTask, inputs: Sequence[Tuple[int, List[Any]]]
    ) -> List[List[Any]]:
        """
        Run ``task(partition_id, items)`` for every input

        Args:
            task: Partition task, called once per input
            inputs: (partition_id, items) pairs

        Returns:
            Task outputs, in input order

        Raises:
            TaskError: If a task still fails after ``max_task_retries``
        """
        retries = self.config.max_task_retries
        logger.debug("Running stage with %d tasks", len(inputs))

        if not inputs:
            return []

        if len(inputs) == 1 or self.config.max_workers == 1:
            results = []
            for partition_id, items in inputs:
                try:
                    results.append(_run_task(task, partition_id, items, retries))
                except Exception as e:
                    raise TaskError(partition_id, str(e)) from e
            return results

        with self._executor(len(inputs)) as executor:
            futures = [
                executor.submit(_run_task, task, partition_id, items, retries)
                for partition_id, items in inputs
            ]

            results = []
            for (partition_id, _), future in zip(inputs, futures):
                try:
                    results.append(future.result())
                except Exception as e:
                    for pending in futures:
                        pending.cancel()
                    raise TaskError(partition_id, str(e)) from e

        return results

    def parallelize(self, items: Iterable[Any], num_partitions: Optional[int] = None):
        """
        Materialize a driver-side sequence as a partitioned collection

        Items are split into contiguous, nearly equal slices.
        """
        from stquery.engine.collection import PartitionedCollection

        data = list(items)
        n = self.config.default_parallelism if num_partitions is None else num_partitions
        if n <= 0:
            raise ValidationError(f"num_partitions must be positive, got {n}")
        slices = [data[i * len(data) // n : (i + 1) * len(data) // n] for i in range(n)]
        return PartitionedCollection(slices, context=self)

    def from_records(self, records: Iterable[Any], num_partitions: Optional[int] = None):
        """Like ``parallelize`` but coerces (key, value) tuples to Records"""
        from stquery.core.stobject import as_record

        return self.parallelize((as_record(r) for r in records), num_partitions)
