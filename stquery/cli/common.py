"""
Shared CLI helpers
"""

import argparse
import dataclasses

from stquery.engine import EngineConfig, ExecutionContext, PartitionedCollection
from stquery.grid import GridPartitioner
from stquery.io import read_records


def load_partitioned(args: argparse.Namespace) -> PartitionedCollection:
    """Read the input file and partition it on the requested grid"""
    config = EngineConfig.from_env()
    if args.workers is not None:
        config = dataclasses.replace(config, max_workers=args.workers)
    ctx = ExecutionContext(config)

    records = read_records(
        args.path,
        geometry_column=args.geometry_column,
        start_column=args.start_column,
        end_column=args.end_column,
    )
    cells_x, cells_y = args.grid
    grid = GridPartitioner.from_records(records, cells_x, cells_y)
    return ctx.from_records(records).partition_by(grid)
