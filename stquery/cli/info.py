"""
Info CLI command

Shows how a record file is spread over the spatial grid.
"""

import argparse

from stquery.cli.common import load_partitioned
from stquery.core.exceptions import STQueryError


def run_info(args: argparse.Namespace) -> None:
    """Run the info command"""
    try:
        collection = load_partitioned(args)
    except STQueryError as e:
        print(f"Error: {e}")
        return

    grid = collection.partitioner
    sizes = collection.partition_sizes()

    print(f"File: {args.path}")
    print(f"Records: {collection.count():,}")
    print(f"Partitions: {collection.num_partitions} ({grid.cells_x}x{grid.cells_y} grid)")
    print(f"Empty Partitions: {sum(1 for s in sizes if s == 0)}")
    print()

    print("Partition Bounds:")
    print("-" * 60)
    for partition_id, size in enumerate(sizes):
        if size == 0:
            continue
        minx, miny, maxx, maxy = grid.bounds_of(partition_id)
        label = grid.cell_label(partition_id)
        print(f"  {label}  {size:8,}  ({minx:.4f}, {miny:.4f}, {maxx:.4f}, {maxy:.4f})")
