"""
stquery Demo

Random points and boxes on a grid, queried with every operation.

Usage:
    python examples/demo_queries.py --records 5000 --grid 8 --workers 4
"""

import argparse
import logging

import numpy as np
from shapely.geometry import Point, box

from stquery import (
    EngineConfig,
    ExecutionContext,
    GridPartitioner,
    Interval,
    JoinPredicate,
    Record,
    STObject,
    TemporalRangePartitioner,
    euclidean_distance,
)


def parse_args():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description="stquery Demo")
    parser.add_argument("--records", type=int, default=5000, help="Number of records (default: 5000)")
    parser.add_argument("--grid", type=int, default=8, help="Grid cells per axis (default: 8)")
    parser.add_argument("--workers", type=int, default=4, help="Worker threads (default: 4)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    return parser.parse_args()


def make_records(n: int, seed: int, extent: float = 100.0):
    """Timed points and small boxes spread over a square"""
    rng = np.random.default_rng(seed)
    records = []
    for i in range(n):
        x, y = rng.uniform(0, extent, 2)
        geometry = Point(x, y) if i % 3 else box(x, y, x + rng.uniform(0.5, 4), y + rng.uniform(0.5, 4))
        start = float(rng.integers(0, 1000))
        records.append(Record(STObject(geometry, Interval(start, start + 50)), i))
    return records


def main():
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    ctx = ExecutionContext(EngineConfig(max_workers=args.workers))
    records = make_records(args.records, args.seed)

    print("=" * 60)
    print("Partitioning")
    print("=" * 60)
    grid = GridPartitioner.from_records(records, args.grid)
    points = ctx.from_records(records).partition_by(grid)
    sizes = points.partition_sizes()
    print(f"  {points.count():,} records in {points.num_partitions} partitions")
    print(f"  largest: {max(sizes):,}, empty: {sum(1 for s in sizes if s == 0)}")

    fns = points.live_index(tree_order=10)
    window = STObject(box(20, 20, 35, 30), Interval(100, 400))

    print()
    print("Filter")
    print("-" * 60)
    for predicate in JoinPredicate:
        result = fns.filter(window, predicate)
        print(f"  {predicate.value:12s} {result.count():6,} matches from {result.num_partitions} partitions")

    print()
    print("kNN (k=5)")
    print("-" * 60)
    qry = STObject(Point(50, 50), Interval(0, 1000))
    for row in fns.knn(qry, 5, euclidean_distance, safety_margin=5.0).collect():
        distance, value = row.value
        print(f"  #{value:<6} {distance:.4f}")

    print()
    print("Within distance 3.0")
    print("-" * 60)
    print(f"  {fns.within_distance(qry, 3.0, euclidean_distance).count():,} records")

    print()
    print("Temporal self-join (intersects)")
    print("-" * 60)
    sample = ctx.from_records(records[:500])
    buckets = TemporalRangePartitioner.from_records(records[:500], 6)
    pairs = sample.live_index().join(sample, JoinPredicate.INTERSECTS, partitioner=buckets)
    print(f"  {pairs.count():,} pairs over {pairs.num_partitions} partition pairs")


if __name__ == "__main__":
    main()
