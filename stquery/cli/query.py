"""
Query CLI commands

filter, knn and within over a gridded record file.
"""

import argparse
import logging

from shapely import wkt

from stquery.cli.common import load_partitioned
from stquery.core.distance import euclidean_distance
from stquery.core.exceptions import STQueryError
from stquery.core.predicates import IndexType, JoinPredicate
from stquery.core.stobject import Interval, STObject

logger = logging.getLogger(__name__)


def _query_object(args: argparse.Namespace) -> STObject:
    time = Interval(args.start, args.end) if args.start is not None else None
    return STObject(wkt.loads(args.wkt), time)


def run_query(args: argparse.Namespace) -> None:
    """Run the filter, knn or within command"""
    try:
        collection = load_partitioned(args)
        qry = _query_object(args)
        fns = collection.live_index(args.order)

        if args.command == "filter":
            result = fns.filter(
                qry, JoinPredicate.parse(args.predicate), IndexType.parse(args.index)
            )
            rows = [(r.key, r.value, None) for r in result.collect()]
        elif args.command == "knn":
            result = fns.knn(
                qry,
                args.k,
                euclidean_distance,
                prune=not args.no_prune,
                safety_margin=args.margin,
            )
            rows = [(r.key, r.value[1], r.value[0]) for r in result.collect()]
        else:
            result = fns.within_distance(qry, args.max_dist, euclidean_distance)
            rows = [(r.key, r.value, euclidean_distance(r.key, qry)) for r in result.collect()]
    except STQueryError as e:
        print(f"Error: {e}")
        return

    for key, value, distance in rows:
        prefix = f"{distance:.6f}  " if distance is not None else ""
        print(f"{prefix}{key.geometry.wkt}  {value}")
    print()
    print(f"{len(rows):,} result(s)")
