"""
stquery CLI Entry Points

Provides command-line interface for:
- info: Show how a record file partitions on a grid
- filter: Partition-pruned range filter
- knn: k nearest neighbours
- within: Records within a distance
"""

import argparse
import logging
import sys


def _add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", help="CSV or Parquet file with a geometry column")
    parser.add_argument(
        "--geometry-column", default="wkt", help="WKT/WKB geometry column (default: wkt)"
    )
    parser.add_argument("--start-column", help="Interval start column")
    parser.add_argument("--end-column", help="Interval end column")
    parser.add_argument(
        "--grid",
        nargs=2,
        type=int,
        default=(4, 4),
        metavar=("NX", "NY"),
        help="Spatial grid cells (default: 4 4)",
    )
    parser.add_argument("--order", type=int, default=10, help="Live R-tree order (default: 10)")


def _add_query_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--wkt", required=True, help="Query geometry as WKT")
    parser.add_argument("--start", type=float, help="Query interval start")
    parser.add_argument("--end", type=float, help="Query interval end")


def main():
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description="stquery - Partition-pruned spatio-temporal queries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  stquery info points.csv --grid 8 8
  stquery filter points.csv --wkt "POLYGON ((0 0, 5 0, 5 5, 0 5, 0 0))"
  stquery filter events.csv --wkt "POINT (1 1)" --start-column t0 --end-column t1 \\
      --start 10 --end 20 --predicate containedby --index temporal
  stquery knn points.csv --wkt "POINT (0 0)" -k 5
  stquery within points.csv --wkt "POINT (0 0)" --max-dist 2.5
        """,
    )

    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--workers", type=int, help="Worker count (default: STQUERY_MAX_WORKERS or CPUs)")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Info command
    info_parser = subparsers.add_parser("info", help="Show partition statistics")
    _add_input_arguments(info_parser)

    # Filter command
    filter_parser = subparsers.add_parser("filter", help="Range filter with partition pruning")
    _add_input_arguments(filter_parser)
    _add_query_arguments(filter_parser)
    filter_parser.add_argument(
        "--predicate",
        default="intersects",
        choices=["intersects", "contains", "containedby"],
        help="Predicate between record and query (default: intersects)",
    )
    filter_parser.add_argument(
        "--index",
        default="spatial",
        choices=["none", "spatial", "temporal"],
        help="Live index per partition (default: spatial)",
    )

    # kNN command
    knn_parser = subparsers.add_parser("knn", help="k nearest neighbours (Euclidean)")
    _add_input_arguments(knn_parser)
    _add_query_arguments(knn_parser)
    knn_parser.add_argument("-k", type=int, default=5, help="Neighbours to return (default: 5)")
    knn_parser.add_argument(
        "--no-prune", action="store_true", help="Search every partition (exact result)"
    )
    knn_parser.add_argument("--margin", type=float, help="Safety margin for partition pruning")

    # Within command
    within_parser = subparsers.add_parser("within", help="Records within a Euclidean distance")
    _add_input_arguments(within_parser)
    _add_query_arguments(within_parser)
    within_parser.add_argument("--max-dist", type=float, required=True, help="Distance bound")

    args = parser.parse_args()

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(message)s" if not args.verbose else "%(levelname)s: %(message)s"
    )

    if args.command == "info":
        from stquery.cli.info import run_info

        run_info(args)
    elif args.command in ("filter", "knn", "within"):
        from stquery.cli.query import run_query

        run_query(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
