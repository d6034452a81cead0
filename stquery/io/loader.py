"""
Record loader

Reads CSV or Parquet files into Records. Geometries come from a WKT text
column (or a WKB binary column, as written by GeoParquet); optional start
and end columns give the time interval. The remaining columns become the
record value as a dict.
"""

import logging
from pathlib import Path
from typing import Any, List, Optional, Union

import pyarrow as pa
import pyarrow.csv as pa_csv
import pyarrow.parquet as pq
import shapely
from shapely.errors import GEOSException

from stquery.core.exceptions import ValidationError
from stquery.core.stobject import Interval, Record, STObject

logger = logging.getLogger(__name__)


def _read_table(path: Path) -> pa.Table:
    if not path.exists():
        raise ValidationError(f"Record file not found: {path}")

    try:
        if path.suffix.lower() in (".parquet", ".geoparquet", ".pq"):
            return pq.read_table(path)
        return pa_csv.read_csv(path)
    except pa.ArrowInvalid as e:
        raise ValidationError(f"Cannot read {path}: {e}") from e


def _geometries(column: pa.ChunkedArray) -> Any:
    values = column.to_numpy(zero_copy_only=False)
    if pa.types.is_binary(column.type) or pa.types.is_large_binary(column.type):
        return shapely.from_wkb(values)
    return shapely.from_wkt(values)


def read_records(
    path: Union[str, Path],
    geometry_column: str = "wkt",
    start_column: Optional[str] = None,
    end_column: Optional[str] = None,
) -> List[Record]:
    """
    Load records from a CSV or Parquet file

    Args:
        path: File path (.csv, or .parquet / .geoparquet)
        geometry_column: Column holding WKT text or WKB bytes
        start_column: Optional column with interval starts
        end_column: Optional column with interval ends (null: unbounded)

    Returns:
        Records in file order

    Raises:
        ValidationError: If the file or a named column is missing

    Examples:
        >>> records = read_records("sensors.csv", start_column="t0", end_column="t1")
        >>> records[0].value
        {'id': 1, 'name': 'north gate'}
    """
    path = Path(path)
    table = _read_table(path)

    for column in (geometry_column, start_column, end_column):
        if column is not None and column not in table.column_names:
            raise ValidationError(
                f"Column {column!r} not in {path.name} (columns: {', '.join(table.column_names)})"
            )

    try:
        geometries = _geometries(table.column(geometry_column))
    except GEOSException as e:
        raise ValidationError(f"Invalid geometry in {path.name}: {e}") from e

    starts = table.column(start_column).to_pylist() if start_column else None
    ends = table.column(end_column).to_pylist() if end_column else None

    value_columns = [
        c for c in table.column_names if c not in (geometry_column, start_column, end_column)
    ]
    if value_columns:
        values = table.select(value_columns).to_pylist()
    else:
        values = [{} for _ in range(table.num_rows)]

    records = []
    for row, geometry in enumerate(geometries):
        time = None
        if starts is not None and starts[row] is not None:
            time = Interval(starts[row], ends[row] if ends is not None else None)
        records.append(Record(STObject(geometry, time), values[row]))

    logger.info("Loaded %d records from %s", len(records), path)
    return records
