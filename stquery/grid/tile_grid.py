"""
GridPartitioner Implementation

Fixed planar grid of equally sized cells over a data extent.
"""

import math
from typing import Dict, Iterable, Optional, Tuple

from stquery.core.exceptions import ValidationError
from stquery.core.stobject import Record, STObject
from stquery.grid.base import Bounds, SpatialPartitioner, bounds_union


class GridPartitioner(SpatialPartitioner):
    """
    Fixed spatial grid partitioner

    The extent is split into ``cells_x`` × ``cells_y`` equal cells. A record
    is assigned to the cell containing the centre of its envelope, so a
    polygon may reach beyond its cell. ``bounds_of`` therefore returns the
    cell widened by every envelope assigned to it.

    Cells are numbered row-major from the lower-left corner:
    partition id = y_idx * cells_x + x_idx. Cell labels use the
    "xNNNN_yNNNN" format.

    Examples:
        >>> from shapely.geometry import Point
        >>> grid = GridPartitioner((0.0, 0.0, 10.0, 10.0), 2, 2)
        >>> grid.partition_for(STObject(Point(7, 2)))
        1
        >>> grid.cell_label(3)
        'x0001_y0001'
        >>> grid.bounds_of(3)
        (5.0, 5.0, 10.0, 10.0)
    """

    def __init__(
        self,
        extent: Bounds,
        cells_x: int,
        cells_y: Optional[int] = None,
        extents: Optional[Dict[int, Bounds]] = None,
    ):
        """
        Initialize grid

        Args:
            extent: Area covered by the grid as (minx, miny, maxx, maxy)
            cells_x: Number of cells along x
            cells_y: Number of cells along y (default: cells_x)
            extents: Optional per-cell envelopes of assigned records
        """
        cells_y = cells_x if cells_y is None else cells_y
        if cells_x <= 0 or cells_y <= 0:
            raise ValidationError(f"Grid needs at least one cell per axis, got {cells_x}x{cells_y}")

        minx, miny, maxx, maxy = extent
        if maxx < minx or maxy < miny:
            raise ValidationError(f"Invalid grid extent: {extent}")

        self.extent = (float(minx), float(miny), float(maxx), float(maxy))
        self.cells_x = cells_x
        self.cells_y = cells_y
        # Degenerate extents (all points on a line) still get non-zero cells
        self.cell_width = (maxx - minx) / cells_x or 1.0
        self.cell_height = (maxy - miny) / cells_y or 1.0
        self._extents = dict(extents or {})

    @classmethod
    def from_records(
        cls, records: Iterable[Record], cells_x: int, cells_y: Optional[int] = None
    ) -> "GridPartitioner":
        """
        Build a grid over the extent of the given records

        Args:
            records: Records to cover
            cells_x: Number of cells along x
            cells_y: Number of cells along y (default: cells_x)

        Returns:
            GridPartitioner whose bounds cover every record envelope
        """
        total: Optional[Bounds] = None
        for record in records:
            b = record.key.bounds
            total = b if total is None else bounds_union(total, b)

        if total is None:
            raise ValidationError("Cannot build a grid over an empty record set")

        return cls(total, cells_x, cells_y)

    @property
    def num_partitions(self) -> int:
        return self.cells_x * self.cells_y

    def cell_index(self, x: float, y: float) -> Tuple[int, int]:
        """Cell indices of a coordinate, clamped to the grid"""
        x_idx = int(math.floor((x - self.extent[0]) / self.cell_width))
        y_idx = int(math.floor((y - self.extent[1]) / self.cell_height))
        x_idx = min(max(x_idx, 0), self.cells_x - 1)
        y_idx = min(max(y_idx, 0), self.cells_y - 1)
        return x_idx, y_idx

    def partition_for(self, key: STObject) -> int:
        minx, miny, maxx, maxy = key.bounds
        x_idx, y_idx = self.cell_index((minx + maxx) / 2, (miny + maxy) / 2)
        return y_idx * self.cells_x + x_idx

    def cell_bounds(self, partition_id: int) -> Bounds:
        """Nominal bounds of a cell, without widening"""
        x_idx, y_idx = self._parse_partition_id(partition_id)
        minx = self.extent[0] + x_idx * self.cell_width
        miny = self.extent[1] + y_idx * self.cell_height
        return (minx, miny, minx + self.cell_width, miny + self.cell_height)

    def bounds_of(self, partition_id: int) -> Bounds:
        cell = self.cell_bounds(partition_id)
        extent = self._extents.get(partition_id)
        return cell if extent is None else bounds_union(cell, extent)

    def widen(self, extents: Dict[int, Bounds]) -> "GridPartitioner":
        merged = dict(self._extents)
        for partition_id, b in extents.items():
            current = merged.get(partition_id)
            merged[partition_id] = b if current is None else bounds_union(current, b)
        return GridPartitioner(self.extent, self.cells_x, self.cells_y, merged)

    def cell_label(self, partition_id: int) -> str:
        """Format a partition id as "xNNNN_yNNNN" """
        x_idx, y_idx = self._parse_partition_id(partition_id)
        return f"x{x_idx:04d}_y{y_idx:04d}"

    # -------------------------------------------------------------------------
    # Internal helper methods
    # -------------------------------------------------------------------------

    def _parse_partition_id(self, partition_id: int) -> Tuple[int, int]:
        if not 0 <= partition_id < self.num_partitions:
            raise ValidationError(
                f"Partition id {partition_id} out of range [0, {self.num_partitions})"
            )
        return partition_id % self.cells_x, partition_id // self.cells_x

    def __eq__(self, other: object) -> bool:
        # Same layout means same assignment; widened extents do not matter
        if not isinstance(other, GridPartitioner):
            return NotImplemented
        return (
            self.extent == other.extent
            and self.cells_x == other.cells_x
            and self.cells_y == other.cells_y
        )

    def __hash__(self) -> int:
        return hash((self.extent, self.cells_x, self.cells_y))

    def __repr__(self) -> str:
        return f"GridPartitioner(extent={self.extent}, cells={self.cells_x}x{self.cells_y})"
