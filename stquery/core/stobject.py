"""
Spatio-temporal data model

An STObject pairs a shapely geometry with an optional time Interval.
Records are (key, value) pairs keyed by an STObject.
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, Tuple, TypeVar

from shapely.geometry import box
from shapely.geometry.base import BaseGeometry

from stquery.core.exceptions import ValidationError

V = TypeVar("V")


@dataclass(frozen=True)
class Interval:
    """
    Time interval over numeric instants (e.g. epoch milliseconds)

    The start is always inclusive. The end is inclusive when ``right_closed``
    is True and exclusive otherwise; ``end=None`` means unbounded.

    Examples:
        >>> Interval(0, 10).intersects(Interval(10, 20))
        True
        >>> Interval(0, 10, right_closed=False).intersects(Interval(10, 20))
        False
    """

    start: float
    end: Optional[float] = None
    right_closed: bool = True

    def __post_init__(self):
        if self.end is not None and self.end < self.start:
            raise ValidationError(f"Interval end {self.end} is before start {self.start}")

    @property
    def upper(self) -> float:
        return float("inf") if self.end is None else self.end

    @property
    def length(self) -> float:
        return self.upper - self.start

    def _reaches(self, instant: float) -> bool:
        """True if ``instant`` is not after the end of this interval"""
        if self.end is None:
            return True
        return instant < self.end or (instant == self.end and self.right_closed)

    def intersects(self, other: "Interval") -> bool:
        return self._reaches(other.start) and other._reaches(self.start)

    def contains(self, other: "Interval") -> bool:
        if other.start < self.start:
            return False
        if self.end is None:
            return True
        if other.end is None:
            return False
        if other.end < self.end:
            return True
        return other.end == self.end and (self.right_closed or not other.right_closed)

    def span(self, other: "Interval") -> "Interval":
        """Smallest interval covering both"""
        if self.upper > other.upper:
            end, closed = self.end, self.right_closed
        elif other.upper > self.upper:
            end, closed = other.end, other.right_closed
        else:
            end, closed = self.end, self.right_closed or other.right_closed
        return Interval(min(self.start, other.start), end, closed)


@dataclass(frozen=True)
class STObject:
    """
    Geometry with an optional validity interval

    Spatial relations are evaluated with shapely. The temporal part of a
    relation holds when neither side carries a time, or when both do and
    the interval relation holds. A timed object never relates to a
    timeless one.

    Examples:
        >>> from shapely.geometry import Point
        >>> a = STObject(Point(0, 0).buffer(1), Interval(0, 10))
        >>> a.contains(STObject(Point(0, 0), Interval(2, 3)))
        True
    """

    geometry: BaseGeometry
    time: Optional[Interval] = None

    @classmethod
    def from_wkt(cls, wkt: str, start: Optional[float] = None, end: Optional[float] = None) -> "STObject":
        from shapely import wkt as shapely_wkt

        time = Interval(start, end) if start is not None else None
        return cls(shapely_wkt.loads(wkt), time)

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """Envelope as (minx, miny, maxx, maxy)"""
        return self.geometry.bounds  # type: ignore[no-any-return]

    @property
    def envelope(self) -> BaseGeometry:
        return box(*self.bounds)

    def _temporal(self, other: "STObject", relation: str) -> bool:
        if self.time is None and other.time is None:
            return True
        if self.time is None or other.time is None:
            return False
        return getattr(self.time, relation)(other.time)  # type: ignore[no-any-return]

    def intersects(self, other: "STObject") -> bool:
        return self.geometry.intersects(other.geometry) and self._temporal(other, "intersects")

    def contains(self, other: "STObject") -> bool:
        return self.geometry.contains(other.geometry) and self._temporal(other, "contains")

    def contained_by(self, other: "STObject") -> bool:
        return other.contains(self)

    def __repr__(self) -> str:
        if self.time is None:
            return f"STObject({self.geometry.wkt})"
        return f"STObject({self.geometry.wkt}, {self.time})"


@dataclass(frozen=True)
class Record(Generic[V]):
    """Immutable (key, value) pair. Keys need not be unique."""

    key: STObject
    value: V

    def __iter__(self):
        yield self.key
        yield self.value


def as_record(item: Any) -> Record:
    """Coerce a (key, value) tuple into a Record"""
    if isinstance(item, Record):
        return item
    key, value = item
    return Record(key, value)
