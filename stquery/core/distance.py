"""
Distance functions over STObjects

A distance function maps two STObjects to a float. The query core treats
it as opaque and never assumes it is bounded by envelope geometry.
"""

import math
from typing import Callable

from stquery.core.stobject import STObject

DistanceFunction = Callable[[STObject, STObject], float]


def euclidean_distance(a: STObject, b: STObject) -> float:
    """Minimum planar distance between the two geometries"""
    return float(a.geometry.distance(b.geometry))


def centroid_distance(a: STObject, b: STObject) -> float:
    """Planar distance between the geometry centroids"""
    ca, cb = a.geometry.centroid, b.geometry.centroid
    return math.hypot(ca.x - cb.x, ca.y - cb.y)


def temporal_distance(a: STObject, b: STObject) -> float:
    """
    Gap between the two intervals, 0 when they overlap

    Objects without a time are infinitely far from everything.
    """
    if a.time is None or b.time is None:
        return math.inf
    if a.time.intersects(b.time):
        return 0.0
    if a.time.upper < b.time.start:
        return b.time.start - a.time.upper
    return a.time.start - b.time.upper
