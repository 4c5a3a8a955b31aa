"""Convex hull of cluster members (Andrew's monotone chain)."""

from typing import Iterable, Sequence

from shapely.geometry import LineString, Point, Polygon
from shapely.geometry.base import BaseGeometry

__all__ = ['monotone_chain_convex_hull', 'hull_geometry']

Coordinate = tuple[float, float]


def _cross(o: Coordinate, a: Coordinate, b: Coordinate) -> float:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def monotone_chain_convex_hull(points: Iterable[Sequence[float]]) -> list[Coordinate]:
    """Counter-clockwise hull vertices of a raw point set.

    Duplicate and collinear points are dropped from the hull. Fewer than
    three points are returned as given (sorted), so a single point or a
    pair is a valid degenerate hull.

    Examples
    --------
    >>> monotone_chain_convex_hull([(0, 0), (2, 0), (1, 1), (2, 2), (0, 2)])
    [(0.0, 0.0), (2.0, 0.0), (2.0, 2.0), (0.0, 2.0)]
    >>> monotone_chain_convex_hull([(3, 4)])
    [(3.0, 4.0)]
    """
    pts = sorted((float(p[0]), float(p[1])) for p in points)
    if len(pts) <= 2:
        return pts

    lower: list[Coordinate] = []
    for p in pts:
        while len(lower) >= 2 and _cross(lower[-2], lower[-1], p) <= 0:
            lower.pop()
        lower.append(p)

    upper: list[Coordinate] = []
    for p in reversed(pts):
        while len(upper) >= 2 and _cross(upper[-2], upper[-1], p) <= 0:
            upper.pop()
        upper.append(p)

    return lower[:-1] + upper[:-1]


def hull_geometry(points: Iterable[Sequence[float]]) -> BaseGeometry:
    """Shapely geometry of the hull: Polygon, LineString or Point when degenerate."""
    hull = list(dict.fromkeys(monotone_chain_convex_hull(points)))
    if len(hull) >= 3:
        return Polygon(hull)
    if len(hull) == 2:
        return LineString(hull)
    if len(hull) == 1:
        return Point(hull[0])
    return Polygon()
