"""Spiderfied circle layout of overlapping cluster members.

After Leaflet.markercluster's spiderfier: members sit on a circle around
the cluster center, one foot separation apart, with a connecting leg from
the center to each.
"""

import math
from typing import Sequence

__all__ = ['leg_length', 'generate_points_circle']

Coordinate = tuple[float, float]


def leg_length(count: int, resolution: float, multiplier: float = 1.0,
               foot_separation: float = 28.0, min_leg: float = 35.0) -> float:
    """Leg length in map units: ``max(circumference / 2π, min_leg) × resolution``."""
    circumference = multiplier * foot_separation * (2 + count)
    return max(circumference / (2 * math.pi), min_leg) * resolution


def generate_points_circle(
    count: int,
    center: Sequence[float],
    resolution: float,
    multiplier: float = 1.0,
    foot_separation: float = 28.0,
    start_angle: float = math.pi / 2,
    min_leg: float = 35.0,
) -> list[Coordinate]:
    """Place ``count`` points evenly around ``center``.

    Parameters
    ----------
    count : int
        Number of cluster members.
    center : sequence of float
        Cluster centroid in map coordinates.
    resolution : float
        Map units per screen pixel.
    multiplier, foot_separation, min_leg : float
        Layout constants in screen pixels.
    start_angle : float
        Angle of the first member, radians.

    Returns
    -------
    list of tuple
        One coordinate per member, in member order.

    Examples
    --------
    >>> x, y = generate_points_circle(2, (0, 0), 1.0)[0]
    >>> round(x, 9), round(y, 9)
    (0.0, 35.0)
    """
    if count <= 0:
        return []

    length = leg_length(count, resolution, multiplier, foot_separation, min_leg)
    step = 2 * math.pi / count
    cx, cy = float(center[0]), float(center[1])

    points = []
    for i in range(count):
        angle = start_angle + i * step
        points.append((cx + length * math.cos(angle), cy + length * math.sin(angle)))
    return points
