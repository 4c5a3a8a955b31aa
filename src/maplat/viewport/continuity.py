"""Viewport continuity across a projection switch.

A warped projection has no single global scale or rotation, so the local
distortion at the view center is estimated by sampling: eight points at
``base_radius`` around the center (bearings ``0, π/4, ..., 7π/4`` measured
clockwise from north) are reprojected, and the bearing offsets and
distances of the reprojected samples from the reprojected center are
averaged. The view is carried through the reference projection: source →
reference, then reference → target.
"""

import logging
import math
from typing import NamedTuple, Optional, Sequence, TYPE_CHECKING

from maplat.errors import DegenerateTransformError

if TYPE_CHECKING:
    from maplat.projection.registry import ProjectionRegistry
    from maplat.schemas import InternalConfig

__all__ = [
    'THETAS',
    'ViewState',
    'ViewportContinuity',
    'normalize_angle',
    'vicinities',
    'sample_params',
    'base_to_map',
    'map_to_base',
    'continuity',
]

logger = logging.getLogger(__name__)

Coordinate = tuple[float, float]

THETAS = tuple(i * math.pi / 4 for i in range(8))


class ViewState(NamedTuple):
    """Center, rotation (radians) and resolution (units per screen pixel)."""
    center: Coordinate
    rotation: float
    resolution: float


def normalize_angle(theta: float) -> float:
    """Map an angle into ``(-π, π]``.

    Examples
    --------
    >>> normalize_angle(3 * math.pi / 2)
    -1.5707963267948966
    >>> normalize_angle(-math.pi)
    3.141592653589793
    """
    while theta > math.pi or theta <= -math.pi:
        theta = theta - 2 * math.pi if theta > math.pi else theta + 2 * math.pi
    return theta


def vicinities(center: Sequence[float], radius: float) -> list[Coordinate]:
    """The center followed by the eight sample points around it."""
    cx, cy = float(center[0]), float(center[1])
    points = [(cx, cy)]
    points.extend((cx + math.sin(t) * radius, cy + math.cos(t) * radius) for t in THETAS)
    return points


def sample_params(center: Sequence[float], radius: float, registry: "ProjectionRegistry",
                  target_code: str, base_code: str) -> tuple[Coordinate, float, float]:
    """Reproject the sample ring from ``base_code`` into ``target_code``.

    Returns
    -------
    tuple
        ``(target_center, angle, distance)``: the reprojected center, the
        mean bearing offset of the samples and their mean distance from
        the center, in target units.
    """
    projected = [registry.transform(p, base_code, target_code) for p in vicinities(center, radius)]
    target_center = projected[0]

    sum_cos = sum_sin = sum_dist = 0.0
    for theta, (x, y) in zip(THETAS, projected[1:]):
        dx, dy = x - target_center[0], y - target_center[1]
        offset = normalize_angle(math.atan2(dx, dy) - theta)
        sum_cos += math.cos(offset)
        sum_sin += math.sin(offset)
        sum_dist += math.hypot(dx, dy)

    distance = sum_dist / len(THETAS)
    if not distance > 0 or not math.isfinite(distance):
        raise DegenerateTransformError(
            f"Projection {target_code} collapses the view around {tuple(center)} "
            f"(mean sample distance {distance})"
        )
    return target_center, math.atan2(sum_sin, sum_cos), distance


def base_to_map(state: ViewState, base_radius: float, registry: "ProjectionRegistry",
                map_code: str, base_code: str) -> ViewState:
    """Carry a reference-projection view into ``map_code``."""
    center, angle, distance = sample_params(state.center, base_radius, registry, map_code, base_code)
    return ViewState(
        center=center,
        rotation=normalize_angle(state.rotation - angle),
        resolution=state.resolution * distance / base_radius,
    )


def map_to_base(state: ViewState, base_radius: float, registry: "ProjectionRegistry",
                map_code: str, base_code: str) -> ViewState:
    """Carry a ``map_code`` view into the reference projection.

    The distortion is sampled around the view center's reference
    coordinates, so this is the inverse of ``base_to_map`` at that point.
    """
    base_center = registry.transform(state.center, map_code, base_code)
    _, angle, distance = sample_params(base_center, base_radius, registry, map_code, base_code)
    return ViewState(
        center=base_center,
        rotation=normalize_angle(state.rotation + angle),
        resolution=state.resolution * base_radius / distance,
    )


def continuity(from_center: Sequence[float], from_rotation: float, from_resolution: float,
               base_radius: float, from_code: str, to_code: str,
               registry: "ProjectionRegistry", base_code: Optional[str] = None) -> ViewState:
    """Convert a view from one projection to another, keeping it continuous.

    Parameters
    ----------
    from_center : sequence of float
        View center in ``from_code`` coordinates.
    from_rotation : float
        View rotation in radians.
    from_resolution : float
        ``from_code`` units per screen pixel.
    base_radius : float
        Sampling radius, in reference projection units.
    from_code, to_code : str
        Registered projection codes.
    registry : ProjectionRegistry
        Registry relating the codes.
    base_code : str, optional
        Intermediate projection; defaults to the registry's reference.

    Returns
    -------
    ViewState
        The view in ``to_code``. Equal to the input when both codes match.

    Examples
    --------
    >>> continuity((1.0, 2.0), 0.3, 5.0, 500, "EPSG:3857", "EPSG:3857", registry)
    ViewState(center=(1.0, 2.0), rotation=0.3, resolution=5.0)
    """
    state = ViewState((float(from_center[0]), float(from_center[1])),
                      from_rotation, from_resolution)
    if from_code == to_code:
        return state

    base_code = base_code or registry.reference_code
    if from_code != base_code:
        state = map_to_base(state, base_radius, registry, from_code, base_code)
    if to_code != base_code:
        state = base_to_map(state, base_radius, registry, to_code, base_code)

    logger.debug("View %s -> %s: rotation %.4f, resolution %.6g",
                 from_code, to_code, state.rotation, state.resolution)
    return state


class ViewportContinuity:
    """Continuity transform bound to a registry and a sampling radius.

    Parameters
    ----------
    registry : ProjectionRegistry
        Session registry.
    base_radius : float
        Sampling radius in reference projection units.
    """

    def __init__(self, registry: "ProjectionRegistry", base_radius: float = 500.0):
        self.registry = registry
        self.base_radius = base_radius

    @classmethod
    def from_config(cls, registry: "ProjectionRegistry",
                    config: "InternalConfig") -> "ViewportContinuity":
        return cls(registry, config.viewport.base_radius)

    def transform(self, center: Sequence[float], rotation: float, resolution: float,
                  from_code: str, to_code: str) -> ViewState:
        return continuity(center, rotation, resolution, self.base_radius,
                          from_code, to_code, self.registry)
