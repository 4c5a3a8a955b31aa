"""Reproject and spatially filter a feature collection."""

import logging
from typing import Iterable, Optional, Sequence, TYPE_CHECKING

import numpy as np
import shapely
from shapely.geometry import box
from shapely.geometry.base import BaseGeometry

from maplat.vector.feature import Feature

if TYPE_CHECKING:
    from maplat.projection.registry import ProjectionRegistry

__all__ = ['transform_geometry', 'filter_features']

logger = logging.getLogger(__name__)

Extent = tuple[float, float, float, float]


def transform_geometry(geometry: BaseGeometry, registry: "ProjectionRegistry",
                       source: str, destination: str) -> BaseGeometry:
    """Return ``geometry`` with every vertex converted ``source → destination``."""
    fn = registry.get_transform(source, destination)

    def convert(coords: np.ndarray) -> np.ndarray:
        return np.array([fn(xy) for xy in coords], dtype=float).reshape(-1, 2)

    return shapely.transform(geometry, convert)


def filter_features(
    features: Iterable[Feature],
    registry: "ProjectionRegistry",
    extent: Optional[Sequence[float]] = None,
    project_to: Optional[str] = None,
) -> list[Feature]:
    """Clone, optionally reproject, and keep features intersecting ``extent``.

    Parameters
    ----------
    features : iterable of Feature
        Features with lon/lat geometries. Never modified.
    registry : ProjectionRegistry
        Registry used for reprojection.
    extent : sequence of float, optional
        ``(minx, miny, maxx, maxy)``, in ``project_to`` coordinates when
        reprojecting. All features are kept when omitted.
    project_to : str, optional
        Target projection code; features are read as the registry's
        geographic projection (``EPSG:4326``).

    Returns
    -------
    list of Feature
        New feature objects, in input order.
    """
    bounds = box(*extent) if extent is not None else None

    kept = []
    total = 0
    for feature in features:
        total += 1
        clone = feature.clone()
        if project_to:
            clone.geometry = transform_geometry(
                clone.geometry, registry, registry.geographic_code, project_to)
        if bounds is None or clone.geometry.intersects(bounds):
            kept.append(clone)

    logger.debug("Vector filter kept %d of %d feature(s)", len(kept), total)
    return kept
