"""Distance-based point clustering.

Features are visited in source order. Each feature not yet clustered
claims every unclustered feature within ``distance × resolution`` of it on
both axes (a square neighbourhood, i.e. the Chebyshev distance), and the
cluster geometry is the mean of the claimed members' coordinates.

Clusters are rebuilt wholesale for every resolution or feature change and
never mutated, so a new generation never shares object identity with the
previous one.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, TYPE_CHECKING

import numpy as np
import shapely
from scipy.spatial import cKDTree
from shapely.geometry import Point

from maplat.contracts import assert_partitioned
from maplat.vector.feature import Feature

if TYPE_CHECKING:
    from maplat.schemas import InternalConfig

__all__ = ['Cluster', 'cluster_features', 'ClusterEngine']

logger = logging.getLogger(__name__)

Extent = tuple[float, float, float, float]


@dataclass(frozen=True, eq=False)
class Cluster:
    """Synthetic point aggregating one or more features.

    ``members`` holds the original feature objects. Clusters compare by
    identity.
    """
    members: tuple[Feature, ...]
    geometry: Point

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def coordinates(self) -> tuple[float, float]:
        return (self.geometry.x, self.geometry.y)

    @property
    def extent(self) -> Extent:
        """Union extent of the member geometries."""
        minx, miny, maxx, maxy = shapely.total_bounds([m.geometry for m in self.members])
        return (float(minx), float(miny), float(maxx), float(maxy))


def _is_point(feature: Feature) -> bool:
    geometry = feature.geometry
    return geometry is not None and not geometry.is_empty and geometry.geom_type == "Point"


def cluster_features(features: Iterable[Feature], distance: float,
                     resolution: float) -> list[Cluster]:
    """Group point features closer than ``distance`` screen pixels.

    Parameters
    ----------
    features : iterable of Feature
        Features with point geometries; others are skipped.
    distance : float
        Cluster distance in screen pixels.
    resolution : float
        Map units per screen pixel.

    Returns
    -------
    list of Cluster
        In order of each cluster's first member.

    Raises
    ------
    ContractViolation
        If the clusters do not partition the point features.
    """
    points = [f for f in features if _is_point(f)]
    if not points:
        return []

    coords = np.array([(f.geometry.x, f.geometry.y) for f in points], dtype=float)
    tree = cKDTree(coords)
    radius = distance * resolution

    clustered = np.zeros(len(points), dtype=bool)
    clusters = []
    for i in range(len(points)):
        if clustered[i]:
            continue
        neighbours = sorted(tree.query_ball_point(coords[i], r=radius, p=np.inf))
        claimed = [j for j in neighbours if not clustered[j]]
        clustered[claimed] = True

        centroid = coords[claimed].mean(axis=0)
        clusters.append(Cluster(
            members=tuple(points[j] for j in claimed),
            geometry=Point(float(centroid[0]), float(centroid[1])),
        ))

    assert_partitioned(points, clusters)
    return clusters


class ClusterEngine:
    """Clusters of a feature collection, recomputed per resolution.

    The last result is cached until the resolution changes or the features
    are replaced (which bumps ``generation``).

    Parameters
    ----------
    features : iterable of Feature, optional
        Source features.
    distance : float
        Cluster distance in screen pixels.
    """

    def __init__(self, features: Iterable[Feature] = (), distance: float = 35.0):
        self.distance = distance
        self.generation = 0
        self._features: list[Feature] = list(features)
        self._cached_key: Optional[tuple[float, int]] = None
        self._cached: tuple[Cluster, ...] = ()

    @classmethod
    def from_config(cls, config: "InternalConfig",
                    features: Iterable[Feature] = ()) -> "ClusterEngine":
        return cls(features, config.cluster.distance)

    @property
    def features(self) -> Sequence[Feature]:
        return tuple(self._features)

    def set_features(self, features: Iterable[Feature]) -> None:
        self._features = list(features)
        self.generation += 1
        self._cached_key = None

    def clusters(self, resolution: float) -> tuple[Cluster, ...]:
        key = (resolution, self.generation)
        if key != self._cached_key:
            self._cached = tuple(cluster_features(self._features, self.distance, resolution))
            self._cached_key = key
            logger.debug("Clustered %d feature(s) into %d cluster(s) at resolution %g",
                         len(self._features), len(self._cached), resolution)
        return self._cached
