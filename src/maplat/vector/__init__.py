"""Vector features and the reproject/extent filter."""

from maplat.vector.feature import Feature, features_from_geojson
from maplat.vector.filter import filter_features, transform_geometry

__all__ = [
    'Feature',
    'features_from_geojson',
    'filter_features',
    'transform_geometry',
]
