"""Vector features: a shapely geometry plus a properties dict.

Features compare by identity. Clustering keeps references to the original
feature objects, so two features with equal geometry and properties are
still distinct markers.
"""

from typing import Any, Iterable, Optional

from shapely.geometry import mapping, shape
from shapely.geometry.base import BaseGeometry

__all__ = ['Feature', 'features_from_geojson']


class Feature:
    """A geometry with properties.

    Parameters
    ----------
    geometry : shapely geometry
        Feature geometry, in whatever projection the caller works in.
    properties : dict, optional
        Arbitrary attributes.
    """

    __slots__ = ("geometry", "properties")

    def __init__(self, geometry: BaseGeometry, properties: Optional[dict[str, Any]] = None):
        self.geometry = geometry
        self.properties = dict(properties or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)

    def clone(self) -> "Feature":
        """Copy with the same geometry and a shallow copy of the properties.

        Shapely geometries are immutable, so the geometry object is shared.
        """
        return Feature(self.geometry, self.properties)

    @classmethod
    def from_geojson(cls, doc: dict[str, Any]) -> "Feature":
        return cls(shape(doc["geometry"]), doc.get("properties"))

    def to_geojson(self) -> dict[str, Any]:
        return {
            "type": "Feature",
            "geometry": mapping(self.geometry),
            "properties": dict(self.properties),
        }

    def __repr__(self) -> str:
        return f"Feature({self.geometry.geom_type}, {self.properties!r})"


def features_from_geojson(doc: dict[str, Any]) -> list[Feature]:
    """Read a GeoJSON ``FeatureCollection`` (or a single ``Feature``)."""
    if doc.get("type") == "Feature":
        return [Feature.from_geojson(doc)]
    items: Iterable[dict[str, Any]] = doc.get("features") or []
    return [Feature.from_geojson(item) for item in items]
