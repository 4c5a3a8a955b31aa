"""Named datum transforms (proj4-style definitions) backed by pyproj.

Historical Japanese maps were surveyed on grids that no longer exist in
EPSG: the US Army Map Service polyconic zones on the NAD27 (Clarke 1866)
ellipsoid, and the Tokyo datum (Bessel 1841). Those are defined here by
name; anything else must be a CRS pyproj already knows (e.g. ``EPSG:3857``).

Transforms are built once per (source, target) pair and cached.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from pyproj import CRS, Transformer
from pyproj.enums import TransformDirection
from pyproj.exceptions import CRSError

from maplat.errors import UnsupportedProjectionError

__all__ = ['NamedTransform', 'DatumProvider', 'BUILTIN_DEFINITIONS', 'OPERATION_ROUTES']

logger = logging.getLogger(__name__)

BUILTIN_DEFINITIONS: Dict[str, str] = {
    "TOKYO": "+proj=longlat +ellps=bessel +towgs84=-146.336,506.832,680.254",
    "JCP:NAD27": "+proj=longlat +ellps=clrk66 +datum=NAD27 +no_defs",
    "JCP:ZONEA:NAD27": (
        "+proj=poly +lat_0=40.5 +lon_0=143 +x_0=914398.5307444408 +y_0=1828797.0614888816 "
        "+ellps=clrk66 +to_meter=0.9143985307444408 +no_defs"
    ),
    "JCP:ZONEB:NAD27": (
        "+proj=poly +lat_0=40.5 +lon_0=135 +x_0=914398.5307444408 +y_0=1828797.0614888816 "
        "+ellps=clrk66 +to_meter=0.9143985307444408 +no_defs"
    ),
    "JCP:ZONEC:NAD27": (
        "+proj=poly +lat_0=40.5 +lon_0=127 +x_0=914398.5307444408 +y_0=1828797.0614888816 "
        "+ellps=clrk66 +to_meter=0.9143985307444408 +no_defs"
    ),
}

# Survey zone → (its geodetic datum, datum the survey was tied to).
# Zone grid coordinates are unprojected onto NAD27 lon/lat, which are then
# read as Tokyo datum lon/lat on the way to the reference projection.
OPERATION_ROUTES: Dict[str, Tuple[str, str]] = {
    "JCP:ZONEA:NAD27": ("JCP:NAD27", "TOKYO"),
    "JCP:ZONEB:NAD27": ("JCP:NAD27", "TOKYO"),
    "JCP:ZONEC:NAD27": ("JCP:NAD27", "TOKYO"),
}

Coordinate = Tuple[float, float]


@dataclass(frozen=True)
class NamedTransform:
    """Forward / inverse coordinate functions between two named projections."""
    source: str
    target: str
    forward: Callable[[Sequence[float]], Coordinate]
    inverse: Callable[[Sequence[float]], Coordinate]


class DatumProvider:
    """Registry of named projection definitions and their pyproj transforms.

    Parameters
    ----------
    definitions : dict, optional
        Extra ``name -> proj4 string`` definitions, added on top of
        ``BUILTIN_DEFINITIONS``.

    Examples
    --------
    >>> provider = DatumProvider()
    >>> t = provider.get_transform("EPSG:4326", "EPSG:3857")
    >>> t.forward((0.0, 0.0))
    (0.0, 0.0)
    """

    def __init__(self, definitions: Optional[Dict[str, str]] = None):
        self._definitions: Dict[str, str] = dict(BUILTIN_DEFINITIONS)
        if definitions:
            self._definitions.update(definitions)
        self._cache: Dict[Tuple[str, str], NamedTransform] = {}

    def define_projection(self, name: str, definition: str) -> None:
        """Add or replace a named definition."""
        self._definitions[name] = definition
        # Drop cached transforms built from the previous definition
        self._cache = {
            pair: t for pair, t in self._cache.items() if name not in pair
        }
        logger.debug("Defined projection %s", name)

    def is_defined(self, name: str) -> bool:
        return name in self._definitions or name.upper().startswith("EPSG:")

    def crs(self, name: str) -> CRS:
        """Resolve a name to a pyproj CRS.

        Raises
        ------
        UnsupportedProjectionError
            If the name has no definition and pyproj does not know it.
        """
        if not self.is_defined(name):
            raise UnsupportedProjectionError(name)
        try:
            return CRS.from_user_input(self._definitions.get(name, name))
        except CRSError as exc:
            raise UnsupportedProjectionError(name) from exc

    def get_transform(self, source: str, target: str) -> NamedTransform:
        """Return the (cached) transform pair ``source → target``."""
        key = (source, target)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        transformer = Transformer.from_crs(self.crs(source), self.crs(target), always_xy=True)

        def forward(xy: Sequence[float]) -> Coordinate:
            x, y = transformer.transform(xy[0], xy[1])
            return (float(x), float(y))

        def inverse(xy: Sequence[float]) -> Coordinate:
            x, y = transformer.transform(xy[0], xy[1], direction=TransformDirection.INVERSE)
            return (float(x), float(y))

        named = NamedTransform(source, target, forward, inverse)
        self._cache[key] = named
        logger.debug("Built datum transform %s -> %s", source, target)
        return named

    def operation_transforms(self, map_coord: str, reference: str,
                             inter_operation: Optional[str] = None) -> Tuple[NamedTransform, ...]:
        """Transforms carrying ``map_coord`` coordinates into ``reference``.

        Survey zones in ``OPERATION_ROUTES`` go zone → geodetic datum, then
        the tied datum (or ``inter_operation`` when given) → reference.
        Any other name is transformed directly.
        """
        route = OPERATION_ROUTES.get(map_coord)
        if route is None:
            return (self.get_transform(map_coord, reference),)
        geodetic, tied = route
        return (
            self.get_transform(map_coord, geodetic),
            self.get_transform(inter_operation or tied, reference),
        )
