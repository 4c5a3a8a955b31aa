"""Session-wide registry of named projections and transforms between them.

Every map image gets its own projection (``Maplat:<mapID>``). The registry
relates each of them to the reference projection (Web Mercator) and,
transitively, to every other registered projection, so any two codes are
directly convertible with ``transform(coord, from_code, to_code)``.

One registry is constructed per application session and passed by
reference to the Source Factory and the viewport continuity transform.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING

from maplat.errors import UnknownProjectionError
from maplat.projection.datum import DatumProvider

if TYPE_CHECKING:
    from maplat.schemas import InternalConfig

__all__ = ['ProjectionEntry', 'ProjectionRegistry', 'MERCATOR_EXTENT', 'GEOGRAPHIC_EXTENT']

logger = logging.getLogger(__name__)

Coordinate = Tuple[float, float]
Extent = Tuple[float, float, float, float]
TransformFn = Callable[[Sequence[float]], Coordinate]

MERCATOR_HALF_WORLD = 20037508.342789244
MERCATOR_EXTENT: Extent = (-MERCATOR_HALF_WORLD, -MERCATOR_HALF_WORLD,
                           MERCATOR_HALF_WORLD, MERCATOR_HALF_WORLD)
GEOGRAPHIC_EXTENT: Extent = (-180.0, -90.0, 180.0, 90.0)


@dataclass(frozen=True)
class ProjectionEntry:
    """A registered projection.

    Attributes
    ----------
    code : str
        Unique key, e.g. ``"Maplat:tatebayashi_ojozu"``.
    units : str
        ``"pixels"``, ``"m"`` or ``"degrees"``.
    extent : tuple
        Valid coordinate extent ``(minx, miny, maxx, maxy)``.
    world_extent : tuple
        Extent of the whole tile pyramid (pixel projections) or of the world.
    """
    code: str
    units: str
    extent: Extent
    world_extent: Extent


class ProjectionRegistry:
    """Idempotent projection registry.

    Parameters
    ----------
    reference_code : str
        Projection every custom projection is related through.
    geographic_code : str
        Lon/lat projection, related to the reference through pyproj.
    datum_provider : DatumProvider, optional
        Named datum transforms. A fresh provider is created when omitted.

    Examples
    --------
    >>> registry = ProjectionRegistry()
    >>> entry = registry.register("Maplat:demo", (0, -100, 100, 0), (0, -256, 256, 0),
    ...                           "pixels", lambda xy: (xy[0] * 2, xy[1] * 2),
    ...                           lambda xy: (xy[0] / 2, xy[1] / 2))
    >>> registry.transform((10, -10), "Maplat:demo", "EPSG:3857")
    (20.0, -20.0)
    """

    def __init__(
        self,
        reference_code: str = "EPSG:3857",
        geographic_code: str = "EPSG:4326",
        datum_provider: Optional[DatumProvider] = None,
    ):
        self.reference_code = reference_code
        self.geographic_code = geographic_code
        self.datum_provider = datum_provider or DatumProvider()

        self._entries: Dict[str, ProjectionEntry] = {}
        self._transforms: Dict[Tuple[str, str], TransformFn] = {}
        # Custom codes in registration order (reference/geographic excluded)
        self._custom_codes: List[str] = []

        self._entries[reference_code] = ProjectionEntry(
            reference_code, "m", MERCATOR_EXTENT, MERCATOR_EXTENT)
        self._entries[geographic_code] = ProjectionEntry(
            geographic_code, "degrees", GEOGRAPHIC_EXTENT, GEOGRAPHIC_EXTENT)

        to_geographic = self.datum_provider.get_transform(reference_code, geographic_code)
        self.add_coordinate_transforms(
            reference_code, geographic_code, to_geographic.forward, to_geographic.inverse)

    @classmethod
    def from_config(cls, config: "InternalConfig",
                    datum_provider: Optional[DatumProvider] = None) -> "ProjectionRegistry":
        return cls(
            reference_code=config.projection.reference_code,
            geographic_code=config.projection.geographic_code,
            datum_provider=datum_provider,
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, code: str) -> Optional[ProjectionEntry]:
        """Return the entry for ``code`` or None."""
        return self._entries.get(code)

    def __contains__(self, code: str) -> bool:
        return code in self._entries

    @property
    def codes(self) -> Tuple[str, ...]:
        return tuple(self._entries)

    @property
    def reference(self) -> ProjectionEntry:
        return self._entries[self.reference_code]

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_coordinate_transforms(self, source: str, destination: str,
                                  forward: TransformFn, inverse: TransformFn) -> None:
        """Install ``source → destination`` (forward) and the reverse (inverse)."""
        self._transforms[(source, destination)] = forward
        self._transforms[(destination, source)] = inverse

    def _via_reference(self, source: str, destination: str) -> TransformFn:
        reference = self.reference_code

        def composed(xy: Sequence[float]) -> Coordinate:
            return self.transform(self.transform(xy, source, reference), reference, destination)

        return composed

    def register(
        self,
        code: str,
        extent: Extent,
        world_extent: Extent,
        units: str,
        forward: TransformFn,
        inverse: TransformFn,
    ) -> ProjectionEntry:
        """Register a projection and its transform pair to the reference.

        Registering an existing code is a no-op returning the existing entry;
        ``forward`` / ``inverse`` are then ignored.

        Parameters
        ----------
        code : str
            Projection code.
        extent, world_extent : tuple
            ``(minx, miny, maxx, maxy)``.
        units : str
            ``"pixels"`` or ``"m"``.
        forward : callable
            ``code`` → reference projection.
        inverse : callable
            Reference projection → ``code``.

        Returns
        -------
        ProjectionEntry
        """
        existing = self._entries.get(code)
        if existing is not None:
            logger.debug("Projection %s already registered, reusing", code)
            return existing

        entry = ProjectionEntry(code, units, tuple(extent), tuple(world_extent))
        self._entries[code] = entry

        self.add_coordinate_transforms(code, self.reference_code, forward, inverse)
        self.add_coordinate_transforms(
            code, self.geographic_code,
            self._via_reference(code, self.geographic_code),
            self._via_reference(self.geographic_code, code),
        )
        for other in self._custom_codes:
            self.add_coordinate_transforms(
                code, other,
                self._via_reference(code, other),
                self._via_reference(other, code),
            )
        self._custom_codes.append(code)

        logger.info("Registered projection %s (%s), %d custom projection(s) linked",
                    code, units, len(self._custom_codes) - 1)
        return entry

    # ------------------------------------------------------------------
    # Transform
    # ------------------------------------------------------------------

    def get_transform(self, source: str, destination: str) -> TransformFn:
        """Return the function converting ``source`` coordinates to ``destination``.

        Raises
        ------
        UnknownProjectionError
            If either code is not registered.
        """
        for code in (source, destination):
            if code not in self._entries:
                raise UnknownProjectionError(code)
        if source == destination:
            return lambda xy: (float(xy[0]), float(xy[1]))
        return self._transforms[(source, destination)]

    def transform(self, coord: Sequence[float], source: str, destination: str) -> Coordinate:
        """Convert one coordinate between two registered projections."""
        x, y = self.get_transform(source, destination)(coord)
        return (float(x), float(y))
