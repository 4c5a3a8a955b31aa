"""Source Factory: map descriptor → registered projection + tile source.

The factory decides the projection strategy of a descriptor, builds the
transform chain of custom projections, registers the projection with the
session's ``ProjectionRegistry`` and returns a ``MaplatSource``.

Registration is idempotent: a map whose projection code is already
registered reuses the existing entry without rebuilding its chain.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from maplat.errors import DescriptorError
from maplat.projection.chain import (
    TransformChain,
    affine_stage,
    operation_stage,
    shift_stage,
    tin_stage,
)
from maplat.projection.datum import DatumProvider
from maplat.projection.registry import MERCATOR_EXTENT, ProjectionEntry, ProjectionRegistry
from maplat.projection.tin import Tin
from maplat.schemas import InternalConfig
from maplat.schemas.descriptor import MapDescriptor, parse_descriptor, parse_sub_descriptor
from maplat.source.strategy import (
    CustomPixelProjection,
    PassThrough,
    ShiftedReference,
    Strategy,
    decide_strategy,
)
from maplat.source.tile import MaplatSource, TileGrid, pixel_extent, world_extent_size

__all__ = ['SourceFactory', 'load_descriptor', 'build_chain']

logger = logging.getLogger(__name__)

Size = tuple[int, int]


def load_descriptor(path: Union[str, Path], map_id: Optional[str] = None) -> MapDescriptor:
    """Read and parse a JSON descriptor file.

    The map ID is ``map_id`` when given, else the document's ``mapID``,
    else the file stem.
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        try:
            doc = json.load(f)
        except json.JSONDecodeError as exc:
            raise DescriptorError(f"{path} is not valid JSON: {exc}") from exc

    if map_id is None and isinstance(doc, dict) and not doc.get("mapID"):
        map_id = path.stem
    return parse_descriptor(doc, map_id=map_id)


def build_chain(strategy: Strategy, datum_provider: DatumProvider,
                reference_code: str) -> TransformChain:
    """Assemble the transform chain of a shifted or custom projection."""
    if isinstance(strategy, ShiftedReference):
        return TransformChain(warp=shift_stage(*strategy.shift))

    if not isinstance(strategy, CustomPixelProjection):
        raise TypeError(f"{type(strategy).__name__} has no transform chain")

    system = affine_stage(*strategy.world_params) if strategy.world_params else None

    warp = None
    if strategy.tin_compiled:
        tin = Tin()
        tin.set_compiled(strategy.tin_compiled)
        warp = tin_stage(tin)
    elif strategy.shift:
        warp = shift_stage(*strategy.shift)

    operation = None
    if strategy.map_coord:
        operation = operation_stage(*datum_provider.operation_transforms(
            strategy.map_coord, reference_code, strategy.inter_operation_code))

    return TransformChain(system=system, warp=warp, operation=operation)


class SourceFactory:
    """Builds ``MaplatSource`` objects against one projection registry.

    Parameters
    ----------
    registry : ProjectionRegistry
        Session registry new projections are registered with.
    config : InternalConfig
        Resolved configuration (tile size, tile pixel ratio).
    datum_provider : DatumProvider, optional
        Named datum transforms; defaults to the registry's provider.

    Examples
    --------
    >>> factory = SourceFactory(registry, config)
    >>> source = factory.build({"mapID": "demo", "width": 1000, "height": 600,
    ...                         "url": "https://example.com/{z}/{x}/{y}.jpg",
    ...                         "compiled": compiled})
    >>> source.code
    'Maplat:demo'
    """

    def __init__(self, registry: ProjectionRegistry, config: InternalConfig,
                 datum_provider: Optional[DatumProvider] = None):
        self.registry = registry
        self.reference_code = config.projection.reference_code
        self.tile_size = config.projection.tile_size
        self.tile_pixel_ratio = config.projection.tile_pixel_ratio
        self.datum_provider = datum_provider or registry.datum_provider

    def _descriptor(self, settings: Union[dict, MapDescriptor],
                    map_id: Optional[str]) -> MapDescriptor:
        if isinstance(settings, dict):
            return parse_descriptor(settings, map_id=map_id)
        if map_id is not None and map_id != settings.map_id:
            return parse_descriptor(settings.model_dump(by_alias=True, exclude_none=True),
                                    map_id=map_id)
        return settings

    def _register(self, strategy: Strategy) -> ProjectionEntry:
        if isinstance(strategy, PassThrough):
            return self.registry.reference

        existing = self.registry.get(strategy.code)
        if existing is not None:
            logger.debug("Projection %s already registered, skipping chain build", strategy.code)
            return existing

        chain = build_chain(strategy, self.datum_provider, self.reference_code)
        logger.debug("%s: %r", strategy.code, chain)

        if isinstance(strategy, ShiftedReference):
            return self.registry.register(
                strategy.code, MERCATOR_EXTENT, MERCATOR_EXTENT, "m",
                chain.forward, chain.inverse)

        world = world_extent_size(strategy.size, self.tile_size)
        return self.registry.register(
            strategy.code,
            pixel_extent(strategy.size),
            (0.0, -world, world, 0.0),
            "pixels",
            chain.forward,
            chain.inverse,
        )

    def build(self, settings: Union[dict, MapDescriptor], size: Optional[Size] = None,
              url: Optional[str] = None, map_id: Optional[str] = None) -> MaplatSource:
        """Build the source of one map.

        Parameters
        ----------
        settings : dict or MapDescriptor
            Raw or parsed descriptor.
        size : tuple of int, optional
            Explicit image size, overriding the descriptor.
        url : str, optional
            Explicit tile URL template, overriding the descriptor.
        map_id : str, optional
            Overrides the descriptor's ``mapID``.

        Raises
        ------
        DescriptorError
            If the descriptor is malformed or lacks a size or tile URL.
        UnsupportedProjectionError
            If the descriptor names an unknown datum.
        DegenerateTransformError
            If the world file parameters are not invertible.
        """
        descriptor = self._descriptor(settings, map_id)

        tile_url = url or descriptor.url
        if not tile_url:
            raise DescriptorError(f"Map {descriptor.map_id} has no tile URL")

        strategy = decide_strategy(descriptor, self.reference_code, size)
        projection = self._register(strategy)

        source_size = None
        tile_grid = None
        if isinstance(strategy, CustomPixelProjection):
            source_size = strategy.size
            tile_grid = TileGrid.zoomify(
                source_size, self.tile_size, self.tile_pixel_ratio, projection.extent)

        logger.info("Built source %s (%s, projection %s)",
                    descriptor.map_id, strategy.kind, projection.code)
        return MaplatSource(
            map_id=descriptor.map_id,
            url=tile_url,
            projection=projection,
            strategy=strategy,
            size=source_size,
            tile_grid=tile_grid,
            title=descriptor.title,
        )

    def build_all(self, settings: Union[dict, MapDescriptor],
                  map_id: Optional[str] = None) -> list[MaplatSource]:
        """Build the main map and every ``sub_maps`` entry (1-based ``#n`` IDs)."""
        descriptor = self._descriptor(settings, map_id)
        sources = [self.build(descriptor)]
        for index, sub_doc in enumerate(descriptor.sub_maps, start=1):
            sub = parse_sub_descriptor(descriptor, sub_doc, index)
            sources.append(self.build(sub))
        return sources

    def from_file(self, path: Union[str, Path], map_id: Optional[str] = None,
                  **options: Any) -> MaplatSource:
        """Load a descriptor file and build its source.

        ``options`` are passed to ``build()`` (``size``, ``url``).
        """
        return self.build(load_descriptor(path, map_id), **options)
