"""Projection strategy decision for a map descriptor.

A descriptor is classified exactly once into one of three strategies, each
carrying only the fields it needs:

- ``PassThrough``: tiles are already aligned to the reference projection;
  no custom projection is registered.
- ``ShiftedReference``: reference-aligned tiles offset by a constant shift;
  registered in meters over the reference projection's world bounds.
- ``CustomPixelProjection``: the general case; registered in pixels, with a
  world file / warp / datum transform chain.

The legacy ``mercatorXShift``/``mercatorYShift`` fields and the modern
``coordShift`` both become a ``ShiftedReference`` whose shift is applied as
a warp stage: ``forward(nominal) = nominal + shift``.
"""

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Union

from maplat.errors import DescriptorError
from maplat.schemas.descriptor import (
    LegacyDescriptor,
    MapDescriptor,
    MERCATOR_MAPTYPES,
)

__all__ = [
    'PassThrough',
    'ShiftedReference',
    'CustomPixelProjection',
    'Strategy',
    'decide_strategy',
    'projection_code',
]

logger = logging.getLogger(__name__)

Size = tuple[int, int]
Coordinate = tuple[float, float]

# Tile services whose grid is the reference projection's XYZ pyramid
REFERENCE_TILE_TYPES = ("WMTS", "TMS")


def projection_code(map_id: str) -> str:
    return f"Maplat:{map_id}"


@dataclass(frozen=True)
class PassThrough:
    """Use the reference projection directly."""
    kind: ClassVar[str] = "pass_through"
    code: str


@dataclass(frozen=True)
class ShiftedReference:
    """Reference projection offset by a constant ``shift`` (meters)."""
    kind: ClassVar[str] = "shifted_reference"
    code: str
    shift: Coordinate


@dataclass(frozen=True)
class CustomPixelProjection:
    """Pixel projection with its own transform chain.

    Attributes
    ----------
    code : str
        ``Maplat:<mapID>``.
    size : tuple of int
        Image ``(width, height)`` in pixels.
    world_params : tuple of float, optional
        World file ``(a, b, c, d, e, f)``; None for an identity system stage.
    tin_compiled : dict, optional
        Compiled TIN data for the warp stage.
    shift : tuple of float, optional
        Constant warp shift, used when there is no TIN.
    map_coord : str, optional
        Named datum of the warped coordinates; None when they already are
        reference projection coordinates.
    inter_operation_code : str, optional
        Datum the survey zone was tied to, overriding the built-in route.
    """
    kind: ClassVar[str] = "custom_pixel"
    code: str
    size: Size
    world_params: Optional[tuple[float, float, float, float, float, float]] = None
    tin_compiled: Optional[dict[str, Any]] = None
    shift: Optional[Coordinate] = None
    map_coord: Optional[str] = None
    inter_operation_code: Optional[str] = None


Strategy = Union[PassThrough, ShiftedReference, CustomPixelProjection]


def _nonzero(shift: Optional[Coordinate]) -> bool:
    return shift is not None and (shift[0] != 0 or shift[1] != 0)


def _require_size(descriptor: MapDescriptor, size: Optional[Size]) -> Size:
    resolved = size or descriptor.declared_size()
    if resolved is None:
        raise DescriptorError(
            f"Map {descriptor.map_id} declares no size: expected width/height, "
            f"compiled.wh or projectionSpec.size"
        )
    width, height = int(resolved[0]), int(resolved[1])
    if width <= 0 or height <= 0:
        raise DescriptorError(f"Map {descriptor.map_id} has invalid size {width}x{height}")
    return (width, height)


def _decide_legacy(descriptor: LegacyDescriptor, reference_code: str,
                   size: Optional[Size]) -> Strategy:
    code = projection_code(descriptor.map_id)

    if descriptor.maptype in MERCATOR_MAPTYPES:
        shift = descriptor.mercator_shift
        if _nonzero(shift):
            return ShiftedReference(code=code, shift=shift)
        return PassThrough(code=reference_code)

    if not descriptor.compiled:
        raise DescriptorError(f"Legacy map {descriptor.map_id} has no compiled TIN data")
    return CustomPixelProjection(
        code=code,
        size=_require_size(descriptor, size),
        tin_compiled=descriptor.compiled,
    )


def _decide_modern(descriptor, reference_code: str, size: Optional[Size]) -> Strategy:
    code = projection_code(descriptor.map_id)
    spec = descriptor.projection_spec
    warp = descriptor.warp
    shift = spec.coord_shift

    if (spec.map_coord == reference_code
            and descriptor.source_spec.tile_source_type in REFERENCE_TILE_TYPES
            and warp == "NONE"):
        if _nonzero(shift):
            return ShiftedReference(code=code, shift=tuple(shift))
        return PassThrough(code=reference_code)

    tin_compiled = None
    if warp == "WARP":
        tin_compiled = descriptor.tin_compiled
        if not tin_compiled:
            raise DescriptorError(
                f"Map {descriptor.map_id} requests warp WARP but carries no compiled TIN data"
            )

    world_params = descriptor.world_params
    return CustomPixelProjection(
        code=code,
        size=_require_size(descriptor, size),
        world_params=world_params.as_tuple() if world_params is not None else None,
        tin_compiled=tin_compiled,
        shift=tuple(shift) if _nonzero(shift) and tin_compiled is None else None,
        map_coord=None if spec.map_coord == reference_code else spec.map_coord,
        inter_operation_code=spec.inter_operation_code,
    )


def decide_strategy(descriptor: MapDescriptor, reference_code: str = "EPSG:3857",
                    size: Optional[Size] = None) -> Strategy:
    """Classify a parsed descriptor into its projection strategy.

    Parameters
    ----------
    descriptor : LegacyDescriptor or ModernDescriptor
        Parsed map descriptor.
    reference_code : str
        Code of the reference projection.
    size : tuple of int, optional
        Explicit image size, overriding what the descriptor declares.

    Returns
    -------
    PassThrough, ShiftedReference or CustomPixelProjection

    Raises
    ------
    DescriptorError
        If a custom pixel projection has no size, or warp data is missing.
    """
    if descriptor.is_legacy:
        strategy = _decide_legacy(descriptor, reference_code, size)
    else:
        strategy = _decide_modern(descriptor, reference_code, size)

    logger.debug("Map %s: %s strategy", descriptor.map_id, strategy.kind)
    return strategy
