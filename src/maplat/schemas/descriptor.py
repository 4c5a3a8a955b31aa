"""Map descriptor schemas: the settings document of one Maplat map image.

Two document schemes exist in the wild:

- **Legacy** (no ``version`` key): flat fields ``width``/``height`` (or
  ``compiled.wh``), ``url``, TIN ``compiled`` data, optional ``maptype``
  and ``mercatorXShift``/``mercatorYShift``.
- **Modern** (``version`` present): structured ``projectionSpec`` and
  ``sourceSpec`` with explicit world file parameters and warp mode.

``parse_descriptor()`` validates a raw JSON document into exactly one of
the two variants. Everything downstream works on the parsed model and never
probes raw dict keys.
"""

import logging
from typing import Any, Literal, Optional, Union

from pydantic import AliasChoices, Field, ValidationError, field_validator

from maplat.errors import DescriptorError
from maplat.schemas.base import DocumentModel

__all__ = [
    'WorldParams',
    'ProjectionSpec',
    'SourceSpec',
    'LegacyDescriptor',
    'ModernDescriptor',
    'MapDescriptor',
    'parse_descriptor',
    'parse_sub_descriptor',
]

logger = logging.getLogger(__name__)

Size = tuple[int, int]
Coordinate2D = tuple[float, float]

# Legacy map types whose tiles are already aligned to Web Mercator
MERCATOR_MAPTYPES = ("base", "overlay", "mapbox")


def _coerce_size(v):
    """Accept [w, h] with float values, as written by some editors."""
    if v is None:
        return v
    if isinstance(v, (str, bytes)) or not hasattr(v, "__len__") or len(v) != 2:
        raise ValueError(f"size must be a [width, height] pair, got {v!r}")
    try:
        return tuple(int(round(float(n))) for n in v)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"size must be a [width, height] pair, got {v!r}") from exc


def _compiled_size(compiled: dict[str, Any]) -> Size:
    try:
        return _coerce_size(compiled["wh"])
    except ValueError as exc:
        raise DescriptorError(f"Malformed compiled.wh: {exc}") from exc


# =============================================================================
# Modern scheme
# =============================================================================

class WorldParams(DocumentModel):
    """Six world file parameters: pixel → map coordinate affine transform.

    forward (x, y) -> (a·x − b·y + c, d·x − e·y + f)
    """
    x_scale: float = Field(alias="xScale")        # a
    x_rotation: float = Field(alias="xRotation")  # b
    x_origin: float = Field(alias="xOrigin")      # c
    y_rotation: float = Field(alias="yRotation")  # d
    y_scale: float = Field(alias="yScale")        # e
    y_origin: float = Field(alias="yOrigin")      # f

    def as_tuple(self) -> tuple[float, float, float, float, float, float]:
        """Return (a, b, c, d, e, f)."""
        return (self.x_scale, self.x_rotation, self.x_origin,
                self.y_rotation, self.y_scale, self.y_origin)


class ProjectionSpec(DocumentModel):
    """How map image pixels relate to real-world coordinates."""
    map_coord: str = Field(alias="mapCoord")
    warp: Optional[Literal["WARP", "NONE"]] = None
    world_params: Optional[WorldParams] = Field(None, alias="worldParams")
    coord_shift: Optional[Coordinate2D] = Field(None, alias="coordShift")
    size: Optional[Size] = None
    inter_operation_code: Optional[str] = Field(None, alias="interOperationCode")
    compiled: Optional[dict[str, Any]] = None

    @field_validator("size", mode="before")
    @classmethod
    def coerce_size(cls, v):
        return _coerce_size(v)

    @field_validator("warp", mode="before")
    @classmethod
    def normalize_warp(cls, v):
        """Normalize warp mode to uppercase."""
        if isinstance(v, str):
            return v.upper().strip()
        return v


class SourceSpec(DocumentModel):
    """Where and how the map tiles are served."""
    tile_source_type: Literal["PIXEL", "WMTS", "TMS", "IIIF"] = Field(alias="tileSourceType")
    url: Optional[str] = None
    warp: Optional[Literal["WARP", "NONE"]] = None
    extension: Optional[str] = None

    @field_validator("tile_source_type", "warp", mode="before")
    @classmethod
    def normalize_upper(cls, v):
        if isinstance(v, str):
            return v.upper().strip()
        return v


class ModernDescriptor(DocumentModel):
    """Versioned map descriptor with explicit projection and source specs."""
    version: str
    map_id: Optional[str] = Field(None, alias="mapID")
    meta_data: Optional[dict[str, Any]] = Field(None, alias="metaData")
    projection_spec: ProjectionSpec = Field(alias="projectionSpec")
    source_spec: SourceSpec = Field(alias="sourceSpec")
    sub_maps: list[dict[str, Any]] = Field(default_factory=list)
    envelope_lnglats: Optional[list[Coordinate2D]] = Field(
        None, validation_alias=AliasChoices("envelopeLngLats", "envelopLngLats"))
    compiled: Optional[dict[str, Any]] = None
    # Older modern documents carry these at the top level
    settings_url: Optional[str] = Field(None, alias="url")
    map_coord_params: Optional[WorldParams] = Field(None, alias="mapCoordParams")

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, v):
        """Versions are sometimes written as numbers."""
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @property
    def is_legacy(self) -> bool:
        return False

    @property
    def title(self):
        if self.meta_data:
            return self.meta_data.get("title")
        return None

    @property
    def url(self) -> Optional[str]:
        return self.source_spec.url or self.settings_url

    @property
    def world_params(self) -> Optional[WorldParams]:
        return self.projection_spec.world_params or self.map_coord_params

    @property
    def warp(self) -> str:
        """Effective warp mode; projectionSpec or sourceSpec may carry it, default is NONE."""
        return self.projection_spec.warp or self.source_spec.warp or "NONE"

    @property
    def tin_compiled(self) -> Optional[dict[str, Any]]:
        return self.projection_spec.compiled or self.compiled

    def declared_size(self) -> Optional[Size]:
        if self.projection_spec.size is not None:
            return self.projection_spec.size
        compiled = self.tin_compiled
        if compiled and compiled.get("wh"):
            return _compiled_size(compiled)
        return None


# =============================================================================
# Legacy scheme
# =============================================================================

class LegacyDescriptor(DocumentModel):
    """Unversioned (legacy) map descriptor carrying TIN compiled data."""
    map_id: Optional[str] = Field(None, alias="mapID")
    title: Optional[Any] = None
    width: Optional[int] = None
    height: Optional[int] = None
    url: Optional[str] = None
    compiled: Optional[dict[str, Any]] = None
    maptype: Optional[str] = None
    mercator_x_shift: Optional[float] = Field(None, alias="mercatorXShift")
    mercator_y_shift: Optional[float] = Field(None, alias="mercatorYShift")
    sub_maps: list[dict[str, Any]] = Field(default_factory=list)
    envelope_lnglats: Optional[list[Coordinate2D]] = Field(
        None, validation_alias=AliasChoices("envelopLngLats", "envelopeLngLats"))

    @field_validator("width", "height", mode="before")
    @classmethod
    def coerce_dimension(cls, v):
        if v is None:
            return v
        return int(round(float(v)))

    @field_validator("maptype", mode="before")
    @classmethod
    def normalize_maptype(cls, v):
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @property
    def is_legacy(self) -> bool:
        return True

    @property
    def warp(self) -> str:
        return "WARP" if self.compiled else "NONE"

    @property
    def tin_compiled(self) -> Optional[dict[str, Any]]:
        return self.compiled

    @property
    def mercator_shift(self) -> Optional[Coordinate2D]:
        """Declared shift in Web Mercator meters, or None when absent."""
        if self.mercator_x_shift is None and self.mercator_y_shift is None:
            return None
        return (self.mercator_x_shift or 0.0, self.mercator_y_shift or 0.0)

    def declared_size(self) -> Optional[Size]:
        if self.width is not None and self.height is not None:
            return (self.width, self.height)
        if self.compiled and self.compiled.get("wh"):
            return _compiled_size(self.compiled)
        return None


MapDescriptor = Union[LegacyDescriptor, ModernDescriptor]


# =============================================================================
# Parsing
# =============================================================================

def _validate(doc: dict) -> MapDescriptor:
    model_cls = ModernDescriptor if doc.get("version") else LegacyDescriptor
    try:
        return model_cls.model_validate(doc)
    except ValidationError as exc:
        scheme = "legacy" if model_cls is LegacyDescriptor else "modern"
        raise DescriptorError(f"Malformed {scheme} map descriptor: {exc}") from exc


def parse_descriptor(doc: Any, map_id: Optional[str] = None) -> MapDescriptor:
    """Validate a raw descriptor document into its explicit variant.

    Parameters
    ----------
    doc : dict
        Decoded JSON settings document.
    map_id : str, optional
        Overrides the document's ``mapID``.

    Returns
    -------
    LegacyDescriptor or ModernDescriptor
        ``ModernDescriptor`` when the document carries a ``version``.

    Raises
    ------
    DescriptorError
        If the document is not a mapping, fails validation, or has no map ID.
    """
    if not isinstance(doc, dict):
        raise DescriptorError(f"Map descriptor must be a JSON object, got {type(doc).__name__}")

    if map_id is not None:
        doc = {**doc, "mapID": map_id}

    descriptor = _validate(doc)
    if not descriptor.map_id:
        raise DescriptorError("Map descriptor has no mapID")

    logger.debug("Parsed %s descriptor: %s",
                 "legacy" if descriptor.is_legacy else "modern", descriptor.map_id)
    return descriptor


def parse_sub_descriptor(parent: MapDescriptor, doc: Any, index: int) -> MapDescriptor:
    """Parse one ``sub_maps`` entry, inheriting what it does not override.

    Sub maps share the parent's image, so tile URL, size and (for the
    modern scheme) projection and source specs are inherited. The map ID
    becomes ``<parentID>#<index>``.
    """
    if not isinstance(doc, dict):
        raise DescriptorError(f"sub_maps[{index - 1}] of {parent.map_id} must be a JSON object")

    inherited = parent.model_dump(by_alias=True, exclude={"sub_maps"}, exclude_none=True)
    if parent.is_legacy:
        # TIN data is per sub map; never inherit the parent's mesh
        inherited.pop("compiled", None)
        size = parent.declared_size()
        if size is not None:
            inherited["width"], inherited["height"] = size
    merged = {**inherited, **doc, "mapID": f"{parent.map_id}#{index}"}
    merged.pop("sub_maps", None)
    return _validate(merged)
