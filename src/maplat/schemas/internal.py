"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that runtime code depends on.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal, Optional
from pydantic import ConfigDict, Field
from maplat.schemas.base import MaplatBaseModel


class InternalProjectionConfig(MaplatBaseModel):
    """Runtime projection configuration."""
    reference_code: str
    geographic_code: str
    tile_size: int = Field(ge=1)
    tile_pixel_ratio: int = Field(ge=1)


class InternalHullStyleConfig(MaplatBaseModel):
    """Runtime hull styling."""
    fill_color: str
    stroke_color: str
    stroke_width: float


class InternalBadgeStyleConfig(MaplatBaseModel):
    """Runtime badge styling."""
    outer_radius: float
    outer_fill: str
    inner_radius: float
    inner_fill: str
    text_fill: str
    text_stroke_color: str
    text_stroke_width: float


class InternalClusterConfig(MaplatBaseModel):
    """Runtime cluster engine configuration."""
    distance: float = Field(gt=0)
    circle_distance_multiplier: float
    circle_foot_separation: float
    circle_start_angle: float
    min_leg_length: float
    fit_padding: tuple[float, float, float, float]
    fit_duration_ms: int
    hull: InternalHullStyleConfig
    badge: InternalBadgeStyleConfig


class InternalViewportConfig(MaplatBaseModel):
    """Runtime viewport configuration."""
    base_radius: float = Field(gt=0)


class InternalLoggingConfig(MaplatBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    log_file: Optional[str]


class InternalConfig(MaplatBaseModel):
    """Authoritative runtime configuration.

    This is the ONLY configuration schema that runtime code sees. Produced
    only by ``resolve_config()``.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.distance = config.cluster.distance  # NOT .get()
    """

    projection: InternalProjectionConfig
    cluster: InternalClusterConfig
    viewport: InternalViewportConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )
