"""ParamConfig: Expert defaults for maplat.

This module defines the complete default configuration. ALL tunable
parameters must have defaults here. No runtime code should define fallback
values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

import math
from typing import Literal
from pydantic import Field, field_validator
from maplat.schemas.base import MaplatBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class ProjectionConfig(MaplatBaseModel):
    """Projection and tile grid configuration."""
    reference_code: str = "EPSG:3857"
    geographic_code: str = "EPSG:4326"
    tile_size: int = Field(256, ge=1, description="Tile edge length in pixels")
    tile_pixel_ratio: int = Field(1, ge=1)


class HullStyleConfig(MaplatBaseModel):
    """Convex hull (hover) and spider leg stroke styling."""
    fill_color: str = "rgba(255, 153, 0, 0.4)"
    stroke_color: str = "rgba(204, 85, 0, 1)"
    stroke_width: float = Field(1.5, gt=0)


class BadgeStyleConfig(MaplatBaseModel):
    """Aggregate cluster badge styling (two circles and a count label)."""
    outer_radius: float = Field(20.0, gt=0)
    outer_fill: str = "rgba(255, 153, 102, 0.3)"
    inner_radius: float = Field(14.0, gt=0)
    inner_fill: str = "rgba(255, 165, 0, 0.7)"
    text_fill: str = "#fff"
    text_stroke_color: str = "rgba(0, 0, 0, 0.6)"
    text_stroke_width: float = Field(3.0, gt=0)


class ClusterConfig(MaplatBaseModel):
    """Cluster engine configuration."""
    distance: float = Field(35.0, gt=0, description="Cluster distance in screen pixels")
    circle_distance_multiplier: float = Field(1.0, gt=0)
    circle_foot_separation: float = Field(28.0, gt=0, description="Screen pixels between spider feet")
    circle_start_angle: float = math.pi / 2
    min_leg_length: float = Field(35.0, ge=0, description="Screen pixels, clears the badge icon")
    fit_padding: tuple[float, float, float, float] = (50.0, 50.0, 50.0, 50.0)
    fit_duration_ms: int = Field(500, ge=0)
    hull: HullStyleConfig = Field(default_factory=HullStyleConfig)
    badge: BadgeStyleConfig = Field(default_factory=BadgeStyleConfig)

    @field_validator("distance", "circle_foot_separation", mode="before")
    @classmethod
    def coerce_to_float(cls, v):
        """Allow int or float for pixel distances."""
        return float(v)


class ViewportConfig(MaplatBaseModel):
    """Viewport continuity configuration."""
    base_radius: float = Field(500.0, gt=0, description="Sampling radius around the view center")


class LoggingConfig(MaplatBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_file: str | None = None


# =============================================================================
# Root Configuration
# =============================================================================

class ParamConfig(MaplatBaseModel):
    """Expert configuration with complete defaults.

    Usage
    -----
        param = ParamConfig()
        param.cluster.distance  # 35.0
    """
    projection: ProjectionConfig = Field(default_factory=ProjectionConfig)
    cluster: ClusterConfig = Field(default_factory=ClusterConfig)
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
