"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., CLUSTER_DISTANCE → cluster_distance).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Validation is lenient to accept
both uppercase and lowercase keys, integers where floats are expected, etc.
"""

from typing import Any, Optional
from pydantic import Field, field_validator
from maplat.schemas.base import MaplatBaseModel


class UserProjectionConfig(MaplatBaseModel):
    """User-facing projection config."""
    reference_code: Optional[str] = None
    geographic_code: Optional[str] = None
    tile_size: Optional[int] = None
    tile_pixel_ratio: Optional[int] = None


class UserClusterConfig(MaplatBaseModel):
    """User-facing cluster config."""
    distance: Optional[float] = None
    circle_distance_multiplier: Optional[float] = None
    circle_foot_separation: Optional[float] = None
    circle_start_angle: Optional[float] = None
    min_leg_length: Optional[float] = None
    fit_padding: Optional[tuple[float, float, float, float]] = None
    fit_duration_ms: Optional[int] = None
    hull: Optional[dict[str, Any]] = None
    badge: Optional[dict[str, Any]] = None

    @field_validator("distance", "circle_foot_separation", mode="before")
    @classmethod
    def coerce_distance(cls, v):
        """Accept int or float for pixel distances."""
        if v is not None:
            return float(v)
        return v


class UserViewportConfig(MaplatBaseModel):
    """User-facing viewport config."""
    base_radius: Optional[float] = None


class UserConfig(MaplatBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    Usage
    -----
        user_cfg = UserConfig(
            CLUSTER_DISTANCE=40,
            BASE_RADIUS=300,
        )

        internal = resolve_config(param_cfg, user_cfg)
    """

    # Flat aliases
    cluster_distance: Optional[float] = Field(None, alias="CLUSTER_DISTANCE")
    circle_foot_separation: Optional[float] = Field(None, alias="CIRCLE_FOOT_SEPARATION")
    circle_distance_multiplier: Optional[float] = Field(None, alias="CIRCLE_DISTANCE_MULTIPLIER")
    circle_start_angle: Optional[float] = Field(None, alias="CIRCLE_START_ANGLE")
    base_radius: Optional[float] = Field(None, alias="BASE_RADIUS")
    tile_size: Optional[int] = Field(None, alias="TILE_SIZE")
    log_level: Optional[str] = Field(None, alias="LOG_LEVEL")

    # Nested overrides (advanced users)
    projection: Optional[UserProjectionConfig] = None
    cluster: Optional[UserClusterConfig] = None
    viewport: Optional[UserViewportConfig] = None

    model_config = MaplatBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("cluster_distance", "circle_foot_separation", "base_radius", mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Normalize log level names to uppercase."""
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        projection = {}
        if self.tile_size is not None:
            projection["tile_size"] = self.tile_size
        if self.projection is not None:
            projection.update(self.projection.model_dump(exclude_none=True))
        if projection:
            overrides["projection"] = projection

        cluster = {}
        if self.cluster_distance is not None:
            cluster["distance"] = self.cluster_distance
        if self.circle_foot_separation is not None:
            cluster["circle_foot_separation"] = self.circle_foot_separation
        if self.circle_distance_multiplier is not None:
            cluster["circle_distance_multiplier"] = self.circle_distance_multiplier
        if self.circle_start_angle is not None:
            cluster["circle_start_angle"] = self.circle_start_angle
        if self.cluster is not None:
            cluster.update(self.cluster.model_dump(exclude_none=True))
        if cluster:
            overrides["cluster"] = cluster

        viewport = {}
        if self.base_radius is not None:
            viewport["base_radius"] = self.base_radius
        if self.viewport is not None:
            viewport.update(self.viewport.model_dump(exclude_none=True))
        if viewport:
            overrides["viewport"] = viewport

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
