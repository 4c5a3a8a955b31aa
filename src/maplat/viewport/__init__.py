"""Viewport continuity transform between projections."""

from maplat.viewport.continuity import (
    THETAS,
    ViewState,
    ViewportContinuity,
    base_to_map,
    continuity,
    map_to_base,
    normalize_angle,
    sample_params,
    vicinities,
)

__all__ = [
    'THETAS',
    'ViewState',
    'ViewportContinuity',
    'base_to_map',
    'continuity',
    'map_to_base',
    'normalize_angle',
    'sample_params',
    'vicinities',
]
