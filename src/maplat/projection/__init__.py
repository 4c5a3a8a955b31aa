"""Projection core: transform chains, TIN warp, named datums and the registry."""

from maplat.projection.chain import (
    TransformChain,
    TransformStage,
    affine_stage,
    identity_stage,
    operation_stage,
    shift_stage,
    tin_stage,
)
from maplat.projection.datum import DatumProvider, NamedTransform
from maplat.projection.registry import ProjectionEntry, ProjectionRegistry
from maplat.projection.tin import Tin

__all__ = [
    'TransformChain',
    'TransformStage',
    'affine_stage',
    'identity_stage',
    'operation_stage',
    'shift_stage',
    'tin_stage',
    'DatumProvider',
    'NamedTransform',
    'ProjectionEntry',
    'ProjectionRegistry',
    'Tin',
]
