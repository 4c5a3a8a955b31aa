"""Source Factory: descriptor → projection strategy → tile source."""

from maplat.source.strategy import (
    CustomPixelProjection,
    PassThrough,
    ShiftedReference,
    Strategy,
    decide_strategy,
)
from maplat.source.tile import MaplatSource, TileGrid
from maplat.source.factory import SourceFactory, build_chain, load_descriptor

__all__ = [
    'CustomPixelProjection',
    'PassThrough',
    'ShiftedReference',
    'Strategy',
    'decide_strategy',
    'MaplatSource',
    'TileGrid',
    'SourceFactory',
    'build_chain',
    'load_descriptor',
]
