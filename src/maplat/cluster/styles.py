"""Plain style records handed to the rendering collaborator."""

from dataclasses import dataclass
from typing import Any, Optional

from shapely.geometry.base import BaseGeometry

__all__ = ['Fill', 'Stroke', 'CircleStyle', 'TextStyle', 'Style']


@dataclass(frozen=True)
class Fill:
    color: str


@dataclass(frozen=True)
class Stroke:
    color: str
    width: float = 1.0


@dataclass(frozen=True)
class CircleStyle:
    radius: float
    fill: Optional[Fill] = None
    stroke: Optional[Stroke] = None


@dataclass(frozen=True)
class TextStyle:
    text: str
    fill: Optional[Fill] = None
    stroke: Optional[Stroke] = None


@dataclass(frozen=True)
class Style:
    """One drawing instruction.

    ``geometry`` overrides the feature's own geometry when set; ``image``
    is a ``CircleStyle`` or whatever the icon generator returns.
    """
    geometry: Optional[BaseGeometry] = None
    fill: Optional[Fill] = None
    stroke: Optional[Stroke] = None
    image: Optional[Any] = None
    text: Optional[TextStyle] = None
