"""Coordinate transform chain between map image pixels and a global projection.

A chain is an ordered composition of up to three stages, each a pair of
forward / inverse functions on 2D coordinates:

1. **System ↔ Map**: world file affine transform (or identity)
2. **Map ↔ Warp**: TIN nonlinear warp, constant shift (or identity)
3. **Warp ↔ Operation**: named datum transform into the reference
   projection (or identity)

``forward`` applies stage 1, 2, 3 in order; ``inverse`` applies the stage
inverses in the exact reverse order (3⁻¹, 2⁻¹, 1⁻¹).
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, TYPE_CHECKING

from maplat.contracts import assert_finite_coordinate
from maplat.errors import DegenerateTransformError

if TYPE_CHECKING:
    from maplat.projection.datum import NamedTransform
    from maplat.projection.tin import Tin

__all__ = [
    'TransformStage',
    'TransformChain',
    'identity_stage',
    'affine_stage',
    'shift_stage',
    'tin_stage',
    'operation_stage',
]

logger = logging.getLogger(__name__)

Coordinate = tuple[float, float]
TransformFn = Callable[[Sequence[float]], Coordinate]


@dataclass(frozen=True)
class TransformStage:
    """One invertible step of a transform chain."""
    name: str
    forward: TransformFn
    inverse: TransformFn


def _identity(xy: Sequence[float]) -> Coordinate:
    return (float(xy[0]), float(xy[1]))


def identity_stage(name: str = "identity") -> TransformStage:
    return TransformStage(name, _identity, _identity)


def affine_stage(a: float, b: float, c: float, d: float, e: float, f: float) -> TransformStage:
    """World file stage: image pixel → map coordinate.

    Forward ``(x, y) -> (a·x − b·y + c, d·x − e·y + f)``; the inverse is the
    matrix inverse of that map.

    Raises
    ------
    DegenerateTransformError
        If the determinant ``a·e − b·d`` is zero or not finite.

    Examples
    --------
    >>> stage = affine_stage(2, 0, 10, 0, 2, 20)
    >>> stage.forward((1, 1))
    (12.0, 18.0)
    >>> stage.inverse((12, 18))
    (1.0, 1.0)
    """
    det = a * e - b * d
    if det == 0 or not math.isfinite(det):
        raise DegenerateTransformError(
            f"World file parameters are not invertible (a·e − b·d = {det}): "
            f"a={a}, b={b}, c={c}, d={d}, e={e}, f={f}"
        )

    def forward(xy: Sequence[float]) -> Coordinate:
        x, y = float(xy[0]), float(xy[1])
        return (a * x - b * y + c, d * x - e * y + f)

    def inverse(xy: Sequence[float]) -> Coordinate:
        X, Y = float(xy[0]), float(xy[1])
        return (
            (X * e - Y * b - c * e + f * b) / det,
            -(Y * a - X * d - f * a + c * d) / det,
        )

    return TransformStage("world_file", forward, inverse)


def shift_stage(dx: float, dy: float) -> TransformStage:
    """Constant offset: forward adds ``(dx, dy)``, inverse subtracts it."""

    def forward(xy: Sequence[float]) -> Coordinate:
        return (xy[0] + dx, xy[1] + dy)

    def inverse(xy: Sequence[float]) -> Coordinate:
        return (xy[0] - dx, xy[1] - dy)

    return TransformStage("shift", forward, inverse)


def tin_stage(tin: "Tin") -> TransformStage:
    """TIN warp stage.

    Map Y grows upward while image pixel Y grows downward, so Y is negated
    before the forward lookup and after the inverse lookup.
    """

    def forward(xy: Sequence[float]) -> Coordinate:
        return tin.transform((xy[0], -xy[1]), inverse=False)

    def inverse(merc: Sequence[float]) -> Coordinate:
        x, y = tin.transform(merc, inverse=True)
        return (x, -y)

    return TransformStage("tin", forward, inverse)


def operation_stage(*transforms: "NamedTransform") -> TransformStage:
    """Named datum stage composed of one or more provider transforms.

    Forward applies the transforms in order; inverse unwinds them in
    reverse order.
    """
    name = "operation:" + ",".join(f"{t.source}->{t.target}" for t in transforms)

    def forward(xy: Sequence[float]) -> Coordinate:
        for t in transforms:
            xy = t.forward(xy)
        return _identity(xy)

    def inverse(xy: Sequence[float]) -> Coordinate:
        for t in reversed(transforms):
            xy = t.inverse(xy)
        return _identity(xy)

    return TransformStage(name, forward, inverse)


class TransformChain:
    """Ordered composition of transform stages.

    Parameters
    ----------
    system : TransformStage, optional
        System ↔ Map stage. Identity when omitted.
    warp : TransformStage, optional
        Map ↔ Warp stage. Identity when omitted.
    operation : TransformStage, optional
        Warp ↔ Operation stage. Identity when omitted.

    Examples
    --------
    >>> chain = TransformChain(system=affine_stage(2, 0, 10, 0, 2, 20))
    >>> chain.forward((1, 1))
    (12.0, 18.0)
    """

    def __init__(
        self,
        system: Optional[TransformStage] = None,
        warp: Optional[TransformStage] = None,
        operation: Optional[TransformStage] = None,
    ):
        self.stages = tuple(
            stage for stage in (system, warp, operation) if stage is not None
        )

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(stage.name for stage in self.stages)

    def forward(self, xy: Sequence[float]) -> Coordinate:
        out = _identity(xy)
        for stage in self.stages:
            out = stage.forward(out)
            assert_finite_coordinate(out, stage.name)
        return out

    def inverse(self, xy: Sequence[float]) -> Coordinate:
        out = _identity(xy)
        for stage in reversed(self.stages):
            out = stage.inverse(out)
            assert_finite_coordinate(out, stage.name)
        return out

    def __len__(self) -> int:
        return len(self.stages)

    def __repr__(self) -> str:
        return f"TransformChain({' -> '.join(self.names) or 'identity'})"
