"""Transform stage contract.

Enforces the guarantee that every stage of a transform chain hands the
next stage a finite 2D coordinate. A NaN or infinite value means the stage
was built from unusable parameters.
"""

import math

from maplat.contracts.base import require


def assert_finite_coordinate(coord, stage: str) -> None:
    """Enforce that ``coord`` is a finite 2D coordinate.

    Parameters
    ----------
    coord : sequence of float
        Output of a transform stage.

    stage : str
        Stage name, used in the error message.

    Raises
    ------
    ContractViolation
        If the coordinate is not 2D or holds NaN / infinity.
    """
    require(
        len(coord) >= 2,
        f"Transform contract violated: stage '{stage}' returned {len(coord)} values, expected 2"
    )
    require(
        math.isfinite(coord[0]) and math.isfinite(coord[1]),
        f"Transform contract violated: stage '{stage}' returned non-finite coordinate {tuple(coord)}"
    )
