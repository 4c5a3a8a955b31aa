"""Internal contracts: fail-fast enforcement of stage invariants.

Contracts fail immediately and loudly when a stage doesn't produce its
promised invariants.

Key principle:
- Pydantic validates descriptors and config
- Contracts validate internal stage outputs
- Algorithms handle geometric edge cases
"""

from maplat.contracts.failure import ContractViolation
from maplat.contracts.base import require
from maplat.contracts.projection import assert_finite_coordinate
from maplat.contracts.cluster import assert_partitioned

__all__ = [
    "ContractViolation",
    "require",
    "assert_finite_coordinate",
    "assert_partitioned",
]
