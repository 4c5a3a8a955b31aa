"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all contracts.
It enforces semantic invariants between stages; it is not input validation.
"""

from maplat.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Enforce a contract.

    Fail-fast: no recovery, no fallback, no silence.

    Parameters
    ----------
    condition : bool
        The invariant that must be true. If False, ContractViolation is raised.

    message : str
        Error message explaining the contract violation (for debugging).

    Raises
    ------
    ContractViolation
        If condition is False.

    Examples
    --------
    >>> require(len(cluster.members) > 0, "Cluster contract: empty cluster")
    """
    if not condition:
        raise ContractViolation(message)
