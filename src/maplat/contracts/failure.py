"""Centralized failure type for contract violations.

Contracts fail fast, loud, and once. All violations raise the same
exception type, allowing callers to handle internal bugs uniformly.
"""


class ContractViolation(RuntimeError):
    """Raised when an internal contract is violated.

    This indicates a bug, not bad user input. It means a stage did not
    produce the invariants it promised.

    Key distinction:
    - DescriptorError: malformed map settings (caller input)
    - ProjectionError: projection cannot be built or found
    - ContractViolation: internal bug (programmer error)
    """
    pass
