"""Exception types raised by ``maplat``.

Key distinction:
- DescriptorError: the map settings document is malformed (caller input)
- ProjectionError: a projection or transform cannot be built or found
- ContractViolation (maplat.contracts): an internal invariant broke (bug)

Collaborator failures (tile fetch, IO) are never wrapped here; they
propagate unchanged.
"""


class MaplatError(Exception):
    """Base class for all maplat errors."""
    pass


class DescriptorError(MaplatError, ValueError):
    """Raised when a map descriptor is missing required fields or is malformed.

    Raised at parse / Source Factory construction time. There is no
    fallback: a descriptor without a usable size or tile URL is rejected.
    """
    pass


class ProjectionError(MaplatError):
    """Base class for projection and transform failures."""
    pass


class UnsupportedProjectionError(ProjectionError):
    """Raised when a named datum projection has no known definition."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Unsupported projection: '{code}' is not defined")


class UnknownProjectionError(ProjectionError):
    """Raised when a projection code has not been registered."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Unknown projection: '{code}' is not registered")


class DegenerateTransformError(ProjectionError):
    """Raised when world file parameters describe a non-invertible affine map."""
    pass
