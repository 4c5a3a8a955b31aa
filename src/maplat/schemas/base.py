"""Base Pydantic models with strict defaults for maplat schemas.

Configuration schemas inherit from MaplatBaseModel to ensure consistent
validation behavior across parameter, user, CLI, and internal configs.
Map descriptors inherit from DocumentModel instead: they are third-party
JSON documents carrying many metadata keys this package never reads.
"""

from pydantic import BaseModel, ConfigDict


class MaplatBaseModel(BaseModel):
    """Base model for all maplat configuration schemas.

    Enforces strict validation:
    - No extra fields allowed
    - Validates assignments after initialization
    - Converts enums to values
    - Strips whitespace from strings
    """

    model_config = ConfigDict(
        extra='forbid',           # Reject unknown fields
        validate_assignment=True, # Validate on field mutation
        use_enum_values=True,     # Convert enums to values
        str_strip_whitespace=True,# Strip whitespace from strings
    )


class DocumentModel(BaseModel):
    """Base model for map descriptor documents.

    Descriptors are read-only once loaded, so instances are frozen.
    Unknown keys (titles, attributions, licenses...) are ignored.
    """

    model_config = ConfigDict(
        extra='ignore',
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )
