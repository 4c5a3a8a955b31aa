"""Pydantic schemas for maplat.

This package provides strictly typed configuration models and the map
descriptor document models. All validation, coercion, and normalization
happens at schema validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
parse_descriptor : function
    Validate a raw map descriptor into LegacyDescriptor or ModernDescriptor
"""

from maplat.schemas.resolve import resolve_config
from maplat.schemas.internal import InternalConfig
from maplat.schemas.param import ParamConfig
from maplat.schemas.user import UserConfig
from maplat.schemas.cli import CLIConfig
from maplat.schemas.descriptor import (
    LegacyDescriptor,
    MapDescriptor,
    ModernDescriptor,
    parse_descriptor,
    parse_sub_descriptor,
)

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
    'LegacyDescriptor',
    'ModernDescriptor',
    'MapDescriptor',
    'parse_descriptor',
    'parse_sub_descriptor',
]
