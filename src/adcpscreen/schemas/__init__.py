"""Pydantic configuration schemas for adcpscreen.

All configuration validation, coercion, and normalization happens at
schema validation time via Pydantic.

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
ScreenOptions : class
    Immutable per-configuration screening options
"""

from adcpscreen.schemas.options import ScreenOptions
from adcpscreen.schemas.resolve import resolve_config
from adcpscreen.schemas.internal import InternalConfig
from adcpscreen.schemas.param import ParamConfig
from adcpscreen.schemas.user import UserConfig
from adcpscreen.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
    'ScreenOptions',
]
