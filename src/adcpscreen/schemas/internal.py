"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully
validated, normalized, and contains no optional fields that processing
code depends on.
"""

from typing import Literal, Optional
from pydantic import ConfigDict, Field

from adcpscreen.ensemble.config_key import EnsembleSource
from adcpscreen.schemas.base import ScreenBaseModel
from adcpscreen.schemas.options import ScreenOptions


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalRegistryConfig(ScreenBaseModel):
    """Runtime registry policy."""
    exclude_averaged: bool
    restore_known_configs: bool


class InternalPlaybackConfig(ScreenBaseModel):
    """Runtime frame source configuration.

    Note: input_file may be None while merging but is required before the
    orchestrator starts.
    """
    input_file: Optional[str]
    source: EnsembleSource
    pace_seconds: float = Field(ge=0.0)


class InternalOutputConfig(ScreenBaseModel):
    """Runtime output configuration."""
    write_corrected: bool
    corrected_suffix: str
    options_db_filename: str
    max_queue_size: int = Field(ge=1)


class InternalOrchestratorConfig(ScreenBaseModel):
    """Runtime monitoring configuration."""
    status_interval_sec: float = Field(gt=0)
    drain_timeout_sec: float = Field(gt=0)


class InternalLoggingConfig(ScreenBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(ScreenBaseModel):
    """Authoritative runtime configuration.

    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.exclude_averaged = config.registry.exclude_averaged  # NOT .get()

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation in runtime code

    All of that happens during config resolution.
    """

    base_dir: str
    output_dirs: Optional[dict[str, str]] = None
    screening: ScreenOptions
    registry: InternalRegistryConfig
    playback: InternalPlaybackConfig
    output: InternalOutputConfig
    orchestrator: InternalOrchestratorConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )
