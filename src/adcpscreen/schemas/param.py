"""ParamConfig: Expert defaults for the screening pipeline.

This module defines the complete default configuration. ALL runtime
parameters must have defaults here. No runtime code defines fallback
values; this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives
InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator

from adcpscreen.ensemble.config_key import EnsembleSource
from adcpscreen.schemas.base import ScreenBaseModel
from adcpscreen.schemas.options import ScreenOptions


# =============================================================================
# Nested Configuration Models
# =============================================================================

class RegistryConfig(ScreenBaseModel):
    """Configuration registry policy."""
    exclude_averaged: bool = Field(
        True, description="Never register short/long term averaged streams")
    restore_known_configs: bool = Field(
        True, description="Pre-populate the registry from the options store on start")


class PlaybackConfig(ScreenBaseModel):
    """Frame source configuration."""
    input_file: Optional[str] = None
    source: EnsembleSource = EnsembleSource.PLAYBACK
    pace_seconds: float = Field(0.0, ge=0.0, description="Delay between replayed frames")

    @field_validator("pace_seconds", mode="before")
    @classmethod
    def coerce_pace_to_float(cls, v):
        """Allow int or float for pace."""
        return float(v)


class OutputConfig(ScreenBaseModel):
    """Output file configuration."""
    write_corrected: bool = True
    corrected_suffix: str = "_screened"
    options_db_filename: str = "screen_options.db"
    max_queue_size: int = Field(100, ge=1)


class OrchestratorConfig(ScreenBaseModel):
    """Monitoring loop configuration."""
    status_interval_sec: float = Field(30.0, gt=0)
    drain_timeout_sec: float = Field(60.0, gt=0)


class LoggingConfig(ScreenBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(ScreenBaseModel):
    """Complete expert configuration with all defaults.

    ``screening`` holds the default options for any configuration that has
    never been saved to the options store.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    base_dir: str = "./output"
    screening: ScreenOptions = Field(default_factory=ScreenOptions)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    orchestrator: OrchestratorConfig = Field(default_factory=OrchestratorConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
