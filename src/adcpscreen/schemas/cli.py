"""CLIConfig: Command-line operational overrides.

Minimal configuration for operational parameters that commonly change
between runs: input file, output path, source, verbosity.
"""

from typing import Literal, Optional
from pydantic import Field, model_validator

from adcpscreen.schemas.base import ScreenBaseModel


class CLIConfig(ScreenBaseModel):
    """Command-line configuration overrides.

    Highest priority in config resolution.

    Notes
    -----
    If an input file is provided but the source is not, the source is set
    to "playback" (schema responsibility, not runtime).

    Usage
    -----
        cli_cfg = CLIConfig(
            input_file="data/transect.jsonl",
            base_dir="/scratch/screened",
        )
        # source automatically set to "playback"

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    input_file: Optional[str] = None
    base_dir: Optional[str] = None
    source: Optional[Literal["live", "playback"]] = None
    pace_seconds: Optional[float] = Field(None, ge=0.0)
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    @model_validator(mode="after")
    def infer_playback_source_from_file(self):
        """If an input file is given but no source, the source is playback."""
        if self.source is None and self.input_file:
            self.source = "playback"
        return self

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.base_dir is not None:
            overrides["base_dir"] = str(self.base_dir)

        playback_overrides = {}
        if self.input_file is not None:
            playback_overrides["input_file"] = str(self.input_file)
        if self.source is not None:
            playback_overrides["source"] = self.source
        if self.pace_seconds is not None:
            playback_overrides["pace_seconds"] = self.pace_seconds
        if playback_overrides:
            overrides["playback"] = playback_overrides

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
