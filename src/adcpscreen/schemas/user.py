"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs with aliases for common naming patterns
(e.g., INPUT_FILE -> input_file, REMOVE_SHIP_SPEED -> remove_ship_speed).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Validation is lenient to accept
both uppercase and lowercase keys, integers where floats are expected, etc.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator, model_validator

from adcpscreen.schemas.base import ScreenBaseModel


class UserScreeningConfig(ScreenBaseModel):
    """User-facing default screening options."""
    mark_bad_below_bottom: Optional[bool] = None
    remove_ship_speed: Optional[bool] = None
    use_bt_vel: Optional[bool] = None
    use_gps_vel: Optional[bool] = None
    gps_heading_offset: Optional[float] = None
    force_3beam: Optional[bool] = None
    force_beam_bad: Optional[int] = None
    force_3beam_bt: Optional[bool] = None
    force_bt_beam_bad: Optional[int] = None
    retransform: Optional[bool] = None
    heading_source: Optional[str] = None
    retransform_heading_offset: Optional[float] = None
    wp_corr_thresh: Optional[float] = None
    bt_corr_thresh: Optional[float] = None
    bt_snr_thresh: Optional[float] = None

    @field_validator("heading_source", mode="before")
    @classmethod
    def normalize_heading_source(cls, v):
        """Normalize heading source to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class UserRegistryConfig(ScreenBaseModel):
    """User-facing registry config."""
    exclude_averaged: Optional[bool] = None
    restore_known_configs: Optional[bool] = None


class UserPlaybackConfig(ScreenBaseModel):
    """User-facing playback config."""
    input_file: Optional[str] = None
    source: Optional[str] = None
    pace_seconds: Optional[float] = None


class UserOutputConfig(ScreenBaseModel):
    """User-facing output config."""
    write_corrected: Optional[bool] = None
    corrected_suffix: Optional[str] = None
    options_db_filename: Optional[str] = None
    max_queue_size: Optional[int] = None


# Flat field name -> ScreenOptions field name
_SCREENING_ALIASES = (
    "mark_bad_below_bottom",
    "remove_ship_speed",
    "use_bt_vel",
    "use_gps_vel",
    "gps_heading_offset",
    "force_3beam",
    "force_beam_bad",
    "force_3beam_bt",
    "force_bt_beam_bad",
    "retransform",
    "heading_source",
    "retransform_heading_offset",
    "wp_corr_thresh",
    "bt_corr_thresh",
    "bt_snr_thresh",
)


class UserConfig(ScreenBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    Usage
    -----
        user_cfg = UserConfig(
            input_file="data/transect.jsonl",
            base_dir="/data/screened",
            remove_ship_speed=True,
            bt_snr_thresh=12,
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Top-level operational settings
    base_dir: Optional[str] = Field(None, alias="BASE_DIR")
    input_file: Optional[str] = Field(None, alias="INPUT_FILE")
    source: Optional[Literal["live", "playback"]] = Field(None, alias="SOURCE")
    pace_seconds: Optional[float] = Field(None, alias="PACE_SECONDS")
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(
        None, alias="LOG_LEVEL")

    # Screening defaults (flat aliases)
    mark_bad_below_bottom: Optional[bool] = Field(None, alias="MARK_BAD_BELOW_BOTTOM")
    remove_ship_speed: Optional[bool] = Field(None, alias="REMOVE_SHIP_SPEED")
    use_bt_vel: Optional[bool] = Field(None, alias="USE_BT_VEL")
    use_gps_vel: Optional[bool] = Field(None, alias="USE_GPS_VEL")
    gps_heading_offset: Optional[float] = Field(None, alias="GPS_HEADING_OFFSET")
    force_3beam: Optional[bool] = Field(None, alias="FORCE_3BEAM")
    force_beam_bad: Optional[int] = Field(None, alias="FORCE_BEAM_BAD")
    force_3beam_bt: Optional[bool] = Field(None, alias="FORCE_3BEAM_BT")
    force_bt_beam_bad: Optional[int] = Field(None, alias="FORCE_BT_BEAM_BAD")
    retransform: Optional[bool] = Field(None, alias="RETRANSFORM")
    heading_source: Optional[str] = Field(None, alias="HEADING_SOURCE")
    retransform_heading_offset: Optional[float] = Field(None, alias="RETRANSFORM_HEADING_OFFSET")
    wp_corr_thresh: Optional[float] = Field(None, alias="WP_CORR_THRESH")
    bt_corr_thresh: Optional[float] = Field(None, alias="BT_CORR_THRESH")
    bt_snr_thresh: Optional[float] = Field(None, alias="BT_SNR_THRESH")

    # Registry / output (flat aliases)
    exclude_averaged: Optional[bool] = Field(None, alias="EXCLUDE_AVERAGED")
    write_corrected: Optional[bool] = Field(None, alias="WRITE_CORRECTED")

    # Nested overrides (advanced users)
    screening: Optional[UserScreeningConfig] = None
    registry: Optional[UserRegistryConfig] = None
    playback: Optional[UserPlaybackConfig] = None
    output: Optional[UserOutputConfig] = None

    model_config = ScreenBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @model_validator(mode="after")
    def infer_playback_source_from_file(self):
        """If an input file is given but no source, the source is playback."""
        if self.source is None and self.input_file:
            self.source = "playback"
        return self

    @field_validator("gps_heading_offset", "retransform_heading_offset", "pace_seconds",
                     "wp_corr_thresh", "bt_corr_thresh", "bt_snr_thresh", mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("source", "heading_source", mode="before")
    @classmethod
    def normalize_names(cls, v):
        """Normalize enumerated names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Normalize log level to uppercase."""
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.base_dir is not None:
            overrides["base_dir"] = str(self.base_dir)

        # Screening section
        screening = {}
        for name in _SCREENING_ALIASES:
            value = getattr(self, name)
            if value is not None:
                screening[name] = value
        if self.screening is not None:
            screening.update(self.screening.model_dump(exclude_none=True))
        if screening:
            overrides["screening"] = screening

        # Registry section
        registry = {}
        if self.exclude_averaged is not None:
            registry["exclude_averaged"] = self.exclude_averaged
        if self.registry is not None:
            registry.update(self.registry.model_dump(exclude_none=True))
        if registry:
            overrides["registry"] = registry

        # Playback section
        playback = {}
        if self.input_file is not None:
            playback["input_file"] = str(self.input_file)
        if self.source is not None:
            playback["source"] = self.source
        if self.pace_seconds is not None:
            playback["pace_seconds"] = self.pace_seconds
        if self.playback is not None:
            playback.update(self.playback.model_dump(exclude_none=True))
        if playback:
            overrides["playback"] = playback

        # Output section
        output = {}
        if self.write_corrected is not None:
            output["write_corrected"] = self.write_corrected
        if self.output is not None:
            output.update(self.output.model_dump(exclude_none=True))
        if output:
            overrides["output"] = output

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
