"""ScreenOptions: per-configuration screening options.

One instance exists per configuration. It is immutable: a change produces
a new validated instance that replaces the old one in a single assignment,
so readers always see either the old or the new options.
"""

from pydantic import ConfigDict, Field, field_validator

from adcpscreen.ensemble.transform import HeadingSource
from adcpscreen.schemas.base import ScreenBaseModel


class ScreenOptions(ScreenBaseModel):
    """Toggles and thresholds for the correction pipeline.

    Attributes
    ----------
    mark_bad_below_bottom : bool
        Mark bins deeper than the bottom as bad.
    remove_ship_speed : bool
        Subtract the vessel velocity from the profile.
    use_bt_vel : bool
        Use bottom track as the ship velocity source.
    use_gps_vel : bool
        Use GPS speed when bottom track is absent.
    gps_heading_offset : float
        Degrees added to the heading used to split GPS speed.
    force_3beam, force_beam_bad : bool, int
        Force a 3-beam profile solution with the given beam marked bad.
    force_3beam_bt, force_bt_beam_bad : bool, int
        Same for bottom track.
    retransform : bool
        Recompute transforms from beam data.
    heading_source : HeadingSource
        Heading used by the retransform.
    retransform_heading_offset : float
        Degrees added to the retransform heading.
    wp_corr_thresh, bt_corr_thresh : float
        Correlation rejection thresholds (0..1).
    bt_snr_thresh : float
        Bottom-track SNR rejection threshold (dB).
    """

    mark_bad_below_bottom: bool = True
    remove_ship_speed: bool = True
    use_bt_vel: bool = True
    use_gps_vel: bool = True
    gps_heading_offset: float = 0.0
    force_3beam: bool = False
    force_beam_bad: int = Field(0, ge=0, le=3)
    force_3beam_bt: bool = False
    force_bt_beam_bad: int = Field(0, ge=0, le=3)
    retransform: bool = False
    heading_source: HeadingSource = HeadingSource.ADCP
    retransform_heading_offset: float = 0.0
    wp_corr_thresh: float = Field(0.25, ge=0.0, le=1.0)
    bt_corr_thresh: float = Field(0.90, ge=0.0, le=1.0)
    bt_snr_thresh: float = Field(10.0, ge=0.0)

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,
    )

    @field_validator("gps_heading_offset", "retransform_heading_offset",
                     "wp_corr_thresh", "bt_corr_thresh", "bt_snr_thresh", mode="before")
    @classmethod
    def coerce_to_float(cls, v):
        """Allow int or float for numeric parameters."""
        return float(v)

    @field_validator("heading_source", mode="before")
    @classmethod
    def normalize_heading_source(cls, v):
        """Accept 'GPS', 'gps', HeadingSource.GPS."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    def with_changes(self, **changes) -> "ScreenOptions":
        """Validated copy with ``changes`` applied."""
        return type(self).model_validate({**self.model_dump(), **changes})
