"""Screening corrections applied to a single ensemble.

Each function mutates the frame in place and skips quietly when the
sub-record it needs is missing.

- fill_missing: Backfill profile metadata from bottom track
- heading: Bad heading substitution
- three_beam: Forced 3-beam profile and bottom-track solutions
- retransform: Beam to earth/ship retransform with thresholds
- bottom: Mark bins below the bottom as bad
- ship_speed: Ship velocity measurement and removal
"""

from adcpscreen.screen.fill_missing import fill_missing_profile_metadata
from adcpscreen.screen.heading import is_bad_heading, next_previous_heading, screen_bad_heading
from adcpscreen.screen.three_beam import force_3beam_bottom_track, force_3beam_profile
from adcpscreen.screen.retransform import (
    retransform_bottom_track,
    retransform_profile,
    retransform_water_mass,
)
from adcpscreen.screen.bottom import mark_bad_below_bottom
from adcpscreen.screen.ship_speed import (
    ShipVelocity,
    has_ship_velocity_source,
    measure_ship_velocity,
    remove_ship_speed,
)

__all__ = [
    "ShipVelocity",
    "fill_missing_profile_metadata",
    "force_3beam_bottom_track",
    "force_3beam_profile",
    "has_ship_velocity_source",
    "is_bad_heading",
    "mark_bad_below_bottom",
    "measure_ship_velocity",
    "next_previous_heading",
    "remove_ship_speed",
    "retransform_bottom_track",
    "retransform_profile",
    "retransform_water_mass",
    "screen_bad_heading",
]
