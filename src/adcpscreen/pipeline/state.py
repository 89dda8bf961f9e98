"""Carried-forward correction state for one configuration."""

import logging
from dataclasses import dataclass, field

from adcpscreen.ensemble.ensemble import BAD_RANGE, Ensemble, is_good_range
from adcpscreen.schemas.options import ScreenOptions
from adcpscreen.screen.heading import next_previous_heading
from adcpscreen.screen.ship_speed import ShipVelocity, measure_ship_velocity

__all__ = ['CorrectionState']

logger = logging.getLogger(__name__)


@dataclass
class CorrectionState:
    """Last known good values for one configuration.

    Attributes
    ----------
    previous_heading : float
        0.0 until a first good heading is seen.
    previous_ship_velocity : ShipVelocity
        Bottom-referenced ship velocity in earth, instrument and ship
        frames; BAD until a first good component is seen.
    previous_range : float
        Averaged bottom-track range; ``BAD_RANGE`` until first seen.
    """
    previous_heading: float = 0.0
    previous_ship_velocity: ShipVelocity = field(default_factory=ShipVelocity)
    previous_range: float = BAD_RANGE

    def copy(self) -> "CorrectionState":
        return CorrectionState(
            previous_heading=self.previous_heading,
            previous_ship_velocity=self.previous_ship_velocity.copy(),
            previous_range=self.previous_range,
        )

    def advance(self, ensemble: Ensemble, options: ScreenOptions) -> None:
        """Record this frame's good values as the new previous values.

        Every component is sticky: it is only overwritten by a good
        current value.
        """
        current = measure_ship_velocity(
            ensemble,
            use_bt=options.use_bt_vel,
            use_gps=options.use_gps_vel,
            gps_heading_offset=options.gps_heading_offset,
        )
        self.previous_ship_velocity = current.merge(self.previous_ship_velocity)

        if ensemble.is_bottom_track_avail:
            current_range = ensemble.bottom_track.average_range()
            if is_good_range(current_range):
                self.previous_range = current_range

        self.previous_heading = next_previous_heading(ensemble, self.previous_heading)
