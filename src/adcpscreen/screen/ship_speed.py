"""Ship speed removal.

The instrument measures water velocity relative to itself, so the vessel's
own motion is folded into every bin. Bottom track measures the bottom
relative to the instrument, which is the negated vessel velocity, so the
true water velocity is ``measured - bottom_track``. GPS speed is converted
to the same bottom-referenced convention before use.
"""

import logging
import math
from dataclasses import dataclass, field

import numpy as np

from adcpscreen.ensemble.ensemble import (
    BAD_VELOCITY,
    EAST_INDEX,
    NORTH_INDEX,
    Ensemble,
    bad_velocity_mask,
)
from adcpscreen.ensemble.transform import velocity_vectors

__all__ = [
    'ShipVelocity',
    'has_ship_velocity_source',
    'measure_ship_velocity',
    'remove_ship_speed',
]

logger = logging.getLogger(__name__)


def _bad3() -> np.ndarray:
    return np.full(3, BAD_VELOCITY)


@dataclass
class ShipVelocity:
    """Bottom-referenced velocity in the three frames.

    Attributes
    ----------
    earth : np.ndarray
        East, north, vertical.
    instrument : np.ndarray
        X, Y, Z.
    ship : np.ndarray
        Transverse, longitudinal, normal.
    """
    earth: np.ndarray = field(default_factory=_bad3)
    instrument: np.ndarray = field(default_factory=_bad3)
    ship: np.ndarray = field(default_factory=_bad3)

    def __post_init__(self):
        self.earth = np.array(self.earth, dtype=float)[:3]
        self.instrument = np.array(self.instrument, dtype=float)[:3]
        self.ship = np.array(self.ship, dtype=float)[:3]

    def copy(self) -> "ShipVelocity":
        return ShipVelocity(self.earth.copy(), self.instrument.copy(), self.ship.copy())

    def merge(self, previous: "ShipVelocity") -> "ShipVelocity":
        """Per-component: this value when good, otherwise ``previous``."""
        def pick(current, fallback):
            return np.where(bad_velocity_mask(current), fallback, current)

        return ShipVelocity(
            pick(self.earth, previous.earth),
            pick(self.instrument, previous.instrument),
            pick(self.ship, previous.ship),
        )

    def is_all_bad(self) -> bool:
        return all(bad_velocity_mask(v).all() for v in (self.earth, self.instrument, self.ship))


def has_ship_velocity_source(ensemble: Ensemble, use_bt: bool, use_gps: bool) -> bool:
    """True if this frame can provide a ship velocity under the given options."""
    if use_bt and ensemble.is_bottom_track_avail:
        return True
    return (use_gps and not ensemble.is_bottom_track_avail
            and ensemble.is_nmea_avail and ensemble.nmea.is_gpvtg_avail)


def measure_ship_velocity(ensemble: Ensemble, use_bt: bool = True, use_gps: bool = True,
                          gps_heading_offset: float = 0.0) -> ShipVelocity:
    """Extract this frame's bottom-referenced ship velocity.

    Bottom track is used when selected and present. Otherwise, with GPS
    selected, the VTG speed is split into east/north with the compass
    heading plus offset (VTG course plus offset when there is no ancillary
    data). GPS has no vertical or instrument/ship components; those stay BAD.
    """
    result = ShipVelocity()

    if use_bt and ensemble.is_bottom_track_avail:
        bt = ensemble.bottom_track
        result.earth = bt.earth_velocity[:3].copy()
        result.instrument = bt.instrument_velocity[:3].copy()
        result.ship = bt.ship_velocity[:3].copy()
        return result

    if use_gps and not ensemble.is_bottom_track_avail and ensemble.is_nmea_avail:
        nmea = ensemble.nmea
        if nmea.is_gpvtg_avail and nmea.is_gps_speed_good:
            if ensemble.is_ancillary_avail:
                heading = ensemble.ancillary.heading + gps_heading_offset
            else:
                heading = nmea.course + gps_heading_offset
            h = math.radians(heading)
            result.earth[EAST_INDEX] = -nmea.speed * math.sin(h)
            result.earth[NORTH_INDEX] = -nmea.speed * math.cos(h)

    return result


def remove_ship_speed(ensemble: Ensemble, reference: ShipVelocity) -> bool:
    """Subtract ``reference`` from the profile velocities in place.

    Only good water cells and good reference components are touched. The
    velocity vectors are recomputed afterwards.

    Returns
    -------
    bool
        True if any cell was corrected.
    """
    if not ensemble.is_water_profile_avail:
        return False
    wp = ensemble.water_profile
    if wp.num_bins == 0:
        return False

    changed = False
    for name, ref in (("earth_velocity", reference.earth),
                      ("instrument_velocity", reference.instrument),
                      ("ship_velocity", reference.ship)):
        values = getattr(wp, name)
        if values.ndim != 2 or values.shape[1] < 3:
            continue
        for comp in range(3):
            if bad_velocity_mask(ref[comp]):
                continue
            column = values[:, comp]
            good = ~bad_velocity_mask(column)
            if good.any():
                column[good] -= ref[comp]
                changed = True

    if changed:
        wp.velocity_vectors = velocity_vectors(wp.earth_velocity)
    else:
        logger.debug("No usable ship velocity components to remove")
    return changed
