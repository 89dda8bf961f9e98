"""Mark water-profile bins below the bottom as bad."""

import logging
from typing import Optional

import numpy as np

from adcpscreen.ensemble.ensemble import BAD_VELOCITY, Ensemble, is_good_range

__all__ = ['bin_depths', 'bottom_range', 'mark_bad_below_bottom']

logger = logging.getLogger(__name__)


def bin_depths(ensemble: Ensemble) -> np.ndarray:
    """Range to the centre of each profile bin."""
    anc = ensemble.ancillary
    return anc.first_bin_range + np.arange(ensemble.water_profile.num_bins) * anc.bin_size


def bottom_range(ensemble: Ensemble, previous_range: float) -> Optional[float]:
    """Current averaged bottom-track range, else ``previous_range``, else None."""
    if ensemble.is_bottom_track_avail:
        current = ensemble.bottom_track.average_range()
        if is_good_range(current):
            return current
    if is_good_range(previous_range):
        logger.debug("Bottom track range invalid, using previous range %.2f", previous_range)
        return float(previous_range)
    return None


def mark_bad_below_bottom(ensemble: Ensemble, previous_range: float) -> Optional[float]:
    """Set every profile bin deeper than the bottom to BAD.

    Returns
    -------
    float or None
        The range used as the boundary, None if the stage could not run.
    """
    if not ensemble.is_water_profile_avail or not ensemble.is_ancillary_avail:
        return None
    wp = ensemble.water_profile
    if wp.num_bins == 0:
        return None

    boundary = bottom_range(ensemble, previous_range)
    if boundary is None:
        return None

    below = bin_depths(ensemble) > boundary
    if below.any():
        for name in ("beam_velocity", "instrument_velocity", "earth_velocity",
                     "ship_velocity", "velocity_vectors"):
            values = getattr(wp, name)
            if values.shape[0] == wp.num_bins:
                values[below, :] = BAD_VELOCITY
        logger.debug("Marked %d bins below %.2f m as bad", int(below.sum()), boundary)
    return boundary
