"""Forced 3-beam solutions.

Used when one beam is known to be bad (blocked, damaged). The beam is
marked BAD and the instrument velocity is solved again from the remaining
three beams, then rotated into the earth and ship frames.
"""

import logging

from adcpscreen.ensemble.ensemble import BAD_VELOCITY, Ensemble
from adcpscreen.screen.retransform import transform_bottom_track, transform_profile

__all__ = ['force_3beam_profile', 'force_3beam_bottom_track']

logger = logging.getLogger(__name__)


def _valid_beam(bad_beam: int, num_beams: int) -> bool:
    if num_beams != 4:
        return False
    if not 0 <= bad_beam < num_beams:
        logger.warning("Beam %d out of range for a %d-beam system", bad_beam, num_beams)
        return False
    return True


def force_3beam_profile(ensemble: Ensemble, bad_beam: int) -> bool:
    """Mark ``bad_beam`` BAD in every bin and recompute the profile velocities."""
    if not ensemble.is_ensemble_avail or not ensemble.is_water_profile_avail:
        return False
    wp = ensemble.water_profile
    if wp.num_bins == 0 or not _valid_beam(bad_beam, wp.beam_velocity.shape[1]):
        return False

    wp.beam_velocity[:, bad_beam] = BAD_VELOCITY
    return transform_profile(ensemble)


def force_3beam_bottom_track(ensemble: Ensemble, bad_beam: int) -> bool:
    """Mark ``bad_beam`` BAD in bottom track and recompute its velocities."""
    if not ensemble.is_bottom_track_avail:
        return False
    bt = ensemble.bottom_track
    if not _valid_beam(bad_beam, len(bt.beam_velocity)):
        return False

    bt.beam_velocity[bad_beam] = BAD_VELOCITY
    return transform_bottom_track(ensemble)
