"""Recompute transformed velocities from raw beam data.

The retransform stage screens beams by correlation (and SNR for bottom
track), solves the instrument velocity again and rotates it into the earth
and ship frames with a selectable heading source. The frame-level helpers
here are shared with the 3-beam stages.
"""

import logging

import numpy as np

from adcpscreen.ensemble.ensemble import BAD_VELOCITY, Ensemble
from adcpscreen.ensemble.transform import (
    HeadingSource,
    beam_to_instrument,
    instrument_to_earth,
    instrument_to_ship,
    velocity_vectors,
)
from adcpscreen.screen.heading import is_bad_heading

__all__ = [
    'select_heading',
    'transform_profile',
    'transform_bottom_track',
    'retransform_profile',
    'retransform_bottom_track',
    'retransform_water_mass',
]

logger = logging.getLogger(__name__)


def _is_four_beam(beams) -> bool:
    return np.ndim(beams) >= 1 and np.shape(beams)[-1] == 4


def select_heading(ensemble: Ensemble, heading_source, compass_heading: float) -> float:
    """Pick the heading for the earth transform.

    GPS prefers the HDT true heading, then the VTG course. Without either,
    or with the ADCP source, the compass heading is used.
    """
    if HeadingSource(heading_source) == HeadingSource.GPS and ensemble.is_nmea_avail:
        nmea = ensemble.nmea
        if nmea.is_gphdt_avail:
            return float(nmea.true_heading)
        if nmea.is_gpvtg_avail and not is_bad_heading(nmea.course):
            return float(nmea.course)
        logger.debug("No GPS heading in ensemble, using compass heading")
    return float(compass_heading)


def transform_profile(ensemble: Ensemble, beams=None, heading=None) -> bool:
    """Solve profile instrument, earth and ship velocities from beam data.

    Parameters
    ----------
    ensemble : Ensemble
        Frame to update in place.
    beams : np.ndarray, optional
        Screened beam velocities; defaults to the profile beam velocities.
    heading : float, optional
        Heading override; defaults to the ancillary heading.
    """
    if not ensemble.is_water_profile_avail or ensemble.water_profile.num_bins == 0:
        return False
    wp = ensemble.water_profile
    if beams is None:
        beams = wp.beam_velocity
    if not _is_four_beam(beams):
        logger.debug("Profile beam shape %s is not 4-beam, skipping transform", np.shape(beams))
        return False

    wp.instrument_velocity = beam_to_instrument(beams, ensemble.encoding, ensemble.beam_angle)

    if ensemble.is_ancillary_avail:
        anc = ensemble.ancillary
        if heading is None:
            heading = anc.heading
        wp.earth_velocity = instrument_to_earth(
            wp.instrument_velocity, heading, anc.pitch, anc.roll, ensemble.encoding)
        wp.ship_velocity = instrument_to_ship(
            wp.instrument_velocity, anc.pitch, anc.roll, ensemble.encoding)
        wp.velocity_vectors = velocity_vectors(wp.earth_velocity)
    return True


def transform_bottom_track(ensemble: Ensemble, beams=None, heading=None) -> bool:
    """Bottom-track counterpart of ``transform_profile``."""
    if not ensemble.is_bottom_track_avail:
        return False
    bt = ensemble.bottom_track
    if beams is None:
        beams = bt.beam_velocity
    if not _is_four_beam(beams):
        logger.debug("Bottom track beam shape %s is not 4-beam, skipping transform", np.shape(beams))
        return False
    if heading is None:
        heading = bt.heading

    bt.instrument_velocity = beam_to_instrument(beams, ensemble.encoding, ensemble.beam_angle)
    bt.earth_velocity = instrument_to_earth(
        bt.instrument_velocity, heading, bt.pitch, bt.roll, ensemble.encoding)
    bt.ship_velocity = instrument_to_ship(
        bt.instrument_velocity, bt.pitch, bt.roll, ensemble.encoding)
    return True


def retransform_profile(ensemble: Ensemble, corr_thresh: float,
                        heading_source=HeadingSource.ADCP, heading_offset: float = 0.0) -> bool:
    """Retransform the water profile, rejecting beams below ``corr_thresh``."""
    if not ensemble.is_water_profile_avail or not ensemble.is_ancillary_avail:
        return False
    wp = ensemble.water_profile
    if wp.num_bins == 0:
        return False

    beams = wp.beam_velocity.copy()
    if wp.correlation.shape == beams.shape:
        beams[wp.correlation < corr_thresh] = BAD_VELOCITY

    heading = select_heading(ensemble, heading_source, ensemble.ancillary.heading) + heading_offset
    return transform_profile(ensemble, beams=beams, heading=heading)


def retransform_bottom_track(ensemble: Ensemble, corr_thresh: float, snr_thresh: float,
                             heading_source=HeadingSource.ADCP,
                             heading_offset: float = 0.0) -> bool:
    """Retransform bottom track, rejecting beams below either threshold."""
    if not ensemble.is_bottom_track_avail:
        return False
    bt = ensemble.bottom_track

    beams = bt.beam_velocity.copy()
    rejected = np.zeros(beams.shape, dtype=bool)
    if bt.correlation.shape == beams.shape:
        rejected |= bt.correlation < corr_thresh
    if bt.snr.shape == beams.shape:
        rejected |= bt.snr < snr_thresh
    beams[rejected] = BAD_VELOCITY

    heading = select_heading(ensemble, heading_source, bt.heading) + heading_offset
    return transform_bottom_track(ensemble, beams=beams, heading=heading)


def retransform_water_mass(ensemble: Ensemble, heading_source=HeadingSource.ADCP,
                           heading_offset: float = 0.0) -> bool:
    """Recompute earth and ship water-mass velocity from its instrument velocity."""
    if not ensemble.is_water_mass_avail or not ensemble.is_ancillary_avail:
        return False
    wm = ensemble.water_mass
    if not wm.is_instrument_avail:
        return False

    anc = ensemble.ancillary
    heading = select_heading(ensemble, heading_source, anc.heading) + heading_offset
    wm.earth_velocity = instrument_to_earth(
        wm.instrument_velocity, heading, anc.pitch, anc.roll, ensemble.encoding)[:3]
    wm.ship_velocity = instrument_to_ship(
        wm.instrument_velocity, anc.pitch, anc.roll, ensemble.encoding)[:3]
    return True
