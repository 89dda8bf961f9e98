"""Backfill water-profile metadata from bottom track.

When water profiling is disabled at acquisition the frame arrives with no
profile beams or bins and without usable ancillary data. Downstream stages
assume ancillary data exists, so it is copied from bottom track.
"""

import logging

from adcpscreen.ensemble.ensemble import ANCILLARY_FIELDS, AncillaryData, Ensemble

__all__ = ['fill_missing_profile_metadata']

logger = logging.getLogger(__name__)


def fill_missing_profile_metadata(ensemble: Ensemble) -> bool:
    """Copy beam count and ancillary fields from bottom track.

    Applies only when bottom track exists, the profile has zero beams or
    zero bins, and the bottom-track beam count differs from the profile
    beam count.

    Returns
    -------
    bool
        True if the frame was modified.
    """
    if not ensemble.is_bottom_track_avail or not ensemble.is_ensemble_avail:
        return False

    header = ensemble.ensemble_data
    bt = ensemble.bottom_track
    if header.num_bins != 0 and header.num_beams != 0:
        return False
    if bt.num_beams == header.num_beams:
        return False

    header.num_beams = bt.num_beams
    if ensemble.ancillary is None:
        ensemble.ancillary = AncillaryData()
    for name in ANCILLARY_FIELDS:
        setattr(ensemble.ancillary, name, getattr(bt, name))

    logger.debug("Ensemble %d: profile metadata filled from bottom track (%d beams)",
                 header.ensemble_number, bt.num_beams)
    return True
