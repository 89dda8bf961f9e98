"""Bad heading screening."""

import logging
import math

from adcpscreen.ensemble.ensemble import Ensemble

__all__ = ['is_bad_heading', 'screen_bad_heading', 'next_previous_heading']

logger = logging.getLogger(__name__)


def is_bad_heading(heading) -> bool:
    """A heading of exactly 0.0 or NaN is treated as an invalid reading.

    0.0 is also a legitimate due-north reading; the two cannot be told apart.
    """
    heading = float(heading)
    return heading == 0.0 or math.isnan(heading)


def screen_bad_heading(ensemble: Ensemble, previous_heading: float) -> bool:
    """Replace invalid ancillary and bottom-track headings with ``previous_heading``.

    Nothing is substituted until a previous good heading exists.

    Returns
    -------
    bool
        True if any heading was replaced.
    """
    if is_bad_heading(previous_heading):
        return False

    changed = False
    for record in (ensemble.ancillary, ensemble.bottom_track):
        if record is not None and is_bad_heading(record.heading):
            logger.debug("Invalid heading %r replaced with previous %.2f",
                         record.heading, previous_heading)
            record.heading = previous_heading
            changed = True
    return changed


def next_previous_heading(ensemble: Ensemble, previous_heading: float) -> float:
    """Heading to carry forward after this frame."""
    if ensemble.is_ancillary_avail and not is_bad_heading(ensemble.ancillary.heading):
        return float(ensemble.ancillary.heading)
    return previous_heading
