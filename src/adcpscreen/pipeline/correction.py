"""Per-configuration ensemble correction pipeline.

Applies the screening stages to each frame of one configuration, in a
fixed order, carrying state forward from frame to frame.
"""

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Optional

from adcpscreen.contracts import assert_stage_order
from adcpscreen.ensemble.config_key import ConfigKey
from adcpscreen.ensemble.ensemble import Ensemble
from adcpscreen.pipeline.state import CorrectionState
from adcpscreen.schemas.options import ScreenOptions
from adcpscreen.screen import (
    fill_missing_profile_metadata,
    force_3beam_bottom_track,
    force_3beam_profile,
    has_ship_velocity_source,
    mark_bad_below_bottom,
    measure_ship_velocity,
    next_previous_heading,
    remove_ship_speed,
    retransform_bottom_track,
    retransform_profile,
    retransform_water_mass,
    screen_bad_heading,
)

if TYPE_CHECKING:
    from adcpscreen.pipeline.options_store import OptionsStore

__all__ = ['Stage', 'EnsembleCorrectionPipeline']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stage:
    """One named correction step: ``func(ensemble, state, options)``."""
    name: str
    func: Callable[[Ensemble, CorrectionState, ScreenOptions], object]


# =============================================================================
# Stage functions
# =============================================================================

def _fill_missing(ensemble, state, options):
    return fill_missing_profile_metadata(ensemble)


def _screen_heading(ensemble, state, options):
    changed = screen_bad_heading(ensemble, state.previous_heading)
    state.previous_heading = next_previous_heading(ensemble, state.previous_heading)
    return changed


def _force_3beam_profile(ensemble, state, options):
    return force_3beam_profile(ensemble, options.force_beam_bad)


def _force_3beam_bottom_track(ensemble, state, options):
    return force_3beam_bottom_track(ensemble, options.force_bt_beam_bad)


def _retransform(ensemble, state, options):
    changed = retransform_profile(
        ensemble, options.wp_corr_thresh,
        options.heading_source, options.retransform_heading_offset)
    changed |= retransform_bottom_track(
        ensemble, options.bt_corr_thresh, options.bt_snr_thresh,
        options.heading_source, options.retransform_heading_offset)
    changed |= retransform_water_mass(
        ensemble, options.heading_source, options.retransform_heading_offset)
    return changed


def _mark_bad_below_bottom(ensemble, state, options):
    return mark_bad_below_bottom(ensemble, state.previous_range) is not None


def _remove_ship_speed(ensemble, state, options):
    if not has_ship_velocity_source(ensemble, options.use_bt_vel, options.use_gps_vel):
        logger.debug("No bottom track or GPS velocity; ship speed not removed")
        return False
    current = measure_ship_velocity(
        ensemble, options.use_bt_vel, options.use_gps_vel, options.gps_heading_offset)
    return remove_ship_speed(ensemble, current.merge(state.previous_ship_velocity))


FILL_MISSING = Stage("fill_missing_metadata", _fill_missing)
SCREEN_HEADING = Stage("screen_bad_heading", _screen_heading)
FORCE_3BEAM_PROFILE = Stage("force_3beam_profile", _force_3beam_profile)
FORCE_3BEAM_BOTTOM_TRACK = Stage("force_3beam_bottom_track", _force_3beam_bottom_track)
RETRANSFORM = Stage("retransform", _retransform)
MARK_BAD_BELOW_BOTTOM = Stage("mark_bad_below_bottom", _mark_bad_below_bottom)
REMOVE_SHIP_SPEED = Stage("remove_ship_speed", _remove_ship_speed)


class EnsembleCorrectionPipeline:
    """Stateful corrector for one configuration key.

    ``process`` calls are serialized by a per-pipeline lock, so frames of
    one key are corrected one at a time in call order. Frames of different
    keys go through different pipelines and run in parallel.

    Options are an immutable ``ScreenOptions`` swapped in one assignment;
    a ``process`` call reads them once and uses that value throughout.

    Parameters
    ----------
    key : ConfigKey
        Configuration this pipeline corrects.
    options : ScreenOptions, optional
        Initial options; defaults to ``ScreenOptions()``.
    store : OptionsStore, optional
        When given, option changes are saved to it.

    Examples
    --------
    >>> pipeline = EnsembleCorrectionPipeline(key, ScreenOptions(retransform=True))
    >>> pipeline.process(ensemble)   # corrected in place
    >>> pipeline.update_options(bt_snr_thresh=12.0)
    """

    def __init__(self, key: ConfigKey, options: Optional[ScreenOptions] = None,
                 store: Optional["OptionsStore"] = None):
        self.key = key
        self.store = store
        self._options = options if options is not None else ScreenOptions()
        self._state = CorrectionState()
        self._lock = threading.Lock()
        self._options_lock = threading.Lock()
        self._closed = False
        self.stats = {"processed": 0, "stage_failures": 0, "skipped_closed": 0}

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    @property
    def options(self) -> ScreenOptions:
        return self._options

    def set_options(self, options: ScreenOptions) -> None:
        """Replace the options and persist them."""
        with self._options_lock:
            self._options = options
            if self.store is not None:
                self.store.save_options(self.key, options)

    def update_options(self, **changes) -> ScreenOptions:
        """Apply field changes, validate, swap and persist.

        Raises
        ------
        pydantic.ValidationError
            If a change is invalid; the current options are kept.
        """
        with self._options_lock:
            new_options = self._options.with_changes(**changes)
            self._options = new_options
            if self.store is not None:
                self.store.save_options(self.key, new_options)
        logger.debug("Options updated for %s: %s", self.key, changes)
        return new_options

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> CorrectionState:
        """Copy of the committed state."""
        with self._lock:
            return self._state.copy()

    def reset(self) -> None:
        """Forget all carried-forward values."""
        with self._lock:
            self._state = CorrectionState()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Mark closed. Waits for an in-flight ``process`` to finish."""
        with self._lock:
            self._closed = True
        logger.debug("Pipeline closed: %s", self.key)

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    @staticmethod
    def build_stages(options: ScreenOptions) -> List[Stage]:
        """Ordered stage list selected by ``options``."""
        stages = [FILL_MISSING, SCREEN_HEADING]
        if options.force_3beam:
            stages.append(FORCE_3BEAM_PROFILE)
        if options.force_3beam_bt:
            stages.append(FORCE_3BEAM_BOTTOM_TRACK)
        if options.retransform:
            stages.append(RETRANSFORM)
        if options.mark_bad_below_bottom:
            stages.append(MARK_BAD_BELOW_BOTTOM)
        if options.remove_ship_speed:
            stages.append(REMOVE_SHIP_SPEED)

        assert_stage_order([stage.name for stage in stages])
        return stages

    def process(self, ensemble: Ensemble) -> Ensemble:
        """Correct ``ensemble`` in place and advance the state.

        If a stage raises, its partial edits are rolled back, the remaining
        stages are skipped and the state still advances from what the frame
        holds. If the advance itself raises, the previous state is kept.

        Returns
        -------
        Ensemble
            The same frame object.
        """
        with self._lock:
            if self._closed:
                self.stats["skipped_closed"] += 1
                logger.debug("Pipeline %s closed; ensemble passed through", self.key)
                return ensemble

            options = self._options
            state = self._state.copy()

            for stage in self.build_stages(options):
                snapshot = ensemble.copy()
                try:
                    stage.func(ensemble, state, options)
                except Exception:
                    logger.exception("Stage '%s' failed for %s; remaining stages skipped",
                                     stage.name, self.key)
                    ensemble.restore(snapshot)
                    self.stats["stage_failures"] += 1
                    break

            advanced = state.copy()
            try:
                advanced.advance(ensemble, options)
            except Exception:
                logger.exception("State advance failed for %s", self.key)
            else:
                state = advanced
            self._state = state
            self.stats["processed"] += 1

        return ensemble

    def __repr__(self):
        return f"EnsembleCorrectionPipeline({self.key.label}, closed={self._closed})"
