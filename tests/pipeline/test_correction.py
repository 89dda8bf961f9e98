"""Tests for the per-configuration correction pipeline."""

import threading

import numpy as np
import pytest
from pydantic import ValidationError

from adcpscreen.contracts.invariants import STAGE_ORDER
from adcpscreen.ensemble import BAD_VELOCITY, ConfigKey, bad_velocity_mask
from adcpscreen.pipeline import EnsembleCorrectionPipeline
from adcpscreen.pipeline import CorrectionState, correction
from adcpscreen.schemas import ScreenOptions

from tests.helpers.fake_ensemble import make_ensemble

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]


@pytest.fixture
def pipeline(playback_key):
    return EnsembleCorrectionPipeline(playback_key)


class TestBuildStages:

    def test_default_stages(self):
        names = [s.name for s in EnsembleCorrectionPipeline.build_stages(ScreenOptions())]
        assert names == [
            "fill_missing_metadata",
            "screen_bad_heading",
            "mark_bad_below_bottom",
            "remove_ship_speed",
        ]

    def test_all_stages_in_canonical_order(self):
        options = ScreenOptions(force_3beam=True, force_3beam_bt=True, retransform=True)
        names = [s.name for s in EnsembleCorrectionPipeline.build_stages(options)]
        assert tuple(names) == STAGE_ORDER

    def test_disabled_stages_are_not_built(self):
        options = ScreenOptions(mark_bad_below_bottom=False, remove_ship_speed=False)
        names = [s.name for s in EnsembleCorrectionPipeline.build_stages(options)]
        assert names == ["fill_missing_metadata", "screen_bad_heading"]


class TestProcess:
    """Corrections applied frame by frame."""

    def test_bottom_marked_and_ship_speed_removed(self, pipeline):
        # Bottom at 30 m, bins at 5/15/25/35 m, bottom track earth (0.5, 0.5, 0)
        ens = make_ensemble(bt_range=30.0, bt_velocity=(0.5, 0.5, 0.0, 0.0), heading=100.0)

        result = pipeline.process(ens)

        assert result is ens
        earth = ens.water_profile.earth_velocity
        assert bad_velocity_mask(earth[3]).all()
        np.testing.assert_allclose(earth[:3, :3], np.tile([0.5, 1.5, 0.1], (3, 1)))

        state = pipeline.state
        assert state.previous_range == pytest.approx(30.0)
        assert state.previous_heading == pytest.approx(100.0)
        np.testing.assert_allclose(state.previous_ship_velocity.earth, [0.5, 0.5, 0.0])
        assert pipeline.stats["processed"] == 1

    def test_zero_heading_replaced_from_previous_frame(self, pipeline):
        pipeline.process(make_ensemble(heading=100.0))
        ens = make_ensemble(heading=0.0)

        pipeline.process(ens)

        assert ens.ancillary.heading == 100.0
        assert pipeline.state.previous_heading == 100.0

    def test_previous_range_used_when_bottom_lost(self, pipeline):
        pipeline.process(make_ensemble(bt_range=20.0))
        ens = make_ensemble(bottom_track=False)

        pipeline.process(ens)

        earth = ens.water_profile.earth_velocity
        assert not bad_velocity_mask(earth[1]).any()
        assert bad_velocity_mask(earth[2:]).all()
        # No bottom track and no GPS: ship speed is left in
        np.testing.assert_allclose(earth[0, :3], [1.0, 2.0, 0.1])

    def test_bad_ship_component_falls_back_to_previous(self, pipeline):
        pipeline.process(make_ensemble(bt_velocity=(0.5, 0.5, 0.0, 0.0)))
        ens = make_ensemble(bt_velocity=(BAD_VELOCITY, 0.25, 0.0, 0.0))

        pipeline.process(ens)

        np.testing.assert_allclose(ens.water_profile.earth_velocity[0, :3], [0.5, 1.75, 0.1])
        np.testing.assert_allclose(pipeline.state.previous_ship_velocity.earth, [0.5, 0.25, 0.0])

    def test_disabled_options_leave_frame_untouched(self, playback_key):
        options = ScreenOptions(mark_bad_below_bottom=False, remove_ship_speed=False)
        pipeline = EnsembleCorrectionPipeline(playback_key, options)
        ens = make_ensemble()
        before = ens.water_profile.earth_velocity.copy()

        pipeline.process(ens)

        np.testing.assert_array_equal(ens.water_profile.earth_velocity, before)
        # State still advances
        assert pipeline.state.previous_range == pytest.approx(30.0)

    def test_retransform_skips_three_beam_frame(self, playback_key):
        options = ScreenOptions(retransform=True, mark_bad_below_bottom=False,
                                remove_ship_speed=False)
        pipeline = EnsembleCorrectionPipeline(playback_key, options)
        ens = make_ensemble(num_beams=3)
        before = ens.water_profile.earth_velocity.copy()

        pipeline.process(ens)

        np.testing.assert_array_equal(ens.water_profile.earth_velocity, before)
        assert pipeline.stats["stage_failures"] == 0

    def test_frame_without_profile_is_safe(self, pipeline):
        ens = make_ensemble()
        ens.water_profile = None
        ens.ensemble_data.num_bins = 0

        pipeline.process(ens)

        assert pipeline.stats["stage_failures"] == 0
        assert pipeline.state.previous_range == pytest.approx(30.0)

    def test_reset_clears_state(self, pipeline):
        pipeline.process(make_ensemble())
        pipeline.reset()

        assert pipeline.state.previous_heading == 0.0
        assert pipeline.state.previous_ship_velocity.is_all_bad()


class TestStageFailure:
    """A raising stage is rolled back and the rest are skipped."""

    def test_partial_edits_rolled_back(self, pipeline, monkeypatch):
        def boom(ensemble, reference):
            ensemble.water_profile.earth_velocity[0, 0] = 999.0
            raise RuntimeError("division trouble")

        monkeypatch.setattr(correction, "remove_ship_speed", boom)
        ens = make_ensemble()

        pipeline.process(ens)

        earth = ens.water_profile.earth_velocity
        assert earth[0, 0] == pytest.approx(1.0)
        # Earlier stage output is kept
        assert bad_velocity_mask(earth[3]).all()
        assert pipeline.stats["stage_failures"] == 1

    def test_remaining_stages_skipped_and_state_advanced(self, pipeline, monkeypatch):
        def boom(ensemble, previous_range):
            raise ValueError("bad geometry")

        monkeypatch.setattr(correction, "mark_bad_below_bottom", boom)
        ens = make_ensemble()

        pipeline.process(ens)

        earth = ens.water_profile.earth_velocity
        assert not bad_velocity_mask(earth).any()
        np.testing.assert_allclose(earth[0, :3], [1.0, 2.0, 0.1])
        assert pipeline.state.previous_range == pytest.approx(30.0)
        assert pipeline.stats["processed"] == 1

    def test_failure_is_logged(self, pipeline, monkeypatch, caplog):
        def boom(ensemble, previous_range):
            raise ValueError("bad geometry")

        monkeypatch.setattr(correction, "mark_bad_below_bottom", boom)
        pipeline.process(make_ensemble())

        assert "mark_bad_below_bottom" in caplog.text

    def test_failed_advance_keeps_previous_state(self, pipeline, monkeypatch):
        pipeline.process(make_ensemble(heading=100.0, bt_range=30.0))

        def partial_advance(self, ensemble, options):
            self.previous_range = 20.0
            raise RuntimeError("advance interrupted")

        monkeypatch.setattr(CorrectionState, "advance", partial_advance)
        pipeline.process(make_ensemble(heading=120.0, bt_range=20.0))

        assert pipeline.state.previous_range == pytest.approx(30.0)
        assert pipeline.stats["processed"] == 2


class TestLifecycle:

    def test_closed_pipeline_passes_frame_through(self, pipeline):
        pipeline.close()
        ens = make_ensemble()
        before = ens.water_profile.earth_velocity.copy()

        assert pipeline.process(ens) is ens

        np.testing.assert_array_equal(ens.water_profile.earth_velocity, before)
        assert pipeline.closed
        assert pipeline.stats["skipped_closed"] == 1
        assert pipeline.stats["processed"] == 0

    def test_concurrent_frames_all_processed(self, pipeline):
        def worker():
            for _ in range(25):
                pipeline.process(make_ensemble())

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert pipeline.stats["processed"] == 100


class TestOptions:

    def test_update_options_swaps_and_persists(self, store, playback_key):
        pipeline = EnsembleCorrectionPipeline(playback_key, store=store)

        new = pipeline.update_options(bt_snr_thresh=12, heading_source="GPS")

        assert pipeline.options is new
        assert new.bt_snr_thresh == 12.0
        assert new.heading_source == "gps"
        assert store.get_options(playback_key) == new

    def test_invalid_update_keeps_options(self, playback_key):
        pipeline = EnsembleCorrectionPipeline(playback_key)
        original = pipeline.options

        with pytest.raises(ValidationError):
            pipeline.update_options(force_beam_bad=7)

        assert pipeline.options is original

    def test_option_change_applies_to_next_frame(self, playback_key):
        pipeline = EnsembleCorrectionPipeline(playback_key)
        pipeline.update_options(remove_ship_speed=False)
        ens = make_ensemble()

        pipeline.process(ens)

        np.testing.assert_allclose(ens.water_profile.earth_velocity[0, :3], [1.0, 2.0, 0.1])

    def test_set_options(self):
        pipeline = EnsembleCorrectionPipeline(ConfigKey("1", 0, 0))
        options = ScreenOptions(retransform=True)
        pipeline.set_options(options)
        assert pipeline.options.retransform
