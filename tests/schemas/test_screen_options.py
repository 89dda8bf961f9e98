"""ScreenOptions validation and immutability."""

import pytest
from pydantic import ValidationError

from adcpscreen.ensemble import HeadingSource
from adcpscreen.schemas import ScreenOptions

pytestmark = [pytest.mark.unit, pytest.mark.schemas]


class TestScreenOptions:

    def test_defaults(self):
        options = ScreenOptions()

        assert options.mark_bad_below_bottom
        assert options.remove_ship_speed
        assert options.use_bt_vel and options.use_gps_vel
        assert not options.force_3beam
        assert not options.retransform
        assert options.heading_source == HeadingSource.ADCP.value
        assert options.wp_corr_thresh == 0.25
        assert options.bt_corr_thresh == 0.90
        assert options.bt_snr_thresh == 10.0

    def test_frozen(self):
        options = ScreenOptions()
        with pytest.raises(ValidationError):
            options.retransform = True

    def test_with_changes_returns_new_instance(self):
        options = ScreenOptions()
        changed = options.with_changes(retransform=True, gps_heading_offset=5)

        assert changed is not options
        assert changed.retransform
        assert changed.gps_heading_offset == 5.0
        assert not options.retransform

    @pytest.mark.parametrize("changes", [
        {"force_beam_bad": 4},
        {"force_bt_beam_bad": -1},
        {"wp_corr_thresh": 1.5},
        {"bt_snr_thresh": -3},
        {"heading_source": "magnetometer"},
        {"unknown_toggle": True},
    ])
    def test_invalid_values_rejected(self, changes):
        with pytest.raises(ValidationError):
            ScreenOptions().with_changes(**changes)

    def test_heading_source_case_insensitive(self):
        assert ScreenOptions(heading_source="GPS").heading_source == "gps"

    def test_json_round_trip(self):
        options = ScreenOptions(heading_source="gps", force_3beam_bt=True)
        assert ScreenOptions.model_validate_json(options.model_dump_json()) == options
