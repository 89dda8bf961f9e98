"""Tests for bad heading screening."""

import math

import pytest

from adcpscreen.screen import is_bad_heading, next_previous_heading, screen_bad_heading

from tests.helpers.fake_ensemble import make_ensemble

pytestmark = [pytest.mark.unit, pytest.mark.screen]


class TestIsBadHeading:

    @pytest.mark.parametrize("heading,bad", [
        (0.0, True),
        (math.nan, True),
        (0.01, False),
        (359.9, False),
        (180.0, False),
    ])
    def test_sentinel(self, heading, bad):
        assert is_bad_heading(heading) is bad


class TestScreenBadHeading:

    def test_zero_heading_replaced_by_previous(self):
        ens = make_ensemble(heading=0.0)

        changed = screen_bad_heading(ens, 45.0)

        assert changed
        assert ens.ancillary.heading == 45.0
        assert ens.bottom_track.heading == 45.0

    def test_good_heading_untouched(self):
        ens = make_ensemble(heading=90.0)

        assert not screen_bad_heading(ens, 45.0)
        assert ens.ancillary.heading == 90.0

    def test_nothing_substituted_without_previous(self):
        ens = make_ensemble(heading=0.0)

        assert not screen_bad_heading(ens, 0.0)
        assert ens.ancillary.heading == 0.0

    def test_missing_records_are_skipped(self):
        ens = make_ensemble(heading=0.0, bottom_track=False)
        ens.ancillary = None

        assert not screen_bad_heading(ens, 45.0)


class TestNextPreviousHeading:

    def test_good_heading_becomes_previous(self):
        assert next_previous_heading(make_ensemble(heading=90.0), 45.0) == 90.0

    def test_bad_heading_keeps_previous(self):
        assert next_previous_heading(make_ensemble(heading=0.0), 45.0) == 45.0

    def test_sequence_45_then_zero_then_90(self):
        previous = 0.0
        out = []
        for heading in (45.0, 0.0, 90.0):
            ens = make_ensemble(heading=heading)
            screen_bad_heading(ens, previous)
            previous = next_previous_heading(ens, previous)
            out.append(ens.ancillary.heading)

        assert out == [45.0, 45.0, 90.0]
