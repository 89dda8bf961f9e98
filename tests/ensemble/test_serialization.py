"""Tests for JSONL ensemble serialization."""

import json

import numpy as np
import pytest

from adcpscreen.ensemble import (
    Encoding,
    ensemble_from_dict,
    ensemble_to_dict,
    read_ensembles,
    write_ensembles,
)

from tests.helpers.fake_ensemble import make_ensemble, make_gps

pytestmark = [pytest.mark.unit, pytest.mark.ensemble]


class TestDictConversion:

    def test_absent_records_are_omitted(self):
        record = ensemble_to_dict(make_ensemble(bottom_track=False))

        assert "bottom_track" not in record
        assert "nmea" not in record
        assert record["ensemble_data"]["encoding"] == "native"

    def test_dict_is_json_serializable(self):
        ens = make_ensemble(nmea=make_gps(), water_mass=True, encoding="pd0")
        text = json.dumps(ensemble_to_dict(ens))

        restored = ensemble_from_dict(json.loads(text))

        assert restored.encoding is Encoding.PD0
        assert restored.nmea.course == pytest.approx(90.0)
        assert restored.water_mass.layer_depth == pytest.approx(10.0)
        np.testing.assert_allclose(restored.water_profile.earth_velocity,
                                   ens.water_profile.earth_velocity)
        np.testing.assert_allclose(restored.bottom_track.range, ens.bottom_track.range)

    def test_unknown_record_raises(self):
        record = ensemble_to_dict(make_ensemble())
        record["gage_height"] = {}

        with pytest.raises(ValueError, match="gage_height"):
            ensemble_from_dict(record)

    def test_unknown_field_raises(self):
        record = ensemble_to_dict(make_ensemble())
        record["ancillary"]["compass_offset"] = 1.0

        with pytest.raises(TypeError):
            ensemble_from_dict(record)


class TestFiles:

    def test_write_and_read(self, temp_dir):
        path = temp_dir / "sub" / "frames.jsonl"
        frames = [make_ensemble(ensemble_number=i) for i in range(3)]

        assert write_ensembles(path, frames) == 3

        numbers = [e.ensemble_data.ensemble_number for e in read_ensembles(path)]
        assert numbers == [0, 1, 2]

    def test_append(self, temp_dir):
        path = temp_dir / "frames.jsonl"
        write_ensembles(path, [make_ensemble(ensemble_number=1)])
        write_ensembles(path, [make_ensemble(ensemble_number=2)], append=True)

        assert len(list(read_ensembles(path))) == 2

    def test_blank_lines_skipped(self, temp_dir):
        path = temp_dir / "frames.jsonl"
        write_ensembles(path, [make_ensemble()])
        with open(path, "a") as fh:
            fh.write("\n\n")

        assert len(list(read_ensembles(path))) == 1
