"""Tests for the playback runner entry point."""

import pytest

from adcpscreen.cli import load_user_config_dict, run_playback_pipeline
from adcpscreen.ensemble import write_ensembles

from tests.helpers.fake_ensemble import make_ensemble

pytestmark = [pytest.mark.integration, pytest.mark.pipeline]


class TestLoadUserConfig:

    def test_loads_config_dict(self, temp_dir):
        path = temp_dir / "user_config.py"
        path.write_text('CONFIG = {"REMOVE_SHIP_SPEED": False, "BT_SNR_THRESH": 12}\n')

        assert load_user_config_dict(str(path)) == {"REMOVE_SHIP_SPEED": False,
                                                    "BT_SNR_THRESH": 12}

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_user_config_dict(str(temp_dir / "nope.py"))

    def test_no_config_dict(self, temp_dir):
        path = temp_dir / "empty.py"
        path.write_text("SETTINGS = 1\n")
        with pytest.raises(ValueError, match="No CONFIG"):
            load_user_config_dict(str(path))


class TestRunPlaybackPipeline:

    def test_end_to_end(self, temp_dir, capsys):
        data = temp_dir / "transect.jsonl"
        write_ensembles(data, [make_ensemble(ensemble_number=i) for i in range(4)])
        config_path = temp_dir / "user_config.py"
        config_path.write_text(
            'CONFIG = {"LOG_LEVEL": "WARNING", "REMOVE_SHIP_SPEED": False}\n')

        summary = run_playback_pipeline(
            str(config_path),
            cli_args={"input_file": str(data), "base_dir": str(temp_dir / "out"),
                      "source": None},
        )

        assert summary["received"] == 4
        assert summary["routed"] == 4
        assert (temp_dir / "out" / "corrected" / "transect_screened.jsonl").exists()
        assert "Screening complete" in capsys.readouterr().out

    def test_missing_input_file_raises(self, temp_dir):
        with pytest.raises(ValueError, match="input_file"):
            run_playback_pipeline(cli_args={"base_dir": str(temp_dir / "out")})
