"""Frame contract.

Checked by the router before a frame reaches a pipeline: the array shapes
must agree with the header so the stages can index them safely.
"""

from adcpscreen.contracts.base import require
from adcpscreen.ensemble.ensemble import Ensemble


def assert_ensemble_consistent(ensemble: Ensemble) -> None:
    """Enforce the frame contract.

    Raises
    ------
    ContractViolation
        If the header is missing or an array disagrees with it.
    """
    require(
        ensemble.is_ensemble_avail,
        "Frame contract violated: missing ensemble header"
    )
    header = ensemble.ensemble_data
    require(
        header.num_bins >= 0 and header.num_beams >= 0,
        f"Frame contract violated: negative size ({header.num_bins} bins, {header.num_beams} beams)"
    )
    require(
        header.cepo_index >= 0 and header.ss_config_index >= 0,
        "Frame contract violated: negative configuration index"
    )

    if ensemble.is_water_profile_avail:
        wp = ensemble.water_profile
        require(
            wp.num_bins == header.num_bins,
            f"Frame contract violated: profile has {wp.num_bins} bins, header says {header.num_bins}"
        )
        if wp.num_bins > 0:
            require(
                wp.beam_velocity.shape[1] == header.num_beams,
                f"Frame contract violated: profile has {wp.beam_velocity.shape[1]} beams, "
                f"header says {header.num_beams}"
            )
            for name in ("instrument_velocity", "earth_velocity", "ship_velocity"):
                values = getattr(wp, name)
                require(
                    values.shape == (wp.num_bins, 4),
                    f"Frame contract violated: '{name}' has shape {values.shape}, "
                    f"expected ({wp.num_bins}, 4)"
                )
            for name in ("correlation", "amplitude"):
                values = getattr(wp, name)
                require(
                    values.size == 0 or values.shape == wp.beam_velocity.shape,
                    f"Frame contract violated: '{name}' shape {values.shape} does not match beams"
                )

    if ensemble.is_bottom_track_avail:
        bt = ensemble.bottom_track
        for name in ("range", "snr", "correlation", "beam_velocity"):
            require(
                len(getattr(bt, name)) == bt.num_beams,
                f"Frame contract violated: bottom track '{name}' length != {bt.num_beams}"
            )
