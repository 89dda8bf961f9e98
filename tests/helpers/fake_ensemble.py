import numpy as np

from adcpscreen.ensemble import (
    AncillaryData,
    BottomTrackData,
    Ensemble,
    EnsembleData,
    NmeaData,
    WaterMassData,
    WaterProfileData,
)


def make_ensemble(
    num_bins=4,
    num_beams=4,
    heading=100.0,
    pitch=0.0,
    roll=0.0,
    first_bin_range=5.0,
    bin_size=10.0,
    water_velocity=(1.0, 2.0, 0.1, 0.0),
    beam_velocity=(0.3, -0.1, 0.4, -0.2),
    bottom_track=True,
    bt_range=30.0,
    bt_velocity=(0.5, 0.5, 0.0, 0.0),
    nmea=None,
    water_mass=False,
    subsystem_code="2",
    cepo_index=0,
    ss_config_index=0,
    encoding="native",
    ensemble_number=1,
):
    """
    Build a self-consistent frame for screening tests.

    Every profile row gets the same ``water_velocity`` in the instrument,
    earth and ship frames. Bins sit at ``first_bin_range + i * bin_size``
    (5, 15, 25, 35 m by default), so a 30 m bottom puts the last bin below it.
    """
    header = EnsembleData(
        ensemble_number=ensemble_number,
        num_bins=num_bins,
        num_beams=num_beams,
        subsystem_code=subsystem_code,
        cepo_index=cepo_index,
        ss_config_index=ss_config_index,
        encoding=encoding,
    )
    ancillary = AncillaryData(
        first_bin_range=first_bin_range,
        bin_size=bin_size,
        heading=heading,
        pitch=pitch,
        roll=roll,
        water_temp=12.5,
        salinity=35.0,
        transducer_depth=0.5,
        speed_of_sound=1500.0,
    )

    rows = np.tile(np.array(water_velocity, dtype=float), (num_bins, 1))
    if num_beams:
        beams = np.tile(np.array(beam_velocity[:num_beams], dtype=float), (num_bins, 1))
    else:
        beams = np.zeros((num_bins, 0))
    profile = WaterProfileData(
        beam_velocity=beams,
        instrument_velocity=rows.copy(),
        earth_velocity=rows.copy(),
        ship_velocity=rows.copy(),
        correlation=np.full(beams.shape, 0.9),
        amplitude=np.full(beams.shape, 60.0),
        velocity_vectors=np.tile([2.24, 26.6], (num_bins, 1)),
    )

    bt = None
    if bottom_track:
        bt = BottomTrackData(
            heading=heading,
            pitch=pitch,
            roll=roll,
            water_temp=12.5,
            salinity=35.0,
            transducer_depth=0.5,
            speed_of_sound=1500.0,
            num_beams=4,
            range=[bt_range] * 4,
            snr=[30.0] * 4,
            correlation=[0.95] * 4,
            beam_velocity=[0.1, -0.1, 0.1, -0.1],
            instrument_velocity=list(bt_velocity),
            earth_velocity=list(bt_velocity),
            ship_velocity=list(bt_velocity),
        )

    wm = None
    if water_mass:
        wm = WaterMassData(
            instrument_velocity=[0.2, 0.1, 0.0],
            earth_velocity=[0.2, 0.1, 0.0],
            ship_velocity=[0.2, 0.1, 0.0],
            layer_depth=10.0,
        )

    return Ensemble(
        ensemble_data=header,
        ancillary=ancillary,
        bottom_track=bt,
        water_profile=profile,
        water_mass=wm,
        nmea=nmea,
    )


def make_gps(speed=2.0, course=90.0, true_heading=None):
    return NmeaData(speed=speed, course=course, true_heading=true_heading)
