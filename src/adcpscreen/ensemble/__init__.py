"""Ensemble records and the helpers that operate on whole frames.

- ensemble: Frame dataclasses, BAD markers, validity helpers
- config_key: EnsembleSource and ConfigKey
- transform: Beam/instrument/earth/ship transforms
- serialization: JSONL read/write
- playback: File playback producer thread
"""

from adcpscreen.ensemble.config_key import ConfigKey, EnsembleSource
from adcpscreen.ensemble.ensemble import (
    BAD_RANGE,
    BAD_VELOCITY,
    AncillaryData,
    BottomTrackData,
    Encoding,
    Ensemble,
    EnsembleData,
    NmeaData,
    WaterMassData,
    WaterProfileData,
    bad_velocity_mask,
    is_bad_velocity,
    is_good_range,
)
from adcpscreen.ensemble.transform import HeadingSource
from adcpscreen.ensemble.serialization import (
    ensemble_from_dict,
    ensemble_to_dict,
    read_ensembles,
    write_ensembles,
)
from adcpscreen.ensemble.playback import PlaybackSource

__all__ = [
    "BAD_RANGE",
    "BAD_VELOCITY",
    "AncillaryData",
    "BottomTrackData",
    "ConfigKey",
    "Encoding",
    "Ensemble",
    "EnsembleData",
    "EnsembleSource",
    "HeadingSource",
    "NmeaData",
    "PlaybackSource",
    "WaterMassData",
    "WaterProfileData",
    "bad_velocity_mask",
    "ensemble_from_dict",
    "ensemble_to_dict",
    "is_bad_velocity",
    "is_good_range",
    "read_ensembles",
    "write_ensembles",
]
