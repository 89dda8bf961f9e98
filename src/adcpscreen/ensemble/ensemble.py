"""In-memory ensemble records.

An ensemble is one complete multi-sensor sample from the instrument. Each
sub-record is optional; stages check the matching ``is_*_avail`` property
before touching it. Velocity arrays use ``BAD_VELOCITY`` as the invalid
marker and ranges use ``BAD_RANGE``.
"""

import copy
import math
from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional

import numpy as np

from adcpscreen.ensemble.config_key import ConfigKey, EnsembleSource

__all__ = [
    'BAD_VELOCITY', 'BAD_RANGE', 'DEFAULT_BEAM_ANGLE', 'Encoding',
    'EnsembleData', 'AncillaryData', 'BottomTrackData', 'WaterProfileData',
    'WaterMassData', 'NmeaData', 'Ensemble',
    'is_bad_velocity', 'bad_velocity_mask', 'is_good_range',
]

BAD_VELOCITY = 88.888
BAD_RANGE = 0.0
DEFAULT_BEAM_ANGLE = 20.0

# Earth frame
EAST_INDEX = 0
NORTH_INDEX = 1
VERTICAL_INDEX = 2
Q_INDEX = 3

# Instrument frame
X_INDEX = 0
Y_INDEX = 1
Z_INDEX = 2
ERROR_INDEX = 3

# Ship frame
TRANSVERSE_INDEX = 0
LONGITUDINAL_INDEX = 1
NORMAL_INDEX = 2

_BAD_TOLERANCE = 1e-3

# Fields shared by AncillaryData and BottomTrackData
ANCILLARY_FIELDS = (
    "heading",
    "pitch",
    "roll",
    "water_temp",
    "system_temp",
    "salinity",
    "pressure",
    "transducer_depth",
    "speed_of_sound",
    "first_ping_time",
    "last_ping_time",
)


class Encoding(str, Enum):
    """Encoding the frame was originally decoded from.

    The beam ordering and the instrument axis convention differ between
    the instrument-native layout and the third-party (PD0) layout.
    """
    NATIVE = "native"
    PD0 = "pd0"


def is_bad_velocity(value) -> bool:
    """True for the BAD_VELOCITY marker and for NaN."""
    value = float(value)
    return math.isnan(value) or abs(value - BAD_VELOCITY) < _BAD_TOLERANCE


def bad_velocity_mask(values) -> np.ndarray:
    """Vectorized ``is_bad_velocity``."""
    values = np.asarray(values, dtype=float)
    return np.isnan(values) | (np.abs(values - BAD_VELOCITY) < _BAD_TOLERANCE)


def is_good_range(value) -> bool:
    """True for a finite, positive range."""
    if value is None:
        return False
    value = float(value)
    return math.isfinite(value) and value > BAD_RANGE


def _bad(*shape) -> np.ndarray:
    return np.full(shape, BAD_VELOCITY, dtype=float)


def _as_array(value, shape) -> np.ndarray:
    if value is None:
        return _bad(*shape)
    return np.array(value, dtype=float)


def _as_matrix(value) -> np.ndarray:
    arr = np.array(value, dtype=float)
    if arr.ndim == 2:
        return arr
    if arr.size == 0:
        return arr.reshape(0, 0)
    return arr.reshape(1, -1)


@dataclass
class EnsembleData:
    """Frame header: sizes and configuration identity."""
    ensemble_number: int = 0
    num_bins: int = 0
    num_beams: int = 0
    subsystem_code: str = "0"
    cepo_index: int = 0
    ss_config_index: int = 0
    encoding: Encoding = Encoding.NATIVE
    beam_angle: float = DEFAULT_BEAM_ANGLE
    timestamp: Optional[str] = None

    def __post_init__(self):
        self.encoding = Encoding(self.encoding)
        self.subsystem_code = str(self.subsystem_code)


@dataclass
class AncillaryData:
    first_bin_range: float = 0.0
    bin_size: float = 0.0
    first_ping_time: float = 0.0
    last_ping_time: float = 0.0
    heading: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0
    water_temp: float = 0.0
    system_temp: float = 0.0
    salinity: float = 0.0
    pressure: float = 0.0
    transducer_depth: float = 0.0
    speed_of_sound: float = 0.0


@dataclass
class BottomTrackData:
    """Bottom track sample.

    Per-beam arrays (``range``, ``snr``, ``correlation``, ``beam_velocity``)
    have ``num_beams`` entries. The three transformed velocities always have
    four entries; the fourth is the error (instrument) or Q (earth/ship)
    velocity.
    """
    first_ping_time: float = 0.0
    last_ping_time: float = 0.0
    heading: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0
    water_temp: float = 0.0
    system_temp: float = 0.0
    salinity: float = 0.0
    pressure: float = 0.0
    transducer_depth: float = 0.0
    speed_of_sound: float = 0.0
    num_beams: int = 4
    range: Optional[np.ndarray] = None
    snr: Optional[np.ndarray] = None
    correlation: Optional[np.ndarray] = None
    beam_velocity: Optional[np.ndarray] = None
    instrument_velocity: Optional[np.ndarray] = None
    earth_velocity: Optional[np.ndarray] = None
    ship_velocity: Optional[np.ndarray] = None

    def __post_init__(self):
        n = self.num_beams
        self.range = np.zeros(n) if self.range is None else np.array(self.range, dtype=float)
        self.snr = np.zeros(n) if self.snr is None else np.array(self.snr, dtype=float)
        self.correlation = (
            np.zeros(n) if self.correlation is None else np.array(self.correlation, dtype=float)
        )
        self.beam_velocity = _as_array(self.beam_velocity, (n,))
        self.instrument_velocity = _as_array(self.instrument_velocity, (4,))
        self.earth_velocity = _as_array(self.earth_velocity, (4,))
        self.ship_velocity = _as_array(self.ship_velocity, (4,))

    def average_range(self) -> float:
        """Mean of the good beam ranges, ``BAD_RANGE`` when none are good."""
        good = [r for r in self.range if is_good_range(r)]
        if not good:
            return BAD_RANGE
        return float(np.mean(good))

    def is_earth_velocity_good(self) -> bool:
        return not bad_velocity_mask(self.earth_velocity[:3]).any()

    def is_beam_velocity_good(self) -> bool:
        return not bad_velocity_mask(self.beam_velocity).any()


@dataclass
class WaterProfileData:
    """Per-bin water velocities.

    Beam-indexed arrays are ``(bins, beams)``; transformed velocities are
    ``(bins, 4)``; ``velocity_vectors`` holds magnitude and direction as
    ``(bins, 2)``.
    """
    beam_velocity: np.ndarray
    instrument_velocity: np.ndarray
    earth_velocity: np.ndarray
    ship_velocity: np.ndarray
    correlation: np.ndarray
    amplitude: np.ndarray
    velocity_vectors: np.ndarray

    def __post_init__(self):
        for f in fields(self):
            setattr(self, f.name, _as_matrix(getattr(self, f.name)))

    @classmethod
    def empty(cls, num_bins: int, num_beams: int) -> "WaterProfileData":
        """All-BAD profile sized for the given header."""
        return cls(
            beam_velocity=_bad(num_bins, num_beams),
            instrument_velocity=_bad(num_bins, 4),
            earth_velocity=_bad(num_bins, 4),
            ship_velocity=_bad(num_bins, 4),
            correlation=np.zeros((num_bins, num_beams)),
            amplitude=np.zeros((num_bins, num_beams)),
            velocity_vectors=_bad(num_bins, 2),
        )

    @property
    def num_bins(self) -> int:
        return self.beam_velocity.shape[0]


@dataclass
class WaterMassData:
    """Water-mass (layer) velocity. Any frame group may be missing."""
    instrument_velocity: Optional[np.ndarray] = None
    earth_velocity: Optional[np.ndarray] = None
    ship_velocity: Optional[np.ndarray] = None
    layer_depth: float = 0.0

    def __post_init__(self):
        for name in ("instrument_velocity", "earth_velocity", "ship_velocity"):
            value = getattr(self, name)
            if value is not None:
                setattr(self, name, np.array(value, dtype=float))

    @property
    def is_instrument_avail(self) -> bool:
        return self.instrument_velocity is not None


@dataclass
class NmeaData:
    """GPS readings decoded from the NMEA sentences attached to a frame.

    ``speed`` (m/s) and ``course`` (degrees) come from VTG, ``true_heading``
    (degrees) from HDT.
    """
    speed: Optional[float] = None
    course: Optional[float] = None
    true_heading: Optional[float] = None

    @property
    def is_gpvtg_avail(self) -> bool:
        return self.speed is not None and self.course is not None

    @property
    def is_gps_speed_good(self) -> bool:
        return self.speed is not None and math.isfinite(self.speed) and self.speed >= 0

    @property
    def is_gphdt_avail(self) -> bool:
        return self.true_heading is not None and math.isfinite(self.true_heading)


@dataclass
class Ensemble:
    """One frame. Stages mutate it in place."""
    ensemble_data: Optional[EnsembleData] = None
    ancillary: Optional[AncillaryData] = None
    bottom_track: Optional[BottomTrackData] = None
    water_profile: Optional[WaterProfileData] = None
    water_mass: Optional[WaterMassData] = None
    nmea: Optional[NmeaData] = None

    @property
    def is_ensemble_avail(self) -> bool:
        return self.ensemble_data is not None

    @property
    def is_ancillary_avail(self) -> bool:
        return self.ancillary is not None

    @property
    def is_bottom_track_avail(self) -> bool:
        return self.bottom_track is not None

    @property
    def is_water_profile_avail(self) -> bool:
        return self.water_profile is not None

    @property
    def is_water_mass_avail(self) -> bool:
        return self.water_mass is not None

    @property
    def is_nmea_avail(self) -> bool:
        return self.nmea is not None

    @property
    def encoding(self) -> Encoding:
        if self.ensemble_data is None:
            return Encoding.NATIVE
        return self.ensemble_data.encoding

    @property
    def beam_angle(self) -> float:
        if self.ensemble_data is None:
            return DEFAULT_BEAM_ANGLE
        return self.ensemble_data.beam_angle

    def config_key(self, source: EnsembleSource) -> ConfigKey:
        return ConfigKey.from_ensemble(self, source)

    def copy(self) -> "Ensemble":
        return copy.deepcopy(self)

    def restore(self, snapshot: "Ensemble") -> None:
        """Replace every sub-record with the one held by ``snapshot``.

        Used to roll back a failed stage while keeping the caller's
        reference to this frame valid.
        """
        for f in fields(self):
            setattr(self, f.name, getattr(snapshot, f.name))
