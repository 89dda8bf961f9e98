"""Configuration identity used to partition an ensemble stream."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adcpscreen.ensemble.ensemble import Ensemble

__all__ = ['EnsembleSource', 'ConfigKey']


class EnsembleSource(str, Enum):
    """Where a frame came from."""
    LIVE = "live"
    PLAYBACK = "playback"
    SHORT_TERM_AVERAGE = "short_term_average"
    LONG_TERM_AVERAGE = "long_term_average"

    @property
    def is_averaged(self) -> bool:
        return self in (EnsembleSource.SHORT_TERM_AVERAGE, EnsembleSource.LONG_TERM_AVERAGE)


@dataclass(frozen=True, order=True)
class ConfigKey:
    """Immutable identity of one configuration within a stream.

    Equality and hashing are structural, so two frames with the same
    subsystem, CEPO position, configuration index and source always map
    to the same key.

    Parameters
    ----------
    subsystem_code : str
        Subsystem code reported in the frame header (e.g. ``"2"``).
    cepo_index : int
        Position of the configuration in the command set.
    ss_config_index : int
        Index of the configuration for that subsystem.
    source : EnsembleSource
        Live, playback or one of the averaged streams.
    """
    subsystem_code: str
    cepo_index: int
    ss_config_index: int
    source: EnsembleSource = EnsembleSource.PLAYBACK

    def __post_init__(self):
        object.__setattr__(self, "subsystem_code", str(self.subsystem_code))
        object.__setattr__(self, "cepo_index", int(self.cepo_index))
        object.__setattr__(self, "ss_config_index", int(self.ss_config_index))
        object.__setattr__(self, "source", EnsembleSource(self.source))

    @classmethod
    def from_ensemble(cls, ensemble: "Ensemble", source: EnsembleSource) -> "ConfigKey":
        """Build the key from a frame header.

        Raises
        ------
        ValueError
            If the frame carries no header.
        """
        header = ensemble.ensemble_data
        if header is None:
            raise ValueError("Ensemble has no header; cannot derive configuration key")
        return cls(header.subsystem_code, header.cepo_index, header.ss_config_index, source)

    @property
    def store_id(self) -> tuple:
        """Source-independent identity used to persist options."""
        return (self.subsystem_code, self.cepo_index, self.ss_config_index)

    def with_source(self, source: EnsembleSource) -> "ConfigKey":
        return ConfigKey(self.subsystem_code, self.cepo_index, self.ss_config_index, source)

    @property
    def label(self) -> str:
        return (f"[{self.cepo_index}] SS{self.subsystem_code}"
                f"_{self.ss_config_index} ({self.source.value})")

    def __str__(self):
        return self.label
