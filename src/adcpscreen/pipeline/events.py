"""Registry membership events."""

from dataclasses import dataclass
from typing import Literal, Tuple

from adcpscreen.ensemble.config_key import ConfigKey

__all__ = ['MembershipEvent']


@dataclass(frozen=True)
class MembershipEvent:
    """A change in the set of registered configurations.

    Attributes
    ----------
    kind : {"added", "removed", "cleared"}
    keys : tuple of ConfigKey
        Keys added or removed by this change.
    """
    kind: Literal["added", "removed", "cleared"]
    keys: Tuple[ConfigKey, ...]
