"""JSON-lines representation of ensembles.

Each line holds one frame as a JSON object with one entry per present
sub-record. Arrays are stored as nested lists.
"""

import json
import logging
from dataclasses import fields
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator

import numpy as np

from adcpscreen.ensemble.ensemble import (
    AncillaryData,
    BottomTrackData,
    Ensemble,
    EnsembleData,
    NmeaData,
    WaterMassData,
    WaterProfileData,
)

__all__ = ['ensemble_to_dict', 'ensemble_from_dict', 'read_ensembles', 'write_ensembles']

logger = logging.getLogger(__name__)

RECORD_TYPES = {
    "ensemble_data": EnsembleData,
    "ancillary": AncillaryData,
    "bottom_track": BottomTrackData,
    "water_profile": WaterProfileData,
    "water_mass": WaterMassData,
    "nmea": NmeaData,
}


def _to_json_value(value):
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, np.generic):
        return value.item()
    return value


def ensemble_to_dict(ensemble: Ensemble) -> dict:
    """Convert a frame to a JSON-compatible dict. Absent sub-records are omitted."""
    record = {}
    for name in RECORD_TYPES:
        sub = getattr(ensemble, name)
        if sub is None:
            continue
        record[name] = {f.name: _to_json_value(getattr(sub, f.name)) for f in fields(sub)}
    return record


def ensemble_from_dict(record: dict) -> Ensemble:
    """Build a frame from ``ensemble_to_dict`` output.

    Raises
    ------
    TypeError
        If a sub-record has unknown or missing fields.
    ValueError
        If a top-level key is not a known sub-record.
    """
    unknown = set(record) - set(RECORD_TYPES)
    if unknown:
        raise ValueError(f"Unknown ensemble sub-records: {sorted(unknown)}")

    kwargs = {}
    for name, record_type in RECORD_TYPES.items():
        if record.get(name) is not None:
            kwargs[name] = record_type(**record[name])
    return Ensemble(**kwargs)


def read_ensembles(path) -> Iterator[Ensemble]:
    """Yield frames from a JSONL file, skipping blank lines."""
    with open(path, "r") as fh:
        for line in fh:
            line = line.strip()
            if line:
                yield ensemble_from_dict(json.loads(line))


def write_ensembles(path, ensembles: Iterable[Ensemble], append: bool = False) -> int:
    """Write frames to a JSONL file. Returns the number written."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with open(path, "a" if append else "w") as fh:
        for ensemble in ensembles:
            fh.write(json.dumps(ensemble_to_dict(ensemble)) + "\n")
            count += 1
    logger.debug("Wrote %d ensembles to %s", count, path)
    return count
