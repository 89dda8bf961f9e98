"""File playback source.

Replays a JSONL ensemble file on its own thread and hands every frame to
a callback, the same way a live capture would.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Callable

from adcpscreen.ensemble.config_key import EnsembleSource
from adcpscreen.ensemble.ensemble import Ensemble
from adcpscreen.ensemble.serialization import ensemble_from_dict

__all__ = ['PlaybackSource']

logger = logging.getLogger(__name__)


class PlaybackSource(threading.Thread):
    """Producer thread that replays recorded ensembles.

    Parameters
    ----------
    path : str or Path
        JSONL file written by ``write_ensembles`` or ``EnsembleWriter``.
    on_ensemble : callable
        Called as ``on_ensemble(ensemble, source)`` for every frame, on this
        thread. Typically ``StreamRouter.on_ensemble``.
    source : EnsembleSource
        Source tag attached to every frame.
    pace_seconds : float
        Delay between frames. 0 replays as fast as possible.
    """

    def __init__(self, path, on_ensemble: Callable[[Ensemble, EnsembleSource], object],
                 source: EnsembleSource = EnsembleSource.PLAYBACK,
                 pace_seconds: float = 0.0, name: str = "PlaybackSource"):
        super().__init__(name=name, daemon=True)
        self.path = Path(path)
        self.on_ensemble = on_ensemble
        self.source = EnsembleSource(source)
        self.pace_seconds = pace_seconds
        self.emitted = 0
        self.skipped = 0
        self.finished = False
        self._stop_event = threading.Event()

    def stop(self):
        """Stop after the current frame."""
        self._stop_event.set()

    def stopped(self):
        return self._stop_event.is_set()

    def run(self):
        logger.info("Playback started: %s (%s)", self.path, self.source.value)
        try:
            with open(self.path, "rb") as fh:
                for line_no, line in enumerate(fh, start=1):
                    if self.stopped():
                        break
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        ensemble = ensemble_from_dict(json.loads(line.decode("utf-8")))
                    except (UnicodeDecodeError, ValueError, TypeError) as e:
                        self.skipped += 1
                        logger.warning("Skipping malformed record %s:%d: %s",
                                       self.path.name, line_no, e)
                        continue

                    self.on_ensemble(ensemble, self.source)
                    self.emitted += 1

                    if self.pace_seconds > 0:
                        self._stop_event.wait(self.pace_seconds)
        except OSError:
            logger.exception("Playback failed to read %s", self.path)
        finally:
            self.finished = True
            logger.info("Playback finished: %d ensembles, %d skipped", self.emitted, self.skipped)
