"""Routes arriving ensembles to their configuration's pipeline."""

import logging
import queue
import threading
from typing import Iterable, Optional

from adcpscreen.contracts import ContractViolation, assert_ensemble_consistent
from adcpscreen.ensemble.config_key import ConfigKey, EnsembleSource
from adcpscreen.ensemble.ensemble import Ensemble
from adcpscreen.pipeline.registry import ConfigRegistry

__all__ = ['StreamRouter']

logger = logging.getLogger(__name__)


class StreamRouter:
    """Entry point for frame-arrival, project-change and close signals.

    ``on_ensemble`` runs on whichever producer thread delivered the frame.
    It derives the key, resolves the pipeline and processes the frame
    there; only membership changes go through the notifier thread.

    A failure on one frame is logged and counted; the frame is still
    forwarded (uncorrected where the failure happened) and the stream
    keeps flowing.

    Parameters
    ----------
    registry : ConfigRegistry
    source : EnsembleSource
        Source assumed when a producer does not tag its frames.
    output_queue : queue.Queue, optional
        Receives every frame after routing.
    """

    def __init__(self, registry: ConfigRegistry,
                 source: EnsembleSource = EnsembleSource.PLAYBACK,
                 output_queue: Optional[queue.Queue] = None):
        self.registry = registry
        self.source = EnsembleSource(source)
        self.output_queue = output_queue
        self._stats_lock = threading.Lock()
        self.stats = {
            "received": 0,
            "routed": 0,
            "excluded": 0,
            "failed": 0,
            "contract_violations": 0,
        }

    def _count(self, name: str) -> None:
        with self._stats_lock:
            self.stats[name] += 1

    def get_stats(self) -> dict:
        with self._stats_lock:
            return dict(self.stats)

    def on_ensemble(self, ensemble: Ensemble, source: Optional[EnsembleSource] = None) -> Ensemble:
        """Correct one frame and forward it.

        Returns
        -------
        Ensemble
            The same frame object, corrected when routing succeeded.
        """
        self._count("received")
        source = EnsembleSource(source) if source is not None else self.source

        try:
            assert_ensemble_consistent(ensemble)
            key = ConfigKey.from_ensemble(ensemble, source)
            pipeline = self.registry.resolve(key)
            if pipeline is None:
                self._count("excluded")
            else:
                pipeline.process(ensemble)
                self._count("routed")
        except ContractViolation as e:
            self._count("contract_violations")
            logger.critical("Frame contract violated, ensemble forwarded uncorrected: %s", e)
        except Exception:
            self._count("failed")
            logger.exception("Failed to route ensemble; forwarded uncorrected")

        if self.output_queue is not None:
            self.output_queue.put(ensemble)
        return ensemble

    def on_project_changed(self, known_keys: Iterable[ConfigKey]) -> None:
        """Drop every configuration, then register the project's known ones."""
        removed = self.registry.clear()
        added = self.registry.populate(known_keys)
        logger.info("Project changed: %d configurations dropped, %d restored",
                    removed, len(added))

    def on_close(self, key: ConfigKey) -> bool:
        """Close one configuration (e.g. its view was closed)."""
        return self.registry.remove(key)
