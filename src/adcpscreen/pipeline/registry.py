"""Concurrent registry of correction pipelines keyed by configuration.

Creates one pipeline the first time a configuration is seen, hands the
same instance to every later caller, and publishes membership changes to
a ``MembershipNotifier`` so observers never touch the map directly.
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional, Tuple

from adcpscreen.ensemble.config_key import ConfigKey
from adcpscreen.pipeline.correction import EnsembleCorrectionPipeline
from adcpscreen.pipeline.events import MembershipEvent
from adcpscreen.pipeline.notifier import MembershipNotifier
from adcpscreen.pipeline.options_store import OptionsStore
from adcpscreen.schemas.options import ScreenOptions

__all__ = ['ConfigRegistry']

logger = logging.getLogger(__name__)


class ConfigRegistry:
    """Thread-safe map from ConfigKey to EnsembleCorrectionPipeline.

    The lock only guards the dictionary. Building a pipeline (which reads
    options from the store) happens outside it, so a slow store lookup for
    one key never blocks lookups of other keys. When two threads race to
    create the same key, the first insert wins and the loser's candidate
    is discarded.

    Parameters
    ----------
    store : OptionsStore, optional
        Source of per-configuration options; new pipelines save changes back.
    notifier : MembershipNotifier, optional
        Receives an event for every actual membership change.
    exclude_averaged : bool
        When True, averaged sources are never registered and ``resolve``
        returns None for them.
    default_options : ScreenOptions, optional
        Options for new pipelines when there is no store.

    Examples
    --------
    >>> registry = ConfigRegistry(store, notifier, exclude_averaged=True)
    >>> pipeline = registry.resolve(key)
    >>> for key, pipeline in registry.active_keys():
    ...     print(key.label, pipeline.stats)
    """

    def __init__(self, store: Optional[OptionsStore] = None,
                 notifier: Optional[MembershipNotifier] = None,
                 exclude_averaged: bool = False,
                 default_options: Optional[ScreenOptions] = None):
        self.store = store
        self.notifier = notifier
        self.exclude_averaged = exclude_averaged
        self.default_options = default_options if default_options is not None else ScreenOptions()
        self._entries: Dict[ConfigKey, EnsembleCorrectionPipeline] = {}
        self._lock = threading.Lock()
        self.stats = {"created": 0, "discarded": 0, "removed": 0}

    def _publish(self, kind: str, keys: Iterable[ConfigKey]) -> None:
        if self.notifier is not None:
            self.notifier.publish(MembershipEvent(kind, tuple(keys)))

    def _is_excluded(self, key: ConfigKey) -> bool:
        return self.exclude_averaged and key.source.is_averaged

    def _create_pipeline(self, key: ConfigKey) -> EnsembleCorrectionPipeline:
        if self.store is not None:
            options = self.store.get_options(key)
        else:
            options = self.default_options
        return EnsembleCorrectionPipeline(key, options, store=self.store)

    def get(self, key: ConfigKey) -> Optional[EnsembleCorrectionPipeline]:
        with self._lock:
            return self._entries.get(key)

    def resolve(self, key: ConfigKey) -> Optional[EnsembleCorrectionPipeline]:
        """Return the pipeline for ``key``, creating it on first sight.

        Returns
        -------
        EnsembleCorrectionPipeline or None
            None only for averaged sources when ``exclude_averaged`` is set.
        """
        if self._is_excluded(key):
            return None

        with self._lock:
            existing = self._entries.get(key)
        if existing is not None:
            return existing

        candidate = self._create_pipeline(key)

        with self._lock:
            existing = self._entries.get(key)
            if existing is None:
                self._entries[key] = candidate
                self.stats["created"] += 1
            else:
                self.stats["discarded"] += 1

        if existing is not None:
            candidate.close()
            return existing

        if self.store is not None:
            self.store.save_options(key, candidate.options)
        logger.info("✓ Configuration registered: %s", key)
        self._publish("added", [key])
        return candidate

    def populate(self, keys: Iterable[ConfigKey]) -> List[ConfigKey]:
        """Register every key not already present. Publishes one event.

        Returns
        -------
        list of ConfigKey
            Keys that were actually added.
        """
        with self._lock:
            missing = [key for key in dict.fromkeys(keys)
                       if key not in self._entries and not self._is_excluded(key)]
        candidates = [(key, self._create_pipeline(key)) for key in missing]

        added = []
        losers = []
        with self._lock:
            for key, pipeline in candidates:
                if key in self._entries:
                    self.stats["discarded"] += 1
                    losers.append(pipeline)
                else:
                    self._entries[key] = pipeline
                    self.stats["created"] += 1
                    added.append(key)

        for pipeline in losers:
            pipeline.close()

        if added:
            logger.info("✓ Registered %d known configurations", len(added))
            self._publish("added", added)
        return added

    def remove(self, key: ConfigKey) -> bool:
        """Remove and close the pipeline for ``key``.

        Idempotent: removing an absent key returns False and publishes
        nothing. An in-flight ``process`` on the pipeline finishes first.
        """
        with self._lock:
            pipeline = self._entries.pop(key, None)
            if pipeline is not None:
                self.stats["removed"] += 1
        if pipeline is None:
            return False

        pipeline.close()
        logger.info("Configuration removed: %s", key)
        self._publish("removed", [key])
        return True

    def clear(self) -> int:
        """Remove every pipeline. Publishes one event if anything was removed."""
        with self._lock:
            removed = list(self._entries.items())
            self._entries.clear()
            self.stats["removed"] += len(removed)

        for _, pipeline in removed:
            pipeline.close()

        if removed:
            logger.info("Registry cleared: %d configurations removed", len(removed))
            self._publish("cleared", [key for key, _ in removed])
        return len(removed)

    def active_keys(self) -> List[Tuple[ConfigKey, EnsembleCorrectionPipeline]]:
        """Point-in-time snapshot of (key, pipeline) pairs in registration order."""
        with self._lock:
            return list(self._entries.items())

    def __len__(self):
        with self._lock:
            return len(self._entries)

    def __contains__(self, key):
        with self._lock:
            return key in self._entries
