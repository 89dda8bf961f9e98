"""Multi-threaded screening orchestration.

Wires the options store, registry, membership notifier, router, writer
and playback source together, runs them until the source is exhausted,
and shuts everything down.
"""

import queue
import time
import logging
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from adcpscreen.ensemble.config_key import EnsembleSource
from adcpscreen.ensemble.playback import PlaybackSource
from adcpscreen.pipeline.events import MembershipEvent
from adcpscreen.pipeline.notifier import MembershipNotifier
from adcpscreen.pipeline.options_store import OptionsStore
from adcpscreen.pipeline.registry import ConfigRegistry
from adcpscreen.pipeline.router import StreamRouter
from adcpscreen.pipeline.writer import EnsembleWriter
from adcpscreen.setup_directories import get_corrected_path, get_log_path, setup_output_directories

if TYPE_CHECKING:
    from adcpscreen.schemas import InternalConfig

__all__ = ['ScreeningOrchestrator']

logger = logging.getLogger(__name__)


class ScreeningOrchestrator:
    """Runs the screening pipeline over one frame source.

    **Threads:**

    1. **PlaybackSource**: reads frames and calls ``StreamRouter.on_ensemble``.
       Correction runs on this producer thread.
    2. **MembershipNotifier**: the single observer context; keeps
       ``membership`` (the list of visible configurations) up to date.
    3. **EnsembleWriter**: appends corrected frames to the output file.

    **Configuration store:**

    Per-configuration options live in an SQLite ``OptionsStore`` under the
    ``options`` output directory. On start the registry is pre-populated
    with every configuration known to the store (the same path a project
    change takes).

    Example usage::

        config = resolve_config(ParamConfig(), UserConfig(input_file="run.jsonl"))
        orch = ScreeningOrchestrator(config)
        orch.start()
        print(orch.get_summary())
    """

    def __init__(self, config: "InternalConfig"):
        self.config = config
        self.source = EnsembleSource(config.playback.source)
        self.output_dirs = None

        self.store = None
        self.notifier = None
        self.registry = None
        self.router = None
        self.writer = None
        self.playback = None
        self.output_queue = None

        # Observer-visible list of configurations; only the notifier thread mutates it
        self.membership = []

        self._stop_event = False
        self._start_time = None
        self._max_duration = None
        self._summary = {}

    def _setup_logging(self):
        """Configure root logging with file and console handlers."""
        log_level = getattr(logging, self.config.logging.level.upper(), logging.INFO)

        if self.config.output_dirs:
            self.output_dirs = {k: Path(v) for k, v in self.config.output_dirs.items()}
        else:
            self.output_dirs = setup_output_directories(self.config.base_dir)

        log_path = get_log_path(self.output_dirs, self.config.playback.input_file)

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Clear existing handlers and add new ones
        root = logging.getLogger()
        root.setLevel(log_level)
        for handler in root.handlers[:]:
            root.removeHandler(handler)

        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

        ch = logging.StreamHandler()
        ch.setLevel(log_level)
        ch.setFormatter(formatter)
        root.addHandler(ch)

        logger.info("Logging: level=%s, file=%s", self.config.logging.level, log_path)

    def _on_membership(self, event: MembershipEvent):
        """Observer callback; runs on the notifier thread."""
        if event.kind == "added":
            self.membership.extend(k for k in event.keys if k not in self.membership)
        else:
            self.membership = [k for k in self.membership if k not in event.keys]
        logger.info("Configurations (%s): %s", event.kind,
                    ", ".join(k.label for k in self.membership) or "none")

    def _build(self):
        """Create store, notifier, registry, router and writer."""
        db_path = self.output_dirs["options"] / self.config.output.options_db_filename
        self.store = OptionsStore(db_path, default_options=self.config.screening)

        self.notifier = MembershipNotifier()
        self.notifier.subscribe(self._on_membership)

        self.registry = ConfigRegistry(
            store=self.store,
            notifier=self.notifier,
            exclude_averaged=self.config.registry.exclude_averaged,
            default_options=self.config.screening,
        )

        if self.config.output.write_corrected:
            self.output_queue = queue.Queue(maxsize=self.config.output.max_queue_size)
            output_path = get_corrected_path(
                self.output_dirs, self.config.playback.input_file,
                self.config.output.corrected_suffix)
            self.writer = EnsembleWriter(self.output_queue, output_path)

        self.router = StreamRouter(self.registry, source=self.source,
                                   output_queue=self.output_queue)

    def start(self, max_runtime: Optional[int] = None):
        """Start the pipeline and block until the source is exhausted.

        Parameters
        ----------
        max_runtime : int, optional
            Maximum runtime in minutes. If None, runs until the playback
            file is exhausted or KeyboardInterrupt (Ctrl+C).

        Raises
        ------
        ValueError
            If no input file is configured.
        """
        if not self.config.playback.input_file:
            raise ValueError("playback.input_file is required to start the pipeline")

        self._setup_logging()

        logger.info("=" * 60)
        logger.info("Starting ADCP Screening Pipeline")
        logger.info("=" * 60)

        self._start_time = time.time()
        self._max_duration = max_runtime * 60 if max_runtime else None

        self._build()

        self.notifier.start()
        logger.info("✓ Notifier started")

        if self.writer:
            self.writer.start()
            logger.info("✓ Writer started")

        if self.config.registry.restore_known_configs:
            self.router.on_project_changed(self.store.known_configs(self.source))

        self.playback = PlaybackSource(
            self.config.playback.input_file,
            self.router.on_ensemble,
            source=self.source,
            pace_seconds=self.config.playback.pace_seconds,
        )
        self.playback.start()
        logger.info("✓ Playback started")

        try:
            self._main_loop()
        except KeyboardInterrupt:
            logger.info("Shutdown signal received (Ctrl+C)")
        finally:
            self.stop()

    def _main_loop(self):
        """Wait for the source, logging status periodically."""
        interval = self.config.orchestrator.status_interval_sec
        while self.playback.is_alive():
            self.playback.join(timeout=interval)
            self._log_status()

            if self._max_duration:
                elapsed = time.time() - self._start_time
                if elapsed > self._max_duration:
                    logger.info("Max duration reached")
                    break

    def _drain_queue(self, q: queue.Queue, name: str, timeout: float):
        """Wait for queue to drain with timeout."""
        start_time = time.time()
        while q.unfinished_tasks > 0:
            if time.time() - start_time > timeout:
                logger.warning("%s queue drain timeout: %d remaining", name, q.qsize())
                return
            time.sleep(0.1)

    def stop(self):
        """Stop all threads, close pipelines and the store. Safe to call twice."""
        if self._stop_event:
            return
        self._stop_event = True
        logger.info("Stopping pipeline...")

        if self.playback and self.playback.is_alive():
            self.playback.stop()
            self.playback.join(timeout=5)
            if self.playback.is_alive():
                logger.warning("Playback did not stop cleanly")

        if self.writer and self.writer.is_alive():
            self._drain_queue(self.output_queue, "writer", self.config.orchestrator.drain_timeout_sec)
            self.writer.stop()
            self.writer.join(timeout=5)
            if self.writer.is_alive():
                logger.warning("Writer did not stop cleanly")

        self._summary = self._collect_summary()

        if self.registry:
            self.registry.clear()

        if self.notifier and self.notifier.is_alive():
            self.notifier.stop()
            self.notifier.join(timeout=5)
            if self.notifier.is_alive():
                logger.warning("Notifier did not stop cleanly")

        if self.store:
            self.store.close()

        elapsed = time.time() - self._start_time if self._start_time else 0
        logger.info("=" * 60)
        logger.info("Pipeline stopped. Runtime: %.1f seconds", elapsed)
        logger.info("Statistics: received=%d, routed=%d, excluded=%d, failed=%d, configurations=%d",
                    self._summary.get("received", 0), self._summary.get("routed", 0),
                    self._summary.get("excluded", 0), self._summary.get("failed", 0),
                    len(self._summary.get("configurations", [])))
        logger.info("=" * 60)

    def _collect_summary(self) -> dict:
        summary = self.router.get_stats() if self.router else {}
        summary["written"] = self.writer.written if self.writer else 0
        summary["skipped_records"] = self.playback.skipped if self.playback else 0
        summary["configurations"] = []
        if self.registry:
            for key, pipeline in self.registry.active_keys():
                summary["configurations"].append({
                    "key": key.label,
                    "processed": pipeline.stats["processed"],
                    "stage_failures": pipeline.stats["stage_failures"],
                })
        return summary

    def get_summary(self) -> dict:
        """Counters collected at shutdown."""
        return dict(self._summary)

    def _log_status(self):
        """Log current pipeline status."""
        stats = self.router.get_stats()
        logger.info(
            "Status: P=%s W=%s N=%s recv=%d routed=%d failed=%d configs=%d Q=%d",
            "✓" if self.playback and self.playback.is_alive() else "✗",
            "✓" if self.writer and self.writer.is_alive() else "✗",
            "✓" if self.notifier and self.notifier.is_alive() else "✗",
            stats["received"],
            stats["routed"],
            stats["failed"] + stats["contract_violations"],
            len(self.registry),
            self.output_queue.qsize() if self.output_queue else 0,
        )
