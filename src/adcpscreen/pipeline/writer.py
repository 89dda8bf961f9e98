"""Writer thread for corrected ensembles."""

import json
import logging
import queue
import threading
from pathlib import Path

from adcpscreen.ensemble.serialization import ensemble_to_dict

__all__ = ['EnsembleWriter']

logger = logging.getLogger(__name__)


class EnsembleWriter(threading.Thread):
    """Appends corrected frames from a queue to a JSONL file.

    Parameters
    ----------
    input_queue : queue.Queue
        Frames forwarded by the router.
    output_path : str or Path
        File to append to. Parent directories are created.
    """

    def __init__(self, input_queue: queue.Queue, output_path, name: str = "EnsembleWriter"):
        super().__init__(name=name, daemon=True)
        self.input_queue = input_queue
        self.output_path = Path(output_path)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.written = 0
        self.failed = 0
        self._stop_event = threading.Event()

    def stop(self):
        """Signal the thread to stop."""
        self._stop_event.set()

    def stopped(self):
        return self._stop_event.is_set()

    def run(self):
        """Main writer loop (runs in thread)."""
        logger.info("Writer started: %s", self.output_path)

        with open(self.output_path, "a") as fh:
            while not self.stopped():
                try:
                    ensemble = self.input_queue.get(timeout=1)
                except queue.Empty:
                    continue

                try:
                    fh.write(json.dumps(ensemble_to_dict(ensemble)) + "\n")
                    fh.flush()
                    self.written += 1
                except (TypeError, ValueError, OSError):
                    self.failed += 1
                    logger.exception("Failed to write ensemble")
                finally:
                    self.input_queue.task_done()

        logger.info("Writer stopped: %d written, %d failed", self.written, self.failed)
