"""Single-consumer delivery of registry membership changes.

Producers publish from any thread. Observers (e.g. a list of
per-configuration views) are only ever called from one context: the
notifier thread when it is running, or whichever owner calls
``process_pending``.
"""

import logging
import queue
import threading
from typing import Callable, List

from adcpscreen.pipeline.events import MembershipEvent

__all__ = ['MembershipNotifier']

logger = logging.getLogger(__name__)

Observer = Callable[[MembershipEvent], None]


class MembershipNotifier(threading.Thread):
    """Observer thread for membership events.

    Parameters
    ----------
    poll_interval : float
        Seconds to block on the event queue before checking for stop.

    Examples
    --------
    >>> notifier = MembershipNotifier()
    >>> notifier.subscribe(lambda event: print(event.kind, event.keys))
    >>> notifier.start()
    >>> registry = ConfigRegistry(notifier=notifier)
    """

    def __init__(self, poll_interval: float = 0.5, name: str = "MembershipNotifier"):
        super().__init__(name=name, daemon=True)
        self.poll_interval = poll_interval
        self._events: "queue.Queue[MembershipEvent]" = queue.Queue()
        self._observers: List[Observer] = []
        self._observers_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._count_lock = threading.Lock()
        self.published = 0
        self.delivered = 0

    def subscribe(self, observer: Observer) -> None:
        with self._observers_lock:
            self._observers.append(observer)

    def unsubscribe(self, observer: Observer) -> None:
        with self._observers_lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def publish(self, event: MembershipEvent) -> None:
        """Queue an event. Safe from any thread; never calls observers."""
        self._events.put(event)
        with self._count_lock:
            self.published += 1

    def _dispatch(self, event: MembershipEvent) -> None:
        with self._observers_lock:
            observers = list(self._observers)
        for observer in observers:
            try:
                observer(event)
            except Exception:
                logger.exception("Membership observer failed on %s event", event.kind)
        self.delivered += 1

    def process_pending(self) -> int:
        """Deliver every queued event on the calling thread.

        For owners that pump events themselves instead of starting the
        thread. Returns the number of events delivered.
        """
        count = 0
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                return count
            try:
                self._dispatch(event)
                count += 1
            finally:
                self._events.task_done()

    def pending(self) -> int:
        return self._events.qsize()

    def stop(self):
        """Signal the thread to stop after delivering what is queued."""
        self._stop_event.set()

    def stopped(self):
        return self._stop_event.is_set()

    def run(self):
        logger.info("Membership notifier started")
        while not (self.stopped() and self._events.empty()):
            try:
                event = self._events.get(timeout=self.poll_interval)
            except queue.Empty:
                continue
            try:
                self._dispatch(event)
            finally:
                self._events.task_done()
        logger.info("Membership notifier stopped (%d events delivered)", self.delivered)
