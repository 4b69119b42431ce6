"""Coordinated shutdown of the worker pool, ticker and reporter."""

import logging
import threading

from loadreplay.reporter import RateReporter, Ticker
from loadreplay.worker_pool import WorkerPool

logger = logging.getLogger(__name__)


class ShutdownCoordinator:
    """Owns the stop event and tears components down in dependency order.

    shutdown() drains the pool first so that every hit a worker produces is
    queued before the reporter receives STOP.
    """

    def __init__(self, stop_event: threading.Event | None = None, join_timeout: float | None = None):
        self._stop = stop_event or threading.Event()
        self._join_timeout = join_timeout
        self._lock = threading.Lock()
        self._done = False
        self._pool: WorkerPool | None = None
        self._ticker: Ticker | None = None
        self._reporter: RateReporter | None = None

    @property
    def stop_event(self) -> threading.Event:
        return self._stop

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    def attach(self, pool: WorkerPool, ticker: Ticker, reporter: RateReporter):
        self._pool = pool
        self._ticker = ticker
        self._reporter = reporter

    def request_stop(self):
        """Ask every loop to quit without draining the queue (interrupt path)."""
        if not self._stop.is_set():
            logger.info("Stop requested")
        self._stop.set()

    def shutdown(self):
        """Drain workers, then stop ticker and reporter. Runs once."""
        with self._lock:
            if self._done:
                return
            self._done = True

        if self._pool:
            self._pool.close(timeout=self._join_timeout)
        self._stop.set()
        if self._ticker:
            self._ticker.join(timeout=self._join_timeout)
        if self._reporter:
            self._reporter.stop(timeout=self._join_timeout)
        logger.debug("Shutdown complete")
