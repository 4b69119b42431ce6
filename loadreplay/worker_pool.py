"""Fixed pool of worker threads replaying log lines from a shared queue."""

import logging
import queue
import threading
from typing import Callable

from loadreplay.config import Config
from loadreplay.extractor import build_url, replayable_path
from loadreplay.reporter import Outcome
from loadreplay.requester import HttpRequester

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.1
# Single hand-off slot: the producer blocks until a worker takes the line.
LINE_QUEUE_SIZE = 1

RequesterFactory = Callable[[Config, int], HttpRequester]


def new_line_queue() -> queue.Queue:
    return queue.Queue(maxsize=LINE_QUEUE_SIZE)


class Worker:
    """One consumer of the line queue, owning one HttpRequester.

    A None item on the queue means end of input. The stop event makes the
    worker quit after the line it is currently processing.
    """

    def __init__(
        self,
        worker_id: int,
        config: Config,
        lines: queue.Queue,
        events: queue.Queue,
        stop_event: threading.Event,
        requester_factory: RequesterFactory = HttpRequester,
    ):
        self.worker_id = worker_id
        self._config = config
        self._lines = lines
        self._events = events
        self._stop = stop_event
        self._requester_factory = requester_factory
        self._thread: threading.Thread | None = None

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        self._thread = threading.Thread(
            target=self.run, name=f"worker-{self.worker_id}", daemon=True
        )
        self._thread.start()

    def join(self, timeout: float | None = None):
        if self._thread:
            self._thread.join(timeout=timeout)

    def run(self):
        requester = self._requester_factory(self._config, self.worker_id)
        try:
            while not self._stop.is_set():
                try:
                    line = self._lines.get(timeout=POLL_INTERVAL)
                except queue.Empty:
                    continue
                if line is None:
                    break
                self._events.put(self.process_line(line, requester))
        finally:
            requester.close()
            logger.debug("Worker %d exiting", self.worker_id)

    def process_line(self, line: str, requester: HttpRequester) -> Outcome:
        """Replay one log line. Failures stay inside this call."""
        path = replayable_path(line, self._config.filters)
        if path is None:
            return Outcome.SKIPPED
        try:
            ok = requester.fetch(build_url(self._config.base_url, path))
        except Exception:
            logger.exception("Worker %d: unexpected error replaying %s", self.worker_id, path)
            return Outcome.FAILED
        return Outcome.HIT if ok else Outcome.FAILED


class WorkerPool:
    """Starts N workers on the shared queues and drains them on close()."""

    def __init__(
        self,
        config: Config,
        lines: queue.Queue,
        events: queue.Queue,
        stop_event: threading.Event,
        requester_factory: RequesterFactory = HttpRequester,
    ):
        self._lines = lines
        self._stop = stop_event
        self._workers = [
            Worker(i, config, lines, events, stop_event, requester_factory)
            for i in range(config.concurrency)
        ]

    def __len__(self) -> int:
        return len(self._workers)

    @property
    def alive(self) -> int:
        return sum(1 for w in self._workers if w.is_alive)

    def start(self):
        for worker in self._workers:
            worker.start()
        logger.info("Started %d workers", len(self._workers))

    def close(self, timeout: float | None = None):
        """Send one end-of-input marker per worker, then join them all.

        Lines already handed off are processed before the markers. If the
        stop event is set, workers quit on their own and no markers are sent.
        """
        for _ in self._workers:
            if not self._offer(None):
                break
        for worker in self._workers:
            worker.join(timeout=timeout)

    def _offer(self, item) -> bool:
        while not self._stop.is_set() and self.alive:
            try:
                self._lines.put(item, timeout=POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False
