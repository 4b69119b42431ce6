"""Throughput reporting: a ticker thread and a single-threaded event aggregator."""

import logging
import queue
import threading
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class Outcome(Enum):
    HIT = "hit"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Tick:
    interval: int


class _Stop:
    pass


STOP = _Stop()


@dataclass(frozen=True)
class RateSample:
    hits: int
    delta: int
    rate: int

    def __str__(self) -> str:
        return f"{self.rate} req/s"


@dataclass(frozen=True)
class ReplaySummary:
    hits: int = 0
    failures: int = 0
    skipped: int = 0
    lines_read: int = 0
    elapsed_secs: float = 0.0

    @property
    def processed(self) -> int:
        """Lines a worker took off the queue."""
        return self.hits + self.failures + self.skipped

    @property
    def unprocessed(self) -> int:
        """Lines read but never taken by a worker (interrupted runs)."""
        return max(self.lines_read - self.processed, 0)

    @property
    def average_rate(self) -> float:
        return self.hits / max(self.elapsed_secs, 0.001)


def compute_rate(current: int, previous: int, interval: int) -> RateSample:
    """Hits since the previous sample divided by the interval, truncated."""
    delta = current - previous
    return RateSample(hits=current, delta=delta, rate=delta // interval)


class Ticker:
    """Background thread posting a Tick onto the event channel every interval."""

    def __init__(self, events: queue.Queue, interval: float, stop_event: threading.Event):
        self._events = events
        self._interval = interval
        self._stop = stop_event
        self._thread: threading.Thread | None = None

    def start(self):
        self._thread = threading.Thread(target=self._tick_loop, name="ticker", daemon=True)
        self._thread.start()

    def join(self, timeout: float | None = None):
        if self._thread:
            self._thread.join(timeout=timeout)

    def _tick_loop(self):
        while not self._stop.wait(self._interval):
            self._events.put(Tick(self._interval))


class RateReporter:
    """Consumes worker outcomes and ticks from one queue, in one thread.

    Counters are only touched by the reporter thread, so they need no lock.
    The loop ends when it reads STOP, after everything queued before it.
    """

    def __init__(self, events: queue.Queue):
        self._events = events
        self._hits = 0
        self._failures = 0
        self._skipped = 0
        self._previous = 0
        self._last_sample: RateSample | None = None
        self._thread: threading.Thread | None = None

    @property
    def last_sample(self) -> RateSample | None:
        return self._last_sample

    def start(self):
        self._thread = threading.Thread(target=self.run, name="rate-reporter", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None):
        """Post STOP and wait for the loop to drain and exit."""
        self._events.put(STOP)
        if self._thread:
            self._thread.join(timeout=timeout)

    def run(self):
        while True:
            event = self._events.get()
            if event is STOP:
                return
            if isinstance(event, Tick):
                self._report(event.interval)
            elif event is Outcome.HIT:
                self._hits += 1
            elif event is Outcome.FAILED:
                self._failures += 1
            elif event is Outcome.SKIPPED:
                self._skipped += 1
            else:
                logger.warning("Ignoring unknown event %r", event)

    def totals(self, lines_read: int = 0, elapsed_secs: float = 0.0) -> ReplaySummary:
        """Final counters. Only meaningful once the reporter has stopped."""
        return ReplaySummary(
            hits=self._hits,
            failures=self._failures,
            skipped=self._skipped,
            lines_read=lines_read,
            elapsed_secs=elapsed_secs,
        )

    def _report(self, interval: int):
        sample = compute_rate(self._hits, self._previous, interval)
        self._previous = self._hits
        self._last_sample = sample
        logger.info("%s", sample)
