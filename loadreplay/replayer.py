"""Wires pump, worker pool and reporter into one replay run."""

import logging
import queue
import threading
import time

from loadreplay.config import Config
from loadreplay.pump import IngestionPump
from loadreplay.reporter import RateReporter, ReplaySummary, Ticker
from loadreplay.requester import HttpRequester
from loadreplay.shutdown import ShutdownCoordinator
from loadreplay.worker_pool import RequesterFactory, WorkerPool, new_line_queue

logger = logging.getLogger(__name__)


class Replayer:
    """Pump -> line queue -> N workers -> event queue -> reporter.

    run() always ends with the coordinated shutdown, including when the
    source cannot be read.
    """

    def __init__(
        self,
        config: Config,
        stop_event: threading.Event | None = None,
        requester_factory: RequesterFactory = HttpRequester,
    ):
        self._config = config
        self._coordinator = ShutdownCoordinator(stop_event)
        self._lines = new_line_queue()
        self._events: queue.Queue = queue.Queue()

        stop = self._coordinator.stop_event
        self._pool = WorkerPool(config, self._lines, self._events, stop, requester_factory)
        self._ticker = Ticker(self._events, config.report_interval, stop)
        self._reporter = RateReporter(self._events)
        self._pump = IngestionPump(config.log_file, self._lines, stop, repeat=config.repeat)
        self._coordinator.attach(self._pool, self._ticker, self._reporter)

    @property
    def coordinator(self) -> ShutdownCoordinator:
        return self._coordinator

    @property
    def reporter(self) -> RateReporter:
        return self._reporter

    def run(self) -> ReplaySummary:
        start = time.monotonic()
        self._reporter.start()
        self._ticker.start()
        self._pool.start()
        try:
            self._pump.run()
        finally:
            self._coordinator.shutdown()

        summary = self._reporter.totals(
            lines_read=self._pump.pushed, elapsed_secs=time.monotonic() - start
        )
        logger.info(
            "Replay finished: lines=%d hits=%d failed=%d skipped=%d avg=%.1f req/s",
            summary.lines_read, summary.hits, summary.failures,
            summary.skipped, summary.average_rate,
        )
        if summary.unprocessed:
            logger.warning(
                "%d lines were read but not replayed before the stop", summary.unprocessed
            )
        return summary
