"""Ingestion pump: reads the access log and hands lines to the workers."""

import logging
import queue
import threading

logger = logging.getLogger(__name__)

PUT_TIMEOUT = 0.1


class SourceError(Exception):
    """The log source could not be opened or read."""


class IngestionPump:
    """Pushes every line of a file onto the line queue, in file order.

    put() blocks while the queue is full, so reading runs at the pace the
    workers accept lines. With repeat the file is read again from the top
    after each pass, until the stop event is set.
    """

    def __init__(
        self,
        path: str,
        lines: queue.Queue,
        stop_event: threading.Event,
        repeat: bool = False,
    ):
        self._path = path
        self._lines = lines
        self._stop = stop_event
        self._repeat = repeat
        self._pushed = 0
        self._passes = 0

    @property
    def pushed(self) -> int:
        return self._pushed

    @property
    def passes(self) -> int:
        return self._passes

    def run(self) -> int:
        """Read the source once, or until stopped if repeating. Returns lines pushed."""
        while not self._stop.is_set():
            count = self._read_pass()
            self._passes += 1
            logger.debug("Pass %d over %s: %d lines", self._passes, self._path, count)
            if not self._repeat:
                break
            if count == 0:
                logger.warning("No lines in %s, not repeating", self._path)
                break
        return self._pushed

    def _read_pass(self) -> int:
        count = 0
        try:
            with open(self._path, "r", encoding="utf-8", errors="replace") as f:
                for line in f:
                    if not self._push(line.rstrip("\r\n")):
                        break
                    count += 1
        except OSError as e:
            raise SourceError(f"Cannot read log file {self._path}: {e}") from e
        return count

    def _push(self, line: str) -> bool:
        while not self._stop.is_set():
            try:
                self._lines.put(line, timeout=PUT_TIMEOUT)
            except queue.Full:
                continue
            self._pushed += 1
            return True
        return False
