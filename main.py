"""Entry point for the access-log replayer."""

import logging
import signal
import sys

from loadreplay.config import ConfigError, load_config
from loadreplay.pump import SourceError
from loadreplay.replayer import Replayer
from loadreplay.shutdown import ShutdownCoordinator

logger = logging.getLogger(__name__)


def install_signal_handlers(coordinator: ShutdownCoordinator):
    """Route SIGINT/SIGTERM to the coordinator's stop request."""

    def signal_handler(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        coordinator.request_stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(argv)
    except ConfigError as e:
        logger.error("%s", e)
        return 1

    logger.info("Access log file: %s", config.log_file)
    logger.info("Concurrent requests: %d", config.concurrency)
    logger.info("Filters: %s", list(config.filters))
    logger.info("Report every: %d seconds", config.report_interval)
    logger.info("Base URL: %s", config.base_url)
    logger.info("Keep cookies: %s", config.keep_cookies)
    logger.info("Verbose output: %s", config.verbose)
    logger.info("Suppress errors: %s", config.suppress_errors)
    logger.info("Repeat after done with log file: %s", config.repeat)

    replayer = Replayer(config)
    install_signal_handlers(replayer.coordinator)

    try:
        replayer.run()
    except SourceError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
