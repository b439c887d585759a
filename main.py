"""Entry point for the log truck daemon."""

import logging
import signal
import sys
import threading

from log_truck.config import ConfigError, load_config
from log_truck.dashboard import create_dashboard_app, run_dashboard
from log_truck.listener import ListenerError
from log_truck.pipeline import LogTruck


def main(argv=None):
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
        stream=sys.stderr,
    )
    logger = logging.getLogger(__name__)

    try:
        config = load_config(argv)
    except ConfigError as exc:
        logger.critical("invalid configuration: %s", exc)
        sys.exit(2)
    logging.getLogger().setLevel(config.log_level.upper())

    shutdown_event = threading.Event()
    truck = LogTruck(config, shutdown_event)

    def signal_handler(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        shutdown_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    if config.dashboard_port:
        app = create_dashboard_app(truck.stats)
        dash_thread = threading.Thread(target=run_dashboard, args=(app, config.dashboard_port), daemon=True)
        dash_thread.start()
        logger.info("Dashboard running on port %d", config.dashboard_port)

    logger.info("shipping to elasticsearch at %s", config.elasticsearch_addr)
    try:
        truck.run()
    except ListenerError as exc:
        logger.critical("%s", exc)
        sys.exit(1)
    finally:
        truck.stop()


if __name__ == "__main__":
    main()
