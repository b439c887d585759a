"""LogTruck — wires listener, decoder, queue and delivery worker together."""

import logging
import threading
from datetime import datetime
from typing import Callable

import requests

from log_truck.config import Config
from log_truck.decoder import Decoder, local_now
from log_truck.event_queue import EventQueue
from log_truck.listener import UDPListener
from log_truck.metrics import Metrics
from log_truck.worker import DeliveryWorker

logger = logging.getLogger(__name__)


class LogTruck:
    """One independent ingest -> deliver pipeline.

    The listener (with inline decoding) and the delivery worker each run on
    their own thread; the bounded queue is the only thing they share.
    Events still queued at shutdown, and any event the listener is waiting
    to push onto a full queue, are discarded.
    """

    def __init__(self, config: Config, shutdown_event: threading.Event,
                 session: requests.Session | None = None, clock: Callable[[], datetime] = local_now):
        self._config = config
        self._shutdown = shutdown_event
        self.metrics = Metrics()
        self.queue = EventQueue(config.queue_size)
        self.decoder = Decoder(self.queue, self.metrics, clock=clock, shutdown_event=shutdown_event)
        self.listener = UDPListener(
            config.listen_addr, self.decoder, shutdown_event,
            buffer_size=config.buffer_size, metrics=self.metrics,
        )
        self.worker = DeliveryWorker(
            config.elasticsearch_addr, self.queue, shutdown_event,
            session=session, request_timeout=config.request_timeout, metrics=self.metrics,
        )
        self._worker_thread = None

    def start_worker(self):
        self._worker_thread = threading.Thread(target=self.worker.run, name="delivery-worker", daemon=True)
        self._worker_thread.start()

    def run(self):
        """Bind, start the worker, and receive in the calling thread until shutdown."""
        self.listener.bind()
        self.start_worker()
        self.listener.start()

    def stop(self):
        self._shutdown.set()
        self.listener.stop()
        if self._worker_thread is not None:
            self._worker_thread.join(timeout=5)
        self.worker.close()
        dropped = self.queue.depth
        if dropped:
            logger.warning("Discarding %d undelivered events", dropped)
        logger.info("log truck stopped. Stats: %s", self.metrics.snapshot())

    def stats(self) -> dict:
        snap = self.metrics.snapshot()
        snap["queue_depth"] = self.queue.depth
        snap["queue_capacity"] = self.queue.capacity
        return snap
