"""Delivery worker — drains the event queue into Elasticsearch over HTTP."""

import enum
import json
import logging
import queue
import threading

import requests

from log_truck.event import Event
from log_truck.event_queue import EventQueue
from log_truck.metrics import Metrics

logger = logging.getLogger(__name__)


class DeliveryResult(enum.Enum):
    DELIVERED = "delivered"
    REJECTED = "rejected"
    FAILED = "failed"
    DROPPED = "dropped"


class DeliveryWorker:
    """Single consumer that POSTs one event at a time, in queue order.

    Every per-event failure is logged and the event dropped; there is no
    retry and no requeue. ``request_timeout=None`` lets a hung backend stall
    the worker, which in turn fills the queue and blocks the listener.
    """

    def __init__(self, elasticsearch_addr: str, queue: EventQueue, shutdown_event: threading.Event,
                 session: requests.Session | None = None, request_timeout: float | None = None,
                 metrics: Metrics | None = None, poll_interval: float = 1.0):
        self._base_url = f"http://{elasticsearch_addr}"
        self._queue = queue
        self._shutdown = shutdown_event
        self._session = session or requests.Session()
        self._request_timeout = request_timeout
        self._metrics = metrics or Metrics()
        self._poll_interval = poll_interval

    def url_for(self, event: Event) -> str:
        return self._base_url + event.url_path

    def run(self):
        """Deliver events until the shutdown event is set."""
        while not self._shutdown.is_set():
            try:
                event = self._queue.pop(timeout=self._poll_interval)
            except queue.Empty:
                continue
            result = self.deliver(event)
            self._metrics.increment(result.value)

    def deliver(self, event: Event) -> DeliveryResult:
        """Make one delivery attempt for an event."""
        try:
            body = json.dumps(event.fields, allow_nan=False)
        except (TypeError, ValueError, RecursionError) as exc:
            logger.error("invalid payload: %s", exc)
            return DeliveryResult.DROPPED

        url = self.url_for(event)
        try:
            with self._session.post(
                url,
                data=body.encode("utf-8"),
                headers={"Content-Type": "application/json"},
                timeout=self._request_timeout,
            ) as resp:
                if resp.status_code == 201:
                    return DeliveryResult.DELIVERED
                self._log_unexpected(resp)
                return DeliveryResult.REJECTED
        except requests.RequestException as exc:
            logger.error("unable to write payload to elasticsearch: %s", exc)
            return DeliveryResult.FAILED

    @staticmethod
    def _log_unexpected(resp: requests.Response):
        try:
            rdata = resp.json()
        except (ValueError, RecursionError) as exc:
            logger.warning("unable to decode response body (status %d): %s", resp.status_code, exc)
            return
        logger.warning("unexpected status code %d for response: %s", resp.status_code, rdata)

    def close(self):
        self._session.close()
