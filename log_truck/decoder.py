"""Decoder — turns raw datagrams into Events and queues them for delivery."""

import json
import logging
import queue
import threading
from datetime import datetime
from typing import Callable

from log_truck.event import DEFAULT_TYPE, SCHEMA_VERSION, Event, index_for, rfc3339
from log_truck.event_queue import EventQueue
from log_truck.metrics import Metrics

logger = logging.getLogger(__name__)


def local_now() -> datetime:
    return datetime.now().astimezone()


def parse_host(peer) -> str:
    """Reduce a peer address to its bare host.

    Accepts the address tuple returned by ``recvfrom`` or a string in
    ``host:port``, ``[v6]:port`` or bare IPv6 form.
    """
    if isinstance(peer, tuple):
        return str(peer[0])
    peer = str(peer)
    if peer.startswith("["):
        end = peer.find("]")
        if end != -1:
            return peer[1:end]
    if peer.count(":") == 1:
        return peer.rpartition(":")[0]
    return peer


def parse_fields(data: bytes) -> tuple[dict, bool]:
    """Return (fields, structured) for a datagram payload.

    A payload that parses to a JSON object is used as-is; anything else
    becomes ``{"message": text}``.
    """
    text = data.decode("utf-8", errors="replace")
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        parsed = None
    if isinstance(parsed, dict):
        return parsed, True
    return {"message": text}, False


class Decoder:
    """Builds Events and pushes them onto the queue.

    With a ``shutdown_event`` a push on a full queue waits in
    ``poll_interval`` slices and gives up once shutdown is set, discarding
    the event; without one it blocks until a slot frees.
    """

    def __init__(self, queue: EventQueue, metrics: Metrics | None = None,
                 clock: Callable[[], datetime] = local_now,
                 shutdown_event: threading.Event | None = None, poll_interval: float = 0.5):
        self._queue = queue
        self._metrics = metrics or Metrics()
        self._clock = clock
        self._shutdown = shutdown_event
        self._poll_interval = poll_interval

    def build(self, host: str, data: bytes) -> Event:
        """Build an Event from a payload without queueing it."""
        fields, structured = parse_fields(data)
        if structured:
            self._metrics.increment("structured")
        else:
            self._metrics.increment("raw")
            logger.debug("Payload from %s is not a JSON object, wrapping as message", host)

        now = self._clock()
        fields["host"] = host
        fields["@timestamp"] = rfc3339(now)
        fields["@version"] = SCHEMA_VERSION
        return Event(target_index=index_for(now), target_type=DEFAULT_TYPE, fields=fields)

    def decode(self, host: str, data: bytes) -> Event:
        """Build an Event and push it, blocking while the queue is full."""
        event = self.build(host, data)
        if self._shutdown is None:
            self._queue.push(event)
            return event

        while not self._shutdown.is_set():
            try:
                self._queue.push(event, timeout=self._poll_interval)
                return event
            except queue.Full:
                continue
        self._metrics.increment("dropped")
        logger.warning("Shutting down with a full queue, discarding event from %s", host)
        return event
