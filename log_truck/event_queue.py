"""Bounded FIFO buffer between the listener and the delivery worker."""

import queue

from log_truck.event import Event

DEFAULT_CAPACITY = 10000


class EventQueue:
    """Thread-safe bounded FIFO of Events.

    ``push`` blocks while the queue is full and ``pop`` blocks while it is
    empty. With a timeout they raise ``queue.Full`` / ``queue.Empty``
    instead of waiting forever.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._queue: queue.Queue[Event] = queue.Queue(maxsize=capacity)

    def push(self, event: Event, timeout: float | None = None):
        self._queue.put(event, block=True, timeout=timeout)

    def pop(self, timeout: float | None = None) -> Event:
        return self._queue.get(block=True, timeout=timeout)

    @property
    def depth(self) -> int:
        return self._queue.qsize()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return self._queue.qsize()
