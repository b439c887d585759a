"""UDP listener — receives log datagrams and hands them to the decoder."""

import logging
import socket
import threading

from log_truck.config import format_address, parse_address
from log_truck.decoder import Decoder, parse_host
from log_truck.metrics import Metrics

logger = logging.getLogger(__name__)

MAX_DATAGRAM_SIZE = 32768


class ListenerError(Exception):
    """The listen address could not be resolved or bound."""


class UDPListener:
    def __init__(self, listen_addr: str, decoder: Decoder, shutdown_event: threading.Event,
                 buffer_size: int = MAX_DATAGRAM_SIZE, metrics: Metrics | None = None):
        self._listen_addr = listen_addr
        self._decoder = decoder
        self._shutdown = shutdown_event
        self._buffer_size = buffer_size
        self._metrics = metrics or Metrics()
        self._sock = None
        self._received_count = 0
        self._lock = threading.Lock()
        self.server_address = None

    def bind(self):
        """Resolve and bind the listen address. Raises ListenerError on failure."""
        try:
            host, port = parse_address(self._listen_addr)
            infos = socket.getaddrinfo(host or None, port, type=socket.SOCK_DGRAM,
                                       flags=socket.AI_PASSIVE)
        except (ValueError, OSError) as exc:
            raise ListenerError(f"unable to resolve listen address {self._listen_addr}: {exc}") from exc

        family, _, _, _, sockaddr = infos[0]
        sock = socket.socket(family, socket.SOCK_DGRAM)
        try:
            sock.bind(sockaddr)
        except OSError as exc:
            sock.close()
            raise ListenerError(f"unable to listen on {self._listen_addr}: {exc}") from exc

        sock.settimeout(1.0)
        self._sock = sock
        self.server_address = sock.getsockname()
        logger.info("listening on udp %s", format_address(*self.server_address[:2]))

    def start(self):
        """Bind if needed, then receive until the shutdown event is set."""
        if self._sock is None:
            self.bind()
        sock = self._sock

        while not self._shutdown.is_set():
            try:
                data, addr = sock.recvfrom(self._buffer_size)
            except socket.timeout:
                continue
            except OSError as exc:
                if self._shutdown.is_set():
                    break
                self._metrics.increment("read_errors")
                logger.warning("unable to read from %s: %s", self._listen_addr, exc)
                continue

            with self._lock:
                self._received_count += 1
            self._metrics.increment("received")

            self._decoder.decode(parse_host(addr), data)

    def stop(self):
        self._shutdown.set()
        if self._sock:
            self._sock.close()
            self._sock = None

    @property
    def received_count(self) -> int:
        with self._lock:
            return self._received_count
