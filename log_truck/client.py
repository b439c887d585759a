"""UDP log client — sends JSON objects or plain text lines to a log truck."""

import json
import logging
import random
import socket

from log_truck.config import parse_address

logger = logging.getLogger(__name__)

LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
SAMPLE_MESSAGES = [
    "Application started successfully",
    "Processing user request",
    "Database query completed",
    "Cache miss for key: user_session",
    "Failed to connect to external API",
    "Disk usage above 90%",
]


class UDPLogClient:
    def __init__(self, target_addr: str, app_name: str = "log-truck-client"):
        host, port = parse_address(target_addr)
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)
        family, _, _, _, self._target = infos[0]
        self._app_name = app_name
        self._sock = socket.socket(family, socket.SOCK_DGRAM)
        self.sent = 0

    def send_raw(self, data: bytes):
        self._sock.sendto(data, self._target)
        self.sent += 1

    def send_text(self, line: str):
        self.send_raw(line.encode("utf-8"))

    def send_json(self, entry: dict):
        self.send_raw(json.dumps(entry).encode("utf-8"))

    def generate_sample_logs(self, count: int, text: bool = False):
        """Send N sample logs, as JSON objects or as plain text lines."""
        for seq in range(1, count + 1):
            level = random.choice(LEVELS)
            message = random.choice(SAMPLE_MESSAGES)
            if text:
                self.send_text(f"{level} {self._app_name}: {message}")
            else:
                self.send_json({"sequence": seq, "app": self._app_name, "level": level, "message": message})
        logger.info("Sent %d sample logs to %s", count, self._target)

    def close(self):
        self._sock.close()
