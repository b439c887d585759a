import json
import threading
from datetime import datetime, timedelta, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from log_truck.event_queue import EventQueue


class StubBackend:
    """Minimal Elasticsearch stand-in that records every POST it receives."""

    def __init__(self):
        self.requests: list[dict] = []
        self.responses: list[tuple[int, bytes]] = []
        self.default_response = (201, b'{"result":"created"}')
        self.received = threading.Condition()
        backend = self

        class Handler(BaseHTTPRequestHandler):
            def do_POST(self):
                length = int(self.headers.get("Content-Length", 0))
                body = self.rfile.read(length)
                with backend.received:
                    status, payload = backend.responses.pop(0) if backend.responses else backend.default_response
                    backend.requests.append({
                        "path": self.path,
                        "content_type": self.headers.get("Content-Type"),
                        "body": json.loads(body),
                    })
                    backend.received.notify_all()
                self.send_response(status)
                self.send_header("Content-Type", "application/json")
                self.send_header("Content-Length", str(len(payload)))
                self.end_headers()
                self.wfile.write(payload)

            def log_message(self, format, *args):
                pass

        self._server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    @property
    def addr(self) -> str:
        host, port = self._server.server_address[:2]
        return f"{host}:{port}"

    def start(self):
        self._thread.start()

    def stop(self):
        self._server.shutdown()
        self._server.server_close()

    def wait_for(self, count: int, timeout: float = 5.0) -> bool:
        with self.received:
            return self.received.wait_for(lambda: len(self.requests) >= count, timeout=timeout)


@pytest.fixture
def backend():
    stub = StubBackend()
    stub.start()
    yield stub
    stub.stop()


@pytest.fixture
def frozen_now():
    return datetime(2024, 1, 1, 12, 30, 45, tzinfo=timezone(timedelta(hours=2)))


@pytest.fixture
def event_queue():
    return EventQueue(capacity=100)
