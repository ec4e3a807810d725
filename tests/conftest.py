# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import json
import threading
import time
from collections import Counter
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs

import pytest


class ProbeServer:
    """Local HTTP server recording what the probe sends.

    Paths:
      /            200 for GET, 201 for POST
      /slow        sleeps ``slow_seconds`` before answering
      /status/<n>  answers with status <n>
      /token/<t>   OAuth2 token endpoint issuing token <t>
    """

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.methods: Counter[str] = Counter()
        self.authorization: list[tuple[str, str]] = []
        self.token_requests: list[dict[str, str]] = []
        self.slow_seconds = 0.05
        self.in_flight = 0
        self.max_in_flight = 0
        self.hold_seconds = 0.0
        server = self

        class Handler(BaseHTTPRequestHandler):
            protocol_version = "HTTP/1.1"

            def log_message(self, format, *args):  # noqa: A002
                return None

            def _send(self, status: int, body: bytes = b"ok", content_type: str = "text/plain") -> None:
                self.send_response(status)
                self.send_header("Content-Type", content_type)
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)

            def _read_body(self) -> bytes:
                length = int(self.headers.get("Content-Length") or 0)
                return self.rfile.read(length) if length else b""

            def _handle(self) -> None:
                body = self._read_body()
                path = self.path.split("?", 1)[0]
                if path.startswith("/token/"):
                    form = {k: v[0] for k, v in parse_qs(body.decode()).items()}
                    with server.lock:
                        server.token_requests.append(form)
                    token = path.rsplit("/", 1)[1]
                    self._send(200, json.dumps({"access_token": token}).encode(), "application/json")
                    return

                with server.lock:
                    server.methods[self.command] += 1
                    server.authorization.append((path, self.headers.get("Authorization", "")))
                    server.in_flight += 1
                    server.max_in_flight = max(server.max_in_flight, server.in_flight)
                try:
                    if server.hold_seconds:
                        time.sleep(server.hold_seconds)
                    if path == "/slow":
                        time.sleep(server.slow_seconds)
                        self._send(200)
                    elif path.startswith("/status/"):
                        self._send(int(path.rsplit("/", 1)[1]))
                    elif self.command == "POST":
                        self._send(201)
                    else:
                        self._send(200)
                finally:
                    with server.lock:
                        server.in_flight -= 1

            do_GET = _handle
            do_POST = _handle
            do_PUT = _handle
            do_DELETE = _handle

        self.httpd = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
        self.httpd.daemon_threads = True
        self.thread = threading.Thread(target=self.httpd.serve_forever, daemon=True)

    @property
    def url(self) -> str:
        host, port = self.httpd.server_address[:2]
        return f"http://{host}:{port}"

    def start(self) -> "ProbeServer":
        self.thread.start()
        return self

    def stop(self) -> None:
        self.httpd.shutdown()
        self.httpd.server_close()


@pytest.fixture
def probe_server():
    server = ProbeServer().start()
    try:
        yield server
    finally:
        server.stop()
