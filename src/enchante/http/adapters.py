# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-process HttpClient implementations."""

from __future__ import annotations

import threading
from collections.abc import Callable

from .client import HttpClient
from .models import HttpRequest, HttpResponse

Handler = Callable[[HttpRequest], HttpResponse]


class StubHttpClient(HttpClient):
    """Deterministic, programmable HttpClient for tests.

    Responses are looked up by URL; a ``handler`` may compute them instead. Safe to
    share between worker threads.
    """

    def __init__(self, responses: dict[str, HttpResponse] | None = None, handler: Handler | None = None):
        self._responses = responses or {}
        self._handler = handler
        self._lock = threading.Lock()
        self.requests: list[HttpRequest] = []
        self.closed = False

    def add(self, url: str, response: HttpResponse) -> None:
        with self._lock:
            self._responses[url] = response

    def request(self, request: HttpRequest) -> HttpResponse:
        with self._lock:
            self.requests.append(request)
            response = self._responses.get(request.url)
        if response is not None:
            return response
        if self._handler is not None:
            return self._handler(request)
        return HttpResponse(ok=False, status_code=None, error_message="No stubbed response configured")

    def requests_to(self, url: str) -> list[HttpRequest]:
        with self._lock:
            return [request for request in self.requests if request.url == url]

    def close(self) -> None:
        self.closed = True
