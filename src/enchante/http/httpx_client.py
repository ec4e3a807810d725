# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpClient implementation."""

from __future__ import annotations

import threading
import time

import httpx

from ..config import ProbeSettings, load_probe_settings
from ..errors import ErrorCategory, categorize_exception
from .client import HttpClient
from .models import HttpRequest, HttpResponse

MAX_BODY_BYTES = 1024 * 1024


class HttpxClient(HttpClient):
    """Synchronous httpx client wrapper, shared by all workers of a run."""

    def __init__(
        self,
        settings: ProbeSettings | None = None,
        client: httpx.Client | None = None,
        *,
        max_connections: int | None = None,
    ):
        self.settings = settings or load_probe_settings()
        if client is None:
            limits = httpx.Limits(
                max_connections=max(max_connections or 0, 100),
                max_keepalive_connections=max(max_connections or 0, 20),
            )
            client = httpx.Client(
                follow_redirects=self.settings.allow_redirects,
                timeout=self.settings.request_timeout_ms / 1000.0,
                verify=self.settings.verify_ssl,
                limits=limits,
            )
        self._client = client

    def request(self, request: HttpRequest) -> HttpResponse:
        headers = dict(request.headers or {})
        headers.setdefault("User-Agent", self.settings.user_agent)

        timeout = request.timeout
        if timeout is None:
            timeout = self.settings.request_timeout_ms / 1000.0
        follow_redirects = self.settings.allow_redirects if request.allow_redirects is None else request.allow_redirects

        try:
            built = self._client.build_request(
                request.method,
                request.url,
                headers=headers,
                content=request.body,
                timeout=timeout,
            )
        except Exception as exc:  # noqa: BLE001
            return HttpResponse(
                ok=False,
                error_message=str(exc),
                error_type=type(exc).__name__,
                error_category=ErrorCategory.INVALID_REQUEST,
            )

        deadline = time.monotonic() + timeout
        abandoned = threading.Event()
        outcome: list[HttpResponse] = []
        # httpx timeouts are per phase, so the exchange runs on its own thread and is
        # abandoned once the total deadline passes.
        exchange = threading.Thread(
            target=lambda: outcome.append(self._exchange(built, follow_redirects, deadline, abandoned)),
            name="enchante-http-exchange",
            daemon=True,
        )
        exchange.start()
        exchange.join(max(deadline - time.monotonic(), 0.0))
        if exchange.is_alive() or not outcome:
            abandoned.set()
            return HttpResponse(
                ok=False,
                error_message=f"request exceeded timeout of {timeout}s",
                error_type="TimeoutException",
                error_category=ErrorCategory.TIMEOUT,
            )
        return outcome[0]

    def _exchange(self, built: httpx.Request, follow_redirects: bool, deadline: float, abandoned: threading.Event) -> HttpResponse:
        try:
            resp = self._client.send(built, stream=True, follow_redirects=follow_redirects)
            try:
                content = bytearray()
                truncated = False
                for chunk in resp.iter_bytes():
                    if abandoned.is_set() or time.monotonic() > deadline:
                        raise httpx.ReadTimeout("response body exceeded request timeout", request=built)
                    if not chunk or truncated:
                        continue
                    remaining = MAX_BODY_BYTES - len(content)
                    if len(chunk) >= remaining:
                        content.extend(chunk[:remaining])
                        truncated = True
                        continue
                    content.extend(chunk)
            finally:
                resp.close()

            encoding = resp.encoding or "utf-8"
            try:
                text = bytes(content).decode(encoding, errors="replace")
            except LookupError:
                text = bytes(content).decode("utf-8", errors="replace")

            return HttpResponse(
                ok=True,
                status_code=resp.status_code,
                headers=dict(resp.headers),
                text=text,
                content=bytes(content),
                url=str(resp.url),
                meta={"body_truncated": truncated, "body_bytes_read": len(content)},
            )
        except Exception as exc:  # noqa: BLE001
            return HttpResponse(
                ok=False,
                error_message=str(exc) or type(exc).__name__,
                error_type=type(exc).__name__,
                error_category=categorize_exception(exc),
            )

    def close(self) -> None:
        self._client.close()
