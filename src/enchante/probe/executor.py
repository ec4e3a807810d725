# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Single-request execution: delay, send under a deadline, classify."""

from __future__ import annotations

import random
import time
from collections.abc import Callable

from ..errors import ErrorCategory, HTTPStatusError, NetworkError, RequestConstructionError, error_category_to_reason
from ..http.client import HttpClient
from ..http.models import HttpRequest
from ..log import EventLogger, get_event_logger
from ..models.probe import DelayPolicy, Endpoint, Sample
from .delay import apply_delay


class RequestExecutor:
    """
    Sends one request for an endpoint and turns the outcome into a Sample or an error.

    The delay is applied before the clock starts, so samples measure the request
    alone. Nothing is retried.
    """

    def __init__(
        self,
        http_client: HttpClient,
        logger: EventLogger | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.http_client = http_client
        self.logger = logger or get_event_logger()
        self._sleep = sleep
        self._rng = rng
        self._clock = clock

    def execute(self, endpoint: Endpoint, headers: dict[str, str], delay: DelayPolicy, timeout: float) -> Sample:
        apply_delay(delay, sleep=self._sleep, rng=self._rng)

        start = self._clock()
        request = HttpRequest(
            url=endpoint.url,
            method=endpoint.method,
            headers=dict(headers),
            body=endpoint.body or None,
            timeout=timeout,
        )
        response = self.http_client.request(request)

        if not response.ok:
            if response.error_category == ErrorCategory.INVALID_REQUEST:
                self.logger.error("Failed to create request", url=endpoint.url, error=response.error_message)
                raise RequestConstructionError(f"failed to create request: {response.error_message}")
            category = response.error_category
            if category == ErrorCategory.NONE:
                category = ErrorCategory.UNKNOWN_ERROR
            self.logger.error(
                "Request failed",
                url=endpoint.url,
                error=response.error_message,
                category=category.value,
                reason=error_category_to_reason(category),
            )
            raise NetworkError(f"request error: {response.error_message}", category=category)

        status_code = response.status_code
        if status_code is None or status_code >= 400:
            self.logger.warning("Received error status code", url=endpoint.url, status_code=status_code)
            raise HTTPStatusError(status_code if status_code is not None else 0, endpoint.url)

        elapsed = self._clock() - start
        self.logger.debug("Request successful", url=endpoint.url, status_code=status_code, response_time=elapsed)
        return Sample(duration=elapsed, url=endpoint.url, method=endpoint.method, status_code=status_code)
