# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level Enchante facade for probe runs."""

from __future__ import annotations

import os
from contextlib import suppress

from .config import ProbeSettings, load_probe_settings
from .http.client import HttpClient, create_default_http_client
from .loader import load_config
from .log import EventLogger, get_event_logger
from .models import ProbeConfiguration, RunSummary
from .probe import ProbeContext, run


class Enchante:
    """
    Convenience wrapper that owns settings, the logger and a shared HTTP client.

    Repeated probes through the same instance reuse one connection pool. The client
    is created lazily so its pool can be sized for the first configuration seen.
    """

    def __init__(
        self,
        http_client: HttpClient | None = None,
        logger: EventLogger | None = None,
        settings: ProbeSettings | None = None,
    ):
        self.settings = settings or load_probe_settings()
        self.logger = logger or get_event_logger()
        self.http_client = http_client

    def _client_for(self, config: ProbeConfiguration) -> HttpClient:
        if self.http_client is None:
            self.http_client = create_default_http_client(self.settings, max_connections=config.concurrency)
        return self.http_client

    def load(self, path: str | os.PathLike[str]) -> ProbeConfiguration:
        return load_config(path, self.logger)

    def probe(self, config: ProbeConfiguration, context: ProbeContext | None = None) -> RunSummary:
        return run(
            context or ProbeContext(),
            config,
            self.logger,
            http_client=self._client_for(config),
            settings=self.settings,
        )

    def close(self) -> None:
        with suppress(Exception):
            if self.http_client is not None and hasattr(self.http_client, "close"):
                self.http_client.close()

    def __enter__(self) -> Enchante:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()
