# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Enchante package entrypoint.

Enchante probes HTTP endpoints concurrently: it fans a fixed workload out to a
pool of worker threads, resolves credentials per request, measures latency and
reports a run summary. HTTP behavior is abstracted behind an injectable client
interface, and domain objects are modeled with typed dataclasses.
"""

from .auth import AuthResolver, TokenCache
from .config import ProbeSettings, load_probe_settings
from .errors import (
    AuthResolutionError,
    ConfigError,
    EnchanteError,
    HTTPStatusError,
    NetworkError,
    OAuth2Error,
    ProbeError,
    RequestConstructionError,
)
from .http import HttpClient, HttpRequest, HttpResponse, HttpxClient, create_default_http_client
from .loader import load_config
from .log import EventLogger, MemoryEventLogger, StdlibEventLogger, setup_logging
from .models import (
    ApiKeyAuth,
    BasicAuth,
    DisabledAuth,
    Endpoint,
    FixedDelay,
    NoDelay,
    OAuth2Auth,
    ProbeConfiguration,
    RandomDelay,
    RunSummary,
    Sample,
)
from .probe import ProbeContext, run
from .runtime import Enchante
from .version import __version__

__all__ = [
    "ApiKeyAuth",
    "AuthResolutionError",
    "AuthResolver",
    "BasicAuth",
    "ConfigError",
    "DisabledAuth",
    "Enchante",
    "EnchanteError",
    "Endpoint",
    "EventLogger",
    "FixedDelay",
    "HTTPStatusError",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpxClient",
    "MemoryEventLogger",
    "NetworkError",
    "NoDelay",
    "OAuth2Auth",
    "OAuth2Error",
    "ProbeConfiguration",
    "ProbeContext",
    "ProbeError",
    "ProbeSettings",
    "RandomDelay",
    "RequestConstructionError",
    "RunSummary",
    "Sample",
    "StdlibEventLogger",
    "TokenCache",
    "create_default_http_client",
    "load_config",
    "load_probe_settings",
    "run",
    "setup_logging",
    "__version__",
]
