# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for Enchante."""

from ..http.models import Headers, HttpRequest, HttpResponse
from .auth import ApiKeyAuth, AuthPolicy, BasicAuth, DisabledAuth, OAuth2Auth, UnsupportedAuth, is_supported_policy
from .probe import DelayPolicy, Endpoint, FixedDelay, NoDelay, ProbeConfiguration, RandomDelay, Sample
from .report import RunSummary

__all__ = [
    "ApiKeyAuth",
    "AuthPolicy",
    "BasicAuth",
    "DelayPolicy",
    "DisabledAuth",
    "Endpoint",
    "FixedDelay",
    "Headers",
    "HttpRequest",
    "HttpResponse",
    "NoDelay",
    "OAuth2Auth",
    "ProbeConfiguration",
    "RandomDelay",
    "RunSummary",
    "Sample",
    "UnsupportedAuth",
    "is_supported_policy",
]
