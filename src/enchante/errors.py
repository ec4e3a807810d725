# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl
from enum import Enum

import httpx


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


def _find_cause(exc: BaseException, types: tuple[type[BaseException], ...]) -> BaseException | None:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, types):
            return current
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return None


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.

    httpx wraps the underlying socket/ssl errors, so the cause chain is inspected
    before falling back to the httpx class itself.
    """
    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (httpx.InvalidURL, httpx.UnsupportedProtocol, httpx.LocalProtocolError)):
        return ErrorCategory.INVALID_REQUEST

    if _find_cause(exc, (socket.gaierror, socket.herror)) is not None:
        return ErrorCategory.DNS_ERROR

    if _find_cause(exc, (ssl.SSLError, ssl.CertificateError)) is not None:
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, TimeoutError):
        return ErrorCategory.TIMEOUT

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Request timed out",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.INVALID_REQUEST: "Malformed request",
        ErrorCategory.UNKNOWN_ERROR: "Network error during request",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "Request failed due to network error")


class EnchanteError(Exception):
    """Base class for every error raised by Enchante."""


class ConfigError(EnchanteError):
    """The probe configuration is unreadable or invalid. Fatal, raised before a run starts."""


class ProbeError(EnchanteError):
    """A single job failed. The job is counted as failed and the run continues."""


class AuthResolutionError(ProbeError):
    """No credential could be produced for a request (e.g. unsupported policy type)."""


class OAuth2Error(AuthResolutionError):
    """The OAuth2 token exchange failed.

    ``reason`` is one of ``transport``, ``status``, ``parse`` or ``missing_token``.
    """

    def __init__(self, message: str, *, reason: str, status_code: int | None = None):
        super().__init__(message)
        self.reason = reason
        self.status_code = status_code


class RequestConstructionError(ProbeError):
    """The endpoint definition could not be turned into an HTTP request."""


class NetworkError(ProbeError):
    """Transport-level failure (DNS, connect, TLS, timeout)."""

    def __init__(self, message: str, *, category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR):
        super().__init__(message)
        self.category = category

    @property
    def is_timeout(self) -> bool:
        return self.category == ErrorCategory.TIMEOUT


class HTTPStatusError(ProbeError):
    """The server answered with a status code >= 400."""

    def __init__(self, status_code: int, url: str | None = None):
        super().__init__(f"status code {status_code}" + (f" from {url}" if url else ""))
        self.status_code = status_code
        self.url = url


__all__ = [
    "AuthResolutionError",
    "ConfigError",
    "EnchanteError",
    "ErrorCategory",
    "HTTPStatusError",
    "NetworkError",
    "OAuth2Error",
    "ProbeError",
    "RequestConstructionError",
    "categorize_exception",
    "error_category_to_reason",
]
