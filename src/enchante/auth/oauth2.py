# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""OAuth2 token exchange and the optional token cache."""

from __future__ import annotations

import json
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import urlencode

from ..errors import OAuth2Error
from ..http.client import HttpClient
from ..http.models import HttpRequest
from ..log import EventLogger
from ..models.auth import OAuth2Auth


@dataclass(frozen=True)
class OAuth2Token:
    access_token: str
    expires_in: float | None = None


def fetch_token(
    client: HttpClient,
    policy: OAuth2Auth,
    logger: EventLogger,
    *,
    timeout: float | None = None,
) -> OAuth2Token:
    """POST the client credentials to ``policy.token_url`` and return the access token."""
    logger.debug("Requesting OAuth2 token", url=policy.token_url, client_id=policy.client_id)
    response = client.request(
        HttpRequest(
            url=policy.token_url,
            method="POST",
            headers={"Content-Type": "application/x-www-form-urlencoded", "Accept": "application/json"},
            body=urlencode(policy.form_data()),
            timeout=timeout,
        )
    )

    if not response.ok:
        logger.error("OAuth2 request failed", url=policy.token_url, error=response.error_message)
        raise OAuth2Error(f"OAuth request failed: {response.error_message}", reason="transport")

    if not response.is_2xx:
        logger.warning("OAuth2 server returned non-2xx status", url=policy.token_url, status=response.status_code)
        raise OAuth2Error(
            f"OAuth server returned status: {response.status_code}",
            reason="status",
            status_code=response.status_code,
        )

    try:
        payload = json.loads(response.text)
    except (ValueError, RecursionError) as exc:
        logger.error("Failed to parse OAuth2 response", url=policy.token_url, error=str(exc))
        raise OAuth2Error(f"failed to parse OAuth response: {exc}", reason="parse", status_code=response.status_code) from exc
    if not isinstance(payload, dict):
        logger.error("Failed to parse OAuth2 response", url=policy.token_url, error="not a JSON object")
        raise OAuth2Error("failed to parse OAuth response: not a JSON object", reason="parse", status_code=response.status_code)

    token = payload.get("access_token")
    if not isinstance(token, str):
        logger.error("OAuth2 response did not contain an access_token", url=policy.token_url)
        raise OAuth2Error("access_token not found in response", reason="missing_token", status_code=response.status_code)

    expires_in = payload.get("expires_in")
    if isinstance(expires_in, bool) or not isinstance(expires_in, (int, float)):
        expires_in = None

    logger.debug("Successfully retrieved OAuth2 token", url=policy.token_url)
    return OAuth2Token(access_token=token, expires_in=expires_in)


class TokenCache:
    """
    Bounded-lifetime token cache keyed by ``(token_url, client_id)``.

    An entry lives for ``ttl`` seconds, or less when the server reports a shorter
    ``expires_in``. Concurrent misses for the same key may each fetch a token.
    """

    def __init__(self, ttl: float, *, clock: Callable[[], float] = time.monotonic):
        if ttl <= 0:
            raise ValueError("token cache ttl must be > 0")
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[tuple[str, str], tuple[str, float]] = {}

    def get(self, policy: OAuth2Auth) -> str | None:
        key = (policy.token_url, policy.client_id)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            token, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return token

    def put(self, policy: OAuth2Auth, token: OAuth2Token) -> None:
        lifetime = self.ttl
        if token.expires_in is not None:
            lifetime = min(lifetime, float(token.expires_in))
        if lifetime <= 0:
            return
        with self._lock:
            self._entries[(policy.token_url, policy.client_id)] = (token.access_token, self._clock() + lifetime)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
