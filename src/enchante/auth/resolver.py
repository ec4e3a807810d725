# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Per-request credential resolution."""

from __future__ import annotations

import base64

from ..errors import AuthResolutionError
from ..http.client import HttpClient
from ..log import EventLogger, get_event_logger
from ..models.auth import ApiKeyAuth, AuthPolicy, BasicAuth, DisabledAuth, OAuth2Auth
from ..models.probe import Endpoint
from .oauth2 import TokenCache, fetch_token

AuthHeader = tuple[str, str]


def effective_policy(endpoint: Endpoint, global_policy: AuthPolicy) -> AuthPolicy:
    """An endpoint policy, even a disabled one, replaces the global policy entirely."""
    return endpoint.auth if endpoint.auth is not None else global_policy


class AuthResolver:
    """
    Turns an auth policy into at most one header for a request.

    OAuth2 policies trigger a token exchange through ``http_client`` on every call
    unless a :class:`TokenCache` is supplied.
    """

    def __init__(
        self,
        http_client: HttpClient,
        logger: EventLogger | None = None,
        *,
        token_cache: TokenCache | None = None,
        token_timeout: float | None = None,
    ):
        self.http_client = http_client
        self.logger = logger or get_event_logger()
        self.token_cache = token_cache
        self.token_timeout = token_timeout

    def resolve(self, endpoint: Endpoint, global_policy: AuthPolicy) -> AuthHeader | None:
        policy = effective_policy(endpoint, global_policy)
        source = "endpoint" if endpoint.auth is not None else "global"
        return self.header_for(policy, url=endpoint.url, source=source)

    def header_for(self, policy: AuthPolicy, *, url: str = "", source: str = "global") -> AuthHeader | None:
        if isinstance(policy, DisabledAuth):
            self.logger.debug("Authentication is disabled", url=url, source=source)
            return None
        if isinstance(policy, ApiKeyAuth):
            self.logger.debug("Using API Key authentication", url=url, source=source)
            return policy.header, policy.value
        if isinstance(policy, BasicAuth):
            self.logger.debug("Using Basic authentication", url=url, source=source)
            encoded = base64.b64encode(f"{policy.username}:{policy.password}".encode()).decode("ascii")
            return "Authorization", f"Basic {encoded}"
        if isinstance(policy, OAuth2Auth):
            self.logger.debug("Using OAuth2 authentication", url=url, source=source)
            return "Authorization", f"Bearer {self._oauth2_token(policy)}"

        auth_type = getattr(policy, "kind", type(policy).__name__)
        self.logger.error("Unsupported authentication type", auth_type=auth_type, url=url, source=source)
        raise AuthResolutionError(f"unsupported auth type: {auth_type}")

    def _oauth2_token(self, policy: OAuth2Auth) -> str:
        if self.token_cache is not None:
            cached = self.token_cache.get(policy)
            if cached is not None:
                return cached
        token = fetch_token(self.http_client, policy, self.logger, timeout=self.token_timeout)
        if self.token_cache is not None:
            self.token_cache.put(policy, token)
        return token.access_token
