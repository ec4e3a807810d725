# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication policy variants."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union


@dataclass(frozen=True)
class DisabledAuth:
    kind: ClassVar[str] = "disabled"


@dataclass(frozen=True)
class ApiKeyAuth:
    header: str
    value: str
    kind: ClassVar[str] = "api_key"


@dataclass(frozen=True)
class BasicAuth:
    username: str
    password: str
    kind: ClassVar[str] = "basic"


@dataclass(frozen=True)
class OAuth2Auth:
    token_url: str
    client_id: str
    client_secret: str
    grant_type: str = "client_credentials"
    username: str | None = None
    password: str | None = None
    scope: str | None = None
    kind: ClassVar[str] = "oauth2"

    def form_data(self) -> dict[str, str]:
        """Form fields for the token request; optional fields only when set."""
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "grant_type": self.grant_type,
        }
        for key in ("username", "password", "scope"):
            value = getattr(self, key)
            if value:
                data[key] = value
        return data


AuthPolicy = Union[DisabledAuth, ApiKeyAuth, BasicAuth, OAuth2Auth]

AUTH_POLICY_TYPES: tuple[type, ...] = (DisabledAuth, ApiKeyAuth, BasicAuth, OAuth2Auth)


def is_supported_policy(policy: object) -> bool:
    return isinstance(policy, AUTH_POLICY_TYPES)


@dataclass(frozen=True)
class UnsupportedAuth:
    """An auth block whose ``type`` is not recognised. Resolving it fails."""

    kind: str
