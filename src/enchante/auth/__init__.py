# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication exports."""

from .oauth2 import OAuth2Token, TokenCache, fetch_token
from .resolver import AuthHeader, AuthResolver, effective_policy

__all__ = [
    "AuthHeader",
    "AuthResolver",
    "OAuth2Token",
    "TokenCache",
    "effective_policy",
    "fetch_token",
]
