# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header utilities.

HTTP header field names are case-insensitive (RFC 9110). Endpoint headers keep the
casing they were configured with, so overrides compare names
case-insensitively instead of rewriting the keys.
"""

from __future__ import annotations

from collections.abc import Mapping


def set_header(headers: dict[str, str], name: str, value: str) -> None:
    """Set ``name`` in place, dropping any existing key that differs only by case."""
    lower = name.lower()
    for key in [key for key in headers if key.lower() == lower]:
        del headers[key]
    headers[name] = value


def merge_headers(
    static: Mapping[str, str] | None,
    auth: tuple[str, str] | None,
    user_agent: str | None,
) -> dict[str, str]:
    """
    Build the outgoing header set for one job.

    Endpoint headers go first, the auth header replaces any of them with the same
    name, and the User-Agent is always applied last.
    """
    merged = dict(static or {})
    if auth is not None:
        set_header(merged, auth[0], auth[1])
    if user_agent:
        set_header(merged, "User-Agent", user_agent)
    return merged


__all__ = ["merge_headers", "set_header"]
