# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for Enchante."""

import os
from dataclasses import dataclass

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; EnchanteBot/1.0)"
DEFAULT_REQUEST_TIMEOUT_MS = 2000


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class ProbeSettings:
    """Engine defaults that are not part of a probe configuration file."""

    request_timeout_ms: int = DEFAULT_REQUEST_TIMEOUT_MS
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    verify_ssl: bool = True
    token_cache_ttl: float = 0.0
    poll_interval: float = 0.05

    @classmethod
    def from_env(cls) -> "ProbeSettings":
        """Create settings from environment variables (evaluated at call time)."""
        request_timeout_ms = _int_env("ENCHANTE_REQUEST_TIMEOUT_MS", cls.request_timeout_ms)
        if request_timeout_ms <= 0:
            request_timeout_ms = cls.request_timeout_ms
        poll_interval = _float_env("ENCHANTE_POLL_INTERVAL", cls.poll_interval)
        if poll_interval <= 0:
            poll_interval = cls.poll_interval
        return cls(
            request_timeout_ms=request_timeout_ms,
            user_agent=os.getenv("ENCHANTE_USER_AGENT", cls.user_agent),
            allow_redirects=_bool_env("ENCHANTE_HTTP_REDIRECTS", cls.allow_redirects),
            verify_ssl=_bool_env("ENCHANTE_HTTP_VERIFY_SSL", cls.verify_ssl),
            token_cache_ttl=max(0.0, _float_env("ENCHANTE_TOKEN_CACHE_TTL", cls.token_cache_ttl)),
            poll_interval=poll_interval,
        )


def load_probe_settings() -> ProbeSettings:
    """Load engine settings from environment with sensible defaults."""
    return ProbeSettings.from_env()
