# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
YAML probe configuration loader.

Reads the ``auth:`` / ``probe:`` layout, loads a ``.env`` file when present and
expands ``${VAR}`` / ``$(VAR)`` references in credential fields.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .config import DEFAULT_REQUEST_TIMEOUT_MS
from .errors import ConfigError
from .log import EventLogger, get_event_logger
from .models.auth import ApiKeyAuth, AuthPolicy, BasicAuth, DisabledAuth, OAuth2Auth, UnsupportedAuth
from .models.probe import DelayPolicy, Endpoint, FixedDelay, NoDelay, ProbeConfiguration, RandomDelay

_ENV_REF_RE = re.compile(r"\$\{([^}]+)\}|\$\(([^)]+)\)")


def expand_env(value: Any, logger: EventLogger | None = None) -> Any:
    """Replace ``${VAR}`` and ``$(VAR)`` with the environment value (empty when unset)."""
    if not isinstance(value, str):
        return value

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1) or match.group(2)
        if logger is not None:
            logger.debug("Replacing environment variable", variable=name, found=name in os.environ)
        return os.getenv(name, "")

    return _ENV_REF_RE.sub(_replace, value)


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"'{key}' must be a mapping")
    return value


def _int(data: Mapping[str, Any], key: str, default: int = 0) -> int:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        raise ConfigError(f"'{key}' must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"'{key}' must be an integer, got {value!r}") from exc


def _str(data: Mapping[str, Any], key: str, logger: EventLogger | None) -> str:
    value = data.get(key)
    return "" if value is None else str(expand_env(str(value), logger))


def parse_auth(data: Mapping[str, Any] | None, logger: EventLogger | None = None) -> AuthPolicy | UnsupportedAuth:
    if not data or not data.get("enabled"):
        return DisabledAuth()

    auth_type = str(data.get("type") or "").strip().lower()
    if auth_type == "api_key":
        section = _section(data, "api_key")
        return ApiKeyAuth(header=_str(section, "header", logger), value=_str(section, "value", logger))
    if auth_type == "basic":
        section = _section(data, "basic")
        return BasicAuth(username=_str(section, "username", logger), password=_str(section, "password", logger))
    if auth_type == "oauth2":
        section = _section(data, "oauth2")
        return OAuth2Auth(
            token_url=_str(section, "token_url", logger),
            client_id=_str(section, "client_id", logger),
            client_secret=_str(section, "client_secret", logger),
            grant_type=_str(section, "grant_type", logger) or "client_credentials",
            username=_str(section, "username", logger) or None,
            password=_str(section, "password", logger) or None,
            scope=_str(section, "scope", logger) or None,
        )
    # Resolution decides whether this is fatal (global, not overridden) or a per-job failure.
    return UnsupportedAuth(kind=auth_type or "<missing>")


def parse_delay(data: Mapping[str, Any] | None) -> DelayPolicy:
    if not data or not data.get("enabled"):
        return NoDelay()
    delay_type = str(data.get("type") or "fixed").strip().lower()
    try:
        if delay_type == "random":
            return RandomDelay(min_ms=_int(data, "min"), max_ms=_int(data, "max"))
        if delay_type == "fixed":
            return FixedDelay(milliseconds=_int(data, "fixed"))
    except ValueError as exc:
        raise ConfigError(f"invalid delay_between: {exc}") from exc
    raise ConfigError(f"unsupported delay type: {delay_type}")


def parse_endpoint(data: Any, logger: EventLogger | None = None) -> Endpoint:
    if not isinstance(data, Mapping):
        raise ConfigError("each endpoint must be a mapping")
    url = data.get("url")
    if not url:
        raise ConfigError("endpoint is missing 'url'")
    headers = data.get("headers") or {}
    if not isinstance(headers, Mapping):
        raise ConfigError(f"headers for {url} must be a mapping")
    auth_data = data.get("auth")
    if auth_data is not None and not isinstance(auth_data, Mapping):
        raise ConfigError(f"auth for {url} must be a mapping")
    body = data.get("body")
    return Endpoint(
        url=str(url),
        method=str(data.get("method") or "GET"),
        body=None if body is None else str(body),
        headers={str(key): "" if value is None else str(value) for key, value in headers.items()},
        auth=parse_auth(auth_data, logger) if auth_data is not None else None,
    )


def parse_config(data: Any, logger: EventLogger | None = None) -> ProbeConfiguration:
    """Build a ProbeConfiguration from an already-parsed YAML document."""
    if not isinstance(data, Mapping):
        raise ConfigError("configuration root must be a mapping")
    probe = _section(data, "probe")
    endpoints = probe.get("endpoints") or []
    if not isinstance(endpoints, list):
        raise ConfigError("'probe.endpoints' must be a list")

    timeout_ms = _int(probe, "request_timeout_ms")
    if timeout_ms == 0:
        timeout_ms = DEFAULT_REQUEST_TIMEOUT_MS

    return ProbeConfiguration(
        endpoints=tuple(parse_endpoint(item, logger) for item in endpoints),
        concurrency=_int(probe, "concurrent_requests", 1),
        repetitions=_int(probe, "total_requests", 1),
        request_timeout_ms=timeout_ms,
        delay=parse_delay(_section(probe, "delay_between")),
        auth=parse_auth(_section(data, "auth"), logger),
    )


def load_config(
    path: str | os.PathLike[str],
    logger: EventLogger | None = None,
    *,
    env_file: str | os.PathLike[str] | None = ".env",
) -> ProbeConfiguration:
    """Load ``path`` into a validated ProbeConfiguration, raising ConfigError on any problem."""
    logger = logger or get_event_logger()
    if env_file is not None:
        if load_dotenv(Path(env_file)):
            logger.debug("Loaded environment file", file=str(env_file))
        else:
            logger.debug("No .env file found, continuing with YAML config")

    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("Failed to read config file", file=str(path), error=str(exc))
        raise ConfigError(f"error reading config file: {exc}") from exc

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        logger.error("Failed to parse YAML", file=str(path), error=str(exc))
        raise ConfigError(f"error parsing YAML: {exc}") from exc

    config = parse_config(data, logger)
    logger.info("Config loaded successfully", file=str(path), endpoints=len(config.endpoints))
    return config


__all__ = ["expand_env", "load_config", "parse_auth", "parse_config", "parse_delay", "parse_endpoint"]
