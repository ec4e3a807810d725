# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe configuration models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import ClassVar, Union

from ..config import DEFAULT_REQUEST_TIMEOUT_MS
from ..errors import ConfigError
from .auth import AuthPolicy, DisabledAuth


@dataclass(frozen=True)
class NoDelay:
    kind: ClassVar[str] = "none"


@dataclass(frozen=True)
class FixedDelay:
    milliseconds: int
    kind: ClassVar[str] = "fixed"

    def __post_init__(self) -> None:
        if self.milliseconds < 0:
            raise ValueError("fixed delay must be >= 0 ms")


@dataclass(frozen=True)
class RandomDelay:
    """Sleep a whole number of milliseconds drawn from the half-open range ``[min_ms, max_ms)``."""

    min_ms: int
    max_ms: int
    kind: ClassVar[str] = "random"

    def __post_init__(self) -> None:
        if self.min_ms < 0:
            raise ValueError("random delay min must be >= 0 ms")
        if self.min_ms > self.max_ms:
            raise ValueError(f"random delay min ({self.min_ms}) exceeds max ({self.max_ms})")


DelayPolicy = Union[NoDelay, FixedDelay, RandomDelay]


def _freeze_headers(headers: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType({str(key): str(value) for key, value in (headers or {}).items()})


@dataclass(frozen=True)
class Endpoint:
    """One HTTP target. ``auth=None`` inherits the global policy; any policy (even disabled) overrides it."""

    url: str
    method: str = "GET"
    body: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict, hash=False)
    auth: AuthPolicy | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", (self.method or "GET").upper())
        object.__setattr__(self, "headers", _freeze_headers(self.headers))


@dataclass(frozen=True)
class ProbeConfiguration:
    endpoints: tuple[Endpoint, ...]
    concurrency: int = 1
    repetitions: int = 1
    request_timeout_ms: int = DEFAULT_REQUEST_TIMEOUT_MS
    delay: DelayPolicy = field(default_factory=NoDelay)
    auth: AuthPolicy = field(default_factory=DisabledAuth)

    def __post_init__(self) -> None:
        object.__setattr__(self, "endpoints", tuple(self.endpoints))
        if not self.endpoints:
            raise ConfigError("at least one endpoint is required")
        if self.concurrency < 1:
            raise ConfigError(f"concurrency must be >= 1, got {self.concurrency}")
        if self.repetitions < 1:
            raise ConfigError(f"total requests must be >= 1, got {self.repetitions}")
        if self.request_timeout_ms <= 0:
            raise ConfigError(f"request timeout must be > 0 ms, got {self.request_timeout_ms}")

    @property
    def total_jobs(self) -> int:
        return self.repetitions * len(self.endpoints)

    @property
    def request_timeout(self) -> float:
        """Per-request timeout in seconds."""
        return self.request_timeout_ms / 1000.0


@dataclass(frozen=True)
class Sample:
    """Latency of one successful request, in seconds."""

    duration: float
    url: str = ""
    method: str = ""
    status_code: int | None = None
