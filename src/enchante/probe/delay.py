# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Pre-request delay policies."""

from __future__ import annotations

import random
import time
from collections.abc import Callable

from ..models.probe import DelayPolicy, FixedDelay, NoDelay, RandomDelay


def delay_milliseconds(policy: DelayPolicy, rng: random.Random | None = None) -> int:
    """Pick the sleep for one request. Random delays are drawn from ``[min_ms, max_ms)``."""
    if isinstance(policy, FixedDelay):
        return policy.milliseconds
    if isinstance(policy, RandomDelay):
        if policy.max_ms == policy.min_ms:
            return policy.min_ms
        return (rng or random).randrange(policy.min_ms, policy.max_ms)
    if isinstance(policy, NoDelay) or policy is None:
        return 0
    raise TypeError(f"unsupported delay policy: {type(policy).__name__}")


def apply_delay(
    policy: DelayPolicy,
    *,
    sleep: Callable[[float], None] = time.sleep,
    rng: random.Random | None = None,
) -> int:
    """Sleep according to ``policy`` and return the milliseconds slept."""
    milliseconds = delay_milliseconds(policy, rng)
    if milliseconds > 0:
        sleep(milliseconds / 1000.0)
    return milliseconds
