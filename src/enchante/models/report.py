# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Run summary reported at the end of a probe."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

RunStatus = Literal["completed", "no_successful_requests", "cancelled"]


@dataclass(frozen=True)
class RunSummary:
    succeeded: int
    failed: int
    sample_count: int
    total_duration: float
    average: float | None
    elapsed: float
    dispatched: int = 0
    cancelled: bool = False

    @property
    def processed(self) -> int:
        return self.succeeded + self.failed

    @property
    def status(self) -> RunStatus:
        # Cancellation wins: a cancelled run with zero samples is not reported as "no successes".
        if self.cancelled:
            return "cancelled"
        if self.sample_count == 0:
            return "no_successful_requests"
        return "completed"

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "dispatched": self.dispatched,
            "processed": self.processed,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "sample_count": self.sample_count,
            "total_duration": self.total_duration,
            "average": self.average,
            "elapsed": self.elapsed,
            "cancelled": self.cancelled,
        }
