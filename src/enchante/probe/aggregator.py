# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Latency aggregation."""

from __future__ import annotations

from ..models.probe import Sample
from ..models.report import RunSummary
from .channel import Channel
from .pool import RunCounters


class ResultAggregator:
    def __init__(self, results: Channel[Sample]):
        self.results = results
        self.count = 0
        self.total = 0.0

    def add(self, sample: Sample) -> None:
        self.count += 1
        self.total += sample.duration

    def consume(self) -> int:
        """Drain samples until the result channel is closed; return how many were read."""
        for sample in self.results:
            self.add(sample)
        return self.count

    @property
    def average(self) -> float | None:
        if self.count == 0:
            return None
        return self.total / self.count

    def finalize(self, counters: RunCounters, *, elapsed: float, dispatched: int, cancelled: bool) -> RunSummary:
        succeeded, failed = counters.snapshot()
        return RunSummary(
            succeeded=succeeded,
            failed=failed,
            sample_count=self.count,
            total_duration=self.total,
            average=self.average,
            elapsed=elapsed,
            dispatched=dispatched,
            cancelled=cancelled,
        )
