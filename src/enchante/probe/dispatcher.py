# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Job dispatch: enumerate the workload into the job channel."""

from __future__ import annotations

from collections.abc import Iterator

from ..log import EventLogger
from ..models.probe import Endpoint, ProbeConfiguration
from .channel import Channel
from .context import ProbeContext


def enumerate_jobs(config: ProbeConfiguration) -> Iterator[Endpoint]:
    """Repetition-major order: every endpoint once, in configured order, ``repetitions`` times."""
    for _ in range(config.repetitions):
        yield from config.endpoints


class Dispatcher:
    """Single producer feeding the job channel. Always closes the channel when it stops."""

    def __init__(self, context: ProbeContext, config: ProbeConfiguration, jobs: Channel[Endpoint], logger: EventLogger):
        self.context = context
        self.config = config
        self.jobs = jobs
        self.logger = logger
        self.dispatched = 0
        self.cancelled = False

    def run(self) -> int:
        try:
            for endpoint in enumerate_jobs(self.config):
                if self.context.cancelled or not self.jobs.put(endpoint, cancel_event=self.context.cancel_event):
                    self.cancelled = True
                    self.logger.warning(
                        "Job queue stopped due to cancellation",
                        dispatched=self.dispatched,
                        expected=self.config.total_jobs,
                    )
                    return self.dispatched
                self.dispatched += 1
                self.logger.debug("Job added to queue", method=endpoint.method, url=endpoint.url)
            self.logger.debug("Job queue closed", dispatched=self.dispatched)
            return self.dispatched
        finally:
            self.jobs.close()
