# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe execution engine."""

from .aggregator import ResultAggregator
from .channel import Channel, ChannelClosed
from .context import ProbeContext
from .delay import apply_delay, delay_milliseconds
from .dispatcher import Dispatcher, enumerate_jobs
from .engine import check_global_auth, run
from .executor import RequestExecutor
from .pool import RunCounters, WorkerPool

__all__ = [
    "Channel",
    "ChannelClosed",
    "Dispatcher",
    "ProbeContext",
    "RequestExecutor",
    "ResultAggregator",
    "RunCounters",
    "WorkerPool",
    "apply_delay",
    "check_global_auth",
    "delay_milliseconds",
    "enumerate_jobs",
    "run",
]
