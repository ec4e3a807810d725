# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Run-scoped cancellation.

A ProbeContext is handed to :func:`enchante.probe.run` and shared by the
dispatcher and every worker. Cancelling it stops new work from being taken;
requests already in flight finish or hit their own timeout.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProbeContext:
    cancel_event: threading.Event = field(default_factory=threading.Event)

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        self.cancel_event.set()


__all__ = ["ProbeContext"]
