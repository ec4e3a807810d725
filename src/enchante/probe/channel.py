# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Bounded, closable queue shared between producer and consumer threads."""

from __future__ import annotations

import queue
import threading
from collections.abc import Iterator
from typing import Generic, TypeVar

T = TypeVar("T")

DEFAULT_POLL_INTERVAL = 0.05


class ChannelClosed(Exception):
    """Raised by :meth:`Channel.get` once the channel is closed and drained."""


class Channel(Generic[T]):
    """
    A ``queue.Queue`` with close semantics.

    Items put before :meth:`close` are still delivered; after that consumers get
    :class:`ChannelClosed`. Consumers poll, so a closed channel is noticed within
    ``poll_interval`` even while they wait.
    """

    def __init__(self, maxsize: int = 0, *, poll_interval: float = DEFAULT_POLL_INTERVAL):
        self._queue: queue.Queue[T] = queue.Queue(maxsize)
        self._closed = threading.Event()
        self._lock = threading.Lock()
        self.poll_interval = poll_interval

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    @property
    def maxsize(self) -> int:
        return self._queue.maxsize

    def put(self, item: T, *, cancel_event: threading.Event | None = None) -> bool:
        """
        Enqueue ``item``, blocking while the channel is full.

        Returns False without enqueueing when ``cancel_event`` is set first.
        """
        with self._lock:
            if self.closed:
                raise ChannelClosed("put on closed channel")
        while True:
            if cancel_event is not None and cancel_event.is_set():
                return False
            try:
                self._queue.put(item, timeout=self.poll_interval)
                return True
            except queue.Full:
                continue

    def get(self, timeout: float | None = None) -> T:
        """
        Dequeue one item.

        Raises ``queue.Empty`` when nothing arrives within ``timeout`` and
        :class:`ChannelClosed` when the channel is closed and empty.
        """
        wait = self.poll_interval if timeout is None else min(timeout, self.poll_interval)
        remaining = timeout
        while True:
            # Read the flag before the queue: once closed, no more puts can land.
            closed = self.closed
            try:
                return self._queue.get(timeout=wait)
            except queue.Empty:
                if closed and self._queue.empty():
                    raise ChannelClosed("channel closed") from None
                if remaining is not None:
                    remaining -= wait
                    if remaining <= 0:
                        raise

    def close(self) -> None:
        """Close the channel. Calling it twice is a no-op."""
        with self._lock:
            self._closed.set()

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except ChannelClosed:
                return

    def qsize(self) -> int:
        return self._queue.qsize()


__all__ = ["Channel", "ChannelClosed"]
