# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Fixed-size worker pool draining the job channel."""

from __future__ import annotations

import queue
import threading

from ..auth.resolver import AuthResolver
from ..config import DEFAULT_USER_AGENT
from ..errors import ProbeError
from ..http.headers import merge_headers
from ..log import EventLogger
from ..models.probe import Endpoint, ProbeConfiguration, Sample
from .channel import Channel, ChannelClosed
from .context import ProbeContext
from .executor import RequestExecutor


class RunCounters:
    """Success/failure counters shared by all workers, guarded by one lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._succeeded = 0
        self._failed = 0

    def record(self, success: bool) -> None:
        with self._lock:
            if success:
                self._succeeded += 1
            else:
                self._failed += 1

    def snapshot(self) -> tuple[int, int]:
        """Return ``(succeeded, failed)``. Only a final total once the pool has terminated."""
        with self._lock:
            return self._succeeded, self._failed


class WorkerPool:
    """
    Runs ``config.concurrency`` symmetric workers.

    Each job resolves auth, merges headers and executes the request. Failures are
    counted and logged, never raised. When the last worker exits a finalizer
    thread closes the result channel.
    """

    def __init__(
        self,
        context: ProbeContext,
        config: ProbeConfiguration,
        jobs: Channel[Endpoint],
        results: Channel[Sample],
        resolver: AuthResolver,
        executor: RequestExecutor,
        logger: EventLogger,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        poll_interval: float = 0.05,
    ):
        self.context = context
        self.config = config
        self.jobs = jobs
        self.results = results
        self.resolver = resolver
        self.executor = executor
        self.logger = logger
        self.user_agent = user_agent
        self.poll_interval = poll_interval
        self.counters = RunCounters()
        self.cancelled_workers = 0
        self._cancel_lock = threading.Lock()
        self._threads: list[threading.Thread] = []
        self._finalizer: threading.Thread | None = None

    def start(self) -> None:
        for worker_id in range(self.config.concurrency):
            thread = threading.Thread(
                target=self._worker,
                args=(worker_id,),
                name=f"enchante-worker-{worker_id}",
                daemon=True,
            )
            self._threads.append(thread)
            thread.start()
        self._finalizer = threading.Thread(target=self._finalize, name="enchante-finalizer", daemon=True)
        self._finalizer.start()

    def join(self, timeout: float | None = None) -> None:
        if self._finalizer is not None:
            self._finalizer.join(timeout)

    @property
    def cancelled(self) -> bool:
        return self.cancelled_workers > 0

    def _finalize(self) -> None:
        for thread in self._threads:
            thread.join()
        self.results.close()
        self.logger.debug("All workers finished, closing result channel")

    def _worker(self, worker_id: int) -> None:
        self.logger.debug("Worker started", worker_id=worker_id)
        while True:
            if self.context.cancelled:
                with self._cancel_lock:
                    self.cancelled_workers += 1
                self.logger.warning("Worker stopped due to cancellation", worker_id=worker_id)
                return
            try:
                endpoint = self.jobs.get(timeout=self.poll_interval)
            except queue.Empty:
                continue
            except ChannelClosed:
                self.logger.debug("Worker finished", worker_id=worker_id)
                return

            self.logger.debug("Worker processing request", worker_id=worker_id, method=endpoint.method, url=endpoint.url)
            sample = self._process(endpoint)
            self.counters.record(sample is not None)
            if sample is not None:
                self.results.put(sample)

    def _process(self, endpoint: Endpoint) -> Sample | None:
        try:
            auth_header = self.resolver.resolve(endpoint, self.config.auth)
            headers = merge_headers(endpoint.headers, auth_header, self.user_agent)
            return self.executor.execute(endpoint, headers, self.config.delay, self.config.request_timeout)
        except ProbeError as exc:
            self.logger.debug("Job failed", url=endpoint.url, error_type=type(exc).__name__, error=str(exc))
            return None
        except Exception as exc:  # noqa: BLE001
            self.logger.error("Unexpected error while processing job", url=endpoint.url, error_type=type(exc).__name__, error=str(exc))
            return None
