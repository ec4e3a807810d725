# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe run entry point: wires dispatcher, workers and aggregator for one run."""

from __future__ import annotations

import threading
import time

from ..auth.oauth2 import TokenCache
from ..auth.resolver import AuthResolver
from ..config import ProbeSettings, load_probe_settings
from ..errors import AuthResolutionError
from ..http.client import HttpClient, create_default_http_client
from ..log import EventLogger, get_event_logger
from ..models.auth import is_supported_policy
from ..models.probe import Endpoint, ProbeConfiguration, Sample
from ..models.report import RunSummary
from .aggregator import ResultAggregator
from .channel import Channel
from .context import ProbeContext
from .dispatcher import Dispatcher
from .executor import RequestExecutor
from .pool import WorkerPool


def check_global_auth(config: ProbeConfiguration, logger: EventLogger) -> None:
    """Fail fast when an unsupported global policy would apply to at least one endpoint."""
    if is_supported_policy(config.auth):
        return
    if all(endpoint.auth is not None for endpoint in config.endpoints):
        return
    auth_type = getattr(config.auth, "kind", type(config.auth).__name__)
    logger.error("Error getting authentication header", auth_type=auth_type)
    raise AuthResolutionError(f"unsupported auth type: {auth_type}")


def _log_summary(summary: RunSummary, logger: EventLogger) -> None:
    if summary.cancelled:
        logger.warning(
            "Probe cancelled",
            dispatched=summary.dispatched,
            processed=summary.processed,
            successful_requests=summary.succeeded,
            failed_requests=summary.failed,
        )
    if summary.sample_count > 0:
        logger.info(
            "Test completed",
            total_requests=summary.processed,
            successful_requests=summary.succeeded,
            failed_requests=summary.failed,
            duration=summary.elapsed,
            avg_response_time=summary.average,
        )
    else:
        logger.warning("No requests were successful", failed_requests=summary.failed, duration=summary.elapsed)


def run(
    context: ProbeContext | None,
    config: ProbeConfiguration,
    logger: EventLogger | None = None,
    *,
    http_client: HttpClient | None = None,
    settings: ProbeSettings | None = None,
    token_cache: TokenCache | None = None,
) -> RunSummary:
    """
    Execute one probe run and block until it completes or ``context`` is cancelled.

    Per-job failures are counted, not raised. The only error raised is
    :class:`AuthResolutionError` for an unsupported global auth policy, before
    any job is dispatched.
    """
    context = context or ProbeContext()
    logger = logger or get_event_logger()
    settings = settings or load_probe_settings()
    check_global_auth(config, logger)

    owns_client = http_client is None
    client = http_client or create_default_http_client(settings, max_connections=config.concurrency)
    if token_cache is None and settings.token_cache_ttl > 0:
        token_cache = TokenCache(settings.token_cache_ttl)

    try:
        resolver = AuthResolver(client, logger, token_cache=token_cache, token_timeout=config.request_timeout)
        executor = RequestExecutor(client, logger)
        # Both channels hold the whole workload, so producers never block on them.
        jobs: Channel[Endpoint] = Channel(config.total_jobs, poll_interval=settings.poll_interval)
        results: Channel[Sample] = Channel(config.total_jobs, poll_interval=settings.poll_interval)

        dispatcher = Dispatcher(context, config, jobs, logger)
        pool = WorkerPool(
            context,
            config,
            jobs,
            results,
            resolver,
            executor,
            logger,
            user_agent=settings.user_agent,
            poll_interval=settings.poll_interval,
        )
        aggregator = ResultAggregator(results)

        logger.info(
            "Starting probe",
            endpoints=len(config.endpoints),
            total_jobs=config.total_jobs,
            concurrency=config.concurrency,
            timeout_ms=config.request_timeout_ms,
        )
        started = time.perf_counter()
        pool.start()
        producer = threading.Thread(target=dispatcher.run, name="enchante-dispatcher", daemon=True)
        producer.start()

        aggregator.consume()
        producer.join()
        pool.join()
        elapsed = time.perf_counter() - started

        summary = aggregator.finalize(
            pool.counters,
            elapsed=elapsed,
            dispatched=dispatcher.dispatched,
            cancelled=dispatcher.cancelled or pool.cancelled,
        )
        _log_summary(summary, logger)
        return summary
    finally:
        if owns_client:
            client.close()
