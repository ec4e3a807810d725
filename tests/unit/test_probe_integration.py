# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import socket
import time

from enchante.config import ProbeSettings
from enchante.errors import ErrorCategory, NetworkError
from enchante.http import create_default_http_client
from enchante.log import MemoryEventLogger
from enchante.models import DisabledAuth, Endpoint, FixedDelay, NoDelay, OAuth2Auth, ProbeConfiguration
from enchante.probe import ProbeContext, RequestExecutor, run

SETTINGS = ProbeSettings(poll_interval=0.01)


def _unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_counts_get_and_post_separately(probe_server):
    config = ProbeConfiguration(
        endpoints=(
            Endpoint(url=probe_server.url + "/", method="GET"),
            Endpoint(url=probe_server.url + "/", method="POST", body='{"key": "value"}', headers={"Content-Type": "application/json"}),
        ),
        concurrency=2,
        repetitions=4,
        request_timeout_ms=1000,
    )
    start = time.perf_counter()
    summary = run(ProbeContext(), config, MemoryEventLogger(), settings=SETTINGS)

    assert time.perf_counter() - start > 0
    assert probe_server.methods["GET"] == 4
    assert probe_server.methods["POST"] == 4
    assert summary.succeeded == 8
    assert summary.failed == 0
    assert summary.average is not None and summary.average > 0


def test_oauth2_global_policy_with_endpoint_overrides(probe_server):
    base = probe_server.url
    config = ProbeConfiguration(
        endpoints=(
            Endpoint(url=base + "/inherit"),
            Endpoint(url=base + "/disabled", auth=DisabledAuth()),
            Endpoint(
                url=base + "/own",
                auth=OAuth2Auth(token_url=base + "/token/endpoint-token", client_id="endpoint-client", client_secret="s2"),
            ),
        ),
        concurrency=2,
        repetitions=1,
        request_timeout_ms=2000,
        delay=FixedDelay(10),
        auth=OAuth2Auth(token_url=base + "/token/global-token", client_id="test-client", client_secret="test-secret"),
    )
    summary = run(ProbeContext(), config, MemoryEventLogger(), settings=SETTINGS)

    assert summary.succeeded == 3
    assert dict(probe_server.authorization) == {
        "/inherit": "Bearer global-token",
        "/disabled": "",
        "/own": "Bearer endpoint-token",
    }
    client_ids = sorted(form["client_id"] for form in probe_server.token_requests)
    assert client_ids == ["endpoint-client", "test-client"]
    global_form = next(form for form in probe_server.token_requests if form["client_id"] == "test-client")
    assert global_form == {"client_id": "test-client", "client_secret": "test-secret", "grant_type": "client_credentials"}


def test_oauth2_token_fetched_per_request(probe_server):
    base = probe_server.url
    config = ProbeConfiguration(
        endpoints=(Endpoint(url=base + "/"),),
        concurrency=2,
        repetitions=5,
        auth=OAuth2Auth(token_url=base + "/token/t", client_id="c", client_secret="s"),
    )
    run(ProbeContext(), config, MemoryEventLogger(), settings=SETTINGS)
    assert len(probe_server.token_requests) == 5


def test_request_timeout_bounds_slow_responses(probe_server):
    probe_server.slow_seconds = 0.5
    client = create_default_http_client(SETTINGS)
    executor = RequestExecutor(client, MemoryEventLogger())
    try:
        start = time.perf_counter()
        try:
            executor.execute(Endpoint(url=probe_server.url + "/slow"), {}, NoDelay(), timeout=0.01)
        except NetworkError as exc:
            error = exc
        else:  # pragma: no cover - the request must not succeed
            raise AssertionError("expected a timeout")
        elapsed = time.perf_counter() - start
    finally:
        client.close()

    assert error.is_timeout
    assert elapsed < 0.4


def test_slow_endpoint_fails_run_job(probe_server):
    probe_server.slow_seconds = 0.05
    config = ProbeConfiguration(endpoints=(Endpoint(url=probe_server.url + "/slow"),), request_timeout_ms=10)
    summary = run(ProbeContext(), config, MemoryEventLogger(), settings=SETTINGS)
    assert summary.failed == 1
    assert summary.average is None


def test_unreachable_host_is_network_error():
    client = create_default_http_client(SETTINGS)
    logger = MemoryEventLogger()
    try:
        executor = RequestExecutor(client, logger)
        endpoint = Endpoint(url=f"http://127.0.0.1:{_unused_port()}/")
        try:
            executor.execute(endpoint, {}, NoDelay(), timeout=1.0)
        except NetworkError as exc:
            assert exc.category in {ErrorCategory.CONNECTION_ERROR, ErrorCategory.TIMEOUT}
        else:  # pragma: no cover
            raise AssertionError("expected NetworkError")
    finally:
        client.close()
    assert logger.find("Request failed")
    assert not logger.find("Received error status code")


def test_error_status_from_server_is_counted(probe_server):
    config = ProbeConfiguration(
        endpoints=(Endpoint(url=probe_server.url + "/status/503"), Endpoint(url=probe_server.url + "/status/302")),
        repetitions=2,
    )
    settings = ProbeSettings(poll_interval=0.01, allow_redirects=False)
    summary = run(ProbeContext(), config, MemoryEventLogger(), settings=settings)
    assert (summary.succeeded, summary.failed) == (2, 2)


def test_user_agent_header_is_sent(probe_server):
    seen = []
    original = probe_server.httpd.RequestHandlerClass.do_GET

    def capture(handler):
        seen.append(handler.headers.get("User-Agent"))
        original(handler)

    probe_server.httpd.RequestHandlerClass.do_GET = capture
    config = ProbeConfiguration(endpoints=(Endpoint(url=probe_server.url + "/", headers={"User-Agent": "ignored"}),))
    run(ProbeContext(), config, MemoryEventLogger(), settings=SETTINGS)
    assert seen == ["Mozilla/5.0 (compatible; EnchanteBot/1.0)"]
