# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import random
import threading

import pytest

from sitecheck.accessibility import (
    EDGE_CASE_PATHS,
    USER_AGENTS,
    VALID_PATHS,
    check_accessibility,
    classify,
    execute_probes,
    generate_probes,
    tally,
)
from sitecheck.config import Settings
from sitecheck.errors import ErrorCategory
from sitecheck.http import HttpRequest, HttpResponse, SimulatedHttpClient, StubHttpClient
from sitecheck.models import ProbeOutcome, ProbeSpec

BASE = "http://localhost:8080"


class PathStatusClient:
    """Answers per path; unknown paths get 404."""

    def __init__(self, statuses=None):
        self.statuses = statuses or {"/": 200, "/index.html": 200, "/style.css": 200}
        self.threads = set()
        self.closed = False
        self._lock = threading.Lock()

    def request(self, request: HttpRequest) -> HttpResponse:
        with self._lock:
            self.threads.add(threading.get_ident())
        path = request.url[len(BASE):] or "/"
        return HttpResponse(ok=True, status_code=self.statuses.get(path, 404), url=request.url)

    def close(self):
        self.closed = True


def _spec(iteration=1, path="/", method="GET"):
    return ProbeSpec(iteration=iteration, path=path, method=method)


def test_generate_probes_population():
    specs = generate_probes(120, random.Random(1))

    assert len(specs) == 120
    assert [s.iteration for s in specs] == list(range(1, 121))
    allowed = set(VALID_PATHS) | set(EDGE_CASE_PATHS)
    assert all(s.path in allowed for s in specs)
    assert {s.method for s in specs} == {"GET", "HEAD"}
    assert all(s.user_agent in USER_AGENTS for s in specs)
    # Paths only in the edge set come from the 20% branch.
    edge_only = [s for s in specs if s.path not in VALID_PATHS]
    assert 0 < len(edge_only) < 60


def test_generate_probes_is_reproducible():
    first = generate_probes(40, random.Random(99))
    second = generate_probes(40, random.Random(99))
    assert [(s.path, s.method, s.user_agent) for s in first] == [(s.path, s.method, s.user_agent) for s in second]


def test_generate_probes_get_only_and_bad_input():
    assert {s.method for s in generate_probes(30, random.Random(2), methods=("GET",))} == {"GET"}
    with pytest.raises(ValueError):
        generate_probes(0)
    with pytest.raises(ValueError):
        generate_probes(5, methods=())


@pytest.mark.parametrize("status", [200, 204, 301, 404, 500, 599])
def test_classify_counts_any_real_status_as_reachable(status):
    outcome = classify(_spec(), HttpResponse(ok=status < 400, status_code=status))
    assert outcome.succeeded
    assert outcome.status_code == status
    assert outcome.error_category == ErrorCategory.NONE


@pytest.mark.parametrize("status", [100, 199, 600, 999])
def test_classify_rejects_out_of_range_status(status):
    outcome = classify(_spec(), HttpResponse(ok=False, status_code=status))
    assert not outcome.succeeded
    assert outcome.status_code is None
    assert outcome.error_category == ErrorCategory.INVALID_STATUS


def test_classify_transport_failure():
    response = HttpResponse(ok=False, error_type="ReadTimeout", error_message="timed out")
    outcome = classify(_spec(iteration=7, path="/style.css", method="HEAD"), response)

    assert not outcome.succeeded
    assert outcome.error_category == ErrorCategory.TIMEOUT
    assert outcome.describe() == "Iteration 7: HEAD /style.css → timed out"


def test_execute_probes_keeps_spec_order_across_workers():
    specs = generate_probes(60, random.Random(5))
    client = PathStatusClient()

    outcomes = execute_probes(client, BASE, specs, workers=3)

    assert [o.spec for o in outcomes] == specs
    assert len(client.threads) <= 3


def test_execute_probes_turns_client_exceptions_into_failures():
    class ExplodingClient:
        def request(self, request):
            raise RuntimeError("boom")

        def close(self):
            return None

    outcomes = execute_probes(ExplodingClient(), BASE, [_spec(1), _spec(2)], workers=2)
    assert [o.succeeded for o in outcomes] == [False, False]
    assert outcomes[0].error_message == "boom"


def test_tally_distribution_sums_to_successes():
    outcomes = [
        ProbeOutcome(_spec(1), status_code=200),
        ProbeOutcome(_spec(2), status_code=200),
        ProbeOutcome(_spec(3), status_code=404),
        ProbeOutcome(_spec(4), error_category=ErrorCategory.CONNECTION_ERROR, error_message="refused"),
    ]
    report = tally(outcomes, threshold=0.95)

    assert report.total == 4
    assert report.successes == 3
    assert report.failures == 1
    assert report.distribution == {200: 2, 404: 1}
    assert sum(report.distribution.values()) == report.successes
    assert report.success_rate == 0.75
    assert not report.passed
    assert report.errors == ["Iteration 4: GET / → refused"]


def test_threshold_boundary():
    ok = [ProbeOutcome(_spec(i), status_code=200) for i in range(1, 115)]
    failed = [ProbeOutcome(_spec(i), error_message="refused") for i in range(115, 121)]
    assert tally(ok + failed, threshold=0.95).passed  # 114/120 == 0.95

    failed = [ProbeOutcome(_spec(i), error_message="refused") for i in range(114, 121)]
    assert not tally(ok[:-1] + failed, threshold=0.95).passed


def test_empty_report_never_passes():
    report = tally([], threshold=0.0)
    assert report.success_rate == 0.0
    assert not report.passed


def test_check_accessibility_against_healthy_site():
    progress = []
    report = check_accessibility(
        BASE,
        iterations=120,
        seed=11,
        client=PathStatusClient(),
        settings=Settings(),
        on_progress=progress.append,
    )

    assert report.total == 120
    assert report.successes == 120
    assert report.passed
    assert set(report.distribution) <= {200, 404}
    assert sum(report.distribution.values()) == 120
    assert all(o.spec.iteration % 20 == 0 for o in progress)
    assert len(progress) == 6


def test_check_accessibility_server_errors_still_count_as_reachable():
    client = StubHttpClient(default=HttpResponse(ok=False, status_code=500))
    report = check_accessibility(BASE, iterations=40, seed=1, client=client, settings=Settings())
    assert report.passed
    assert report.distribution == {500: 40}


def test_check_accessibility_unreachable_target():
    report = check_accessibility(
        "http://localhost:1",
        iterations=30,
        seed=1,
        client=StubHttpClient(),
        settings=Settings(),
    )
    assert report.successes == 0
    assert report.success_rate == 0.0
    assert report.distribution == {}
    assert not report.passed
    assert len(report.errors) == 30


def test_check_accessibility_simulated_run_is_reproducible():
    def run():
        return check_accessibility(
            BASE,
            iterations=120,
            seed=21,
            workers=1,
            client=SimulatedHttpClient(seed=21),
            settings=Settings(),
        )

    first, second = run(), run()
    assert first.distribution == second.distribution
    assert first.successes == second.successes


def test_check_accessibility_closes_client_it_creates(monkeypatch):
    created = []

    def factory(settings):
        client = PathStatusClient()
        created.append(client)
        return client

    from sitecheck.accessibility import runner

    monkeypatch.setattr(runner, "create_probe_client", factory)
    report = check_accessibility(BASE, iterations=10, seed=3, settings=Settings())

    assert report.passed
    assert created and created[0].closed


def test_check_accessibility_uses_settings_defaults():
    settings = Settings(base_url=BASE + "/", iterations=25, workers=2, success_threshold=0.5, seed=8)
    report = check_accessibility(client=PathStatusClient(), settings=settings)
    assert report.total == 25
    assert report.threshold == 0.5
    assert report.seed == 8
    assert report.base_url == BASE
