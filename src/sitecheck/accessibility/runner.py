# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Execute probes, classify outcomes and compute the accessibility verdict."""

from __future__ import annotations

import logging
import random
from collections import Counter
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor

from ..config import Settings, load_settings
from ..errors import ErrorCategory, categorize_error_type
from ..http import HttpClient, HttpRequest, HttpResponse, create_probe_client, join_url
from ..models.probe import ProbeOutcome, ProbeSpec
from ..models.report import AccessibilityReport
from .probes import METHODS, generate_probes

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.95
PROGRESS_EVERY = 20

ProgressCallback = Callable[[ProbeOutcome], None]


def classify(spec: ProbeSpec, response: HttpResponse) -> ProbeOutcome:
    """
    Reduce a response to a probe outcome.

    Any status in [200, 600) counts as reachable, 4xx/5xx included. A missing
    or out-of-range status is a failure.
    """
    status = response.status_code
    if status is None:
        return ProbeOutcome(
            spec=spec,
            status_code=None,
            elapsed=response.elapsed,
            error_category=categorize_error_type(response.error_type),
            error_message=response.error_message or "no response",
        )
    if not isinstance(status, int) or isinstance(status, bool) or not 200 <= status < 600:
        return ProbeOutcome(
            spec=spec,
            status_code=None,
            elapsed=response.elapsed,
            error_category=ErrorCategory.INVALID_STATUS,
            error_message=f"unexpected status {status!r}",
        )
    return ProbeOutcome(spec=spec, status_code=status, elapsed=response.elapsed)


def _probe(client: HttpClient, base_url: str, spec: ProbeSpec) -> ProbeOutcome:
    request = HttpRequest(url=join_url(base_url, spec.path), method=spec.method, headers=dict(spec.headers))
    try:
        response = client.request(request)
    except Exception as exc:  # noqa: BLE001
        response = HttpResponse(ok=False, url=request.url, error_message=str(exc), error_type=type(exc).__name__)
    return classify(spec, response)


def execute_probes(
    client: HttpClient,
    base_url: str,
    specs: Sequence[ProbeSpec],
    *,
    workers: int = 3,
) -> list[ProbeOutcome]:
    """
    Run probes with a bounded worker pool.

    Workers share nothing; ``map`` hands back one outcome per spec in spec order
    and nothing is aggregated until every worker has finished.
    """
    if not specs:
        return []
    width = max(1, min(workers, len(specs)))
    if width == 1:
        return [_probe(client, base_url, spec) for spec in specs]
    with ThreadPoolExecutor(max_workers=width, thread_name_prefix="sitecheck-probe") as pool:
        return list(pool.map(lambda spec: _probe(client, base_url, spec), specs))


def tally(
    outcomes: Sequence[ProbeOutcome],
    *,
    threshold: float = DEFAULT_THRESHOLD,
    base_url: str | None = None,
    seed: int | None = None,
) -> AccessibilityReport:
    """Fold outcomes into a report. Failed probes stay out of the distribution."""
    distribution: Counter[int] = Counter()
    errors: list[str] = []
    for outcome in outcomes:
        if outcome.succeeded:
            distribution[outcome.status_code] += 1
        else:
            errors.append(outcome.describe())
    successes = sum(distribution.values())
    return AccessibilityReport(
        total=len(outcomes),
        successes=successes,
        failures=len(outcomes) - successes,
        threshold=threshold,
        distribution=dict(sorted(distribution.items())),
        errors=errors,
        base_url=base_url,
        seed=seed,
    )


def check_accessibility(
    base_url: str | None = None,
    *,
    iterations: int | None = None,
    seed: int | None = None,
    client: HttpClient | None = None,
    workers: int | None = None,
    threshold: float | None = None,
    methods: tuple[str, ...] = METHODS,
    settings: Settings | None = None,
    on_progress: ProgressCallback | None = None,
) -> AccessibilityReport:
    """
    Probe ``base_url`` with a randomized request population and judge reachability.

    Given the same seed, N and base URL the probe population is identical.
    """
    settings = settings or load_settings()
    base_url = (base_url or settings.base_url).rstrip("/")
    count = iterations if iterations is not None else settings.iterations
    seed = seed if seed is not None else settings.seed
    threshold = threshold if threshold is not None else settings.success_threshold
    width = workers if workers is not None else settings.workers

    specs = generate_probes(count, random.Random(seed), methods=methods)
    owns_client = client is None
    client = client or create_probe_client(settings)
    logger.info("Running %d probes against %s (workers=%d, seed=%s)", count, base_url, width, seed)
    try:
        outcomes = execute_probes(client, base_url, specs, workers=width)
    finally:
        if owns_client:
            client.close()

    for outcome in outcomes:
        if outcome.succeeded and outcome.spec.iteration % PROGRESS_EVERY == 0:
            logger.debug("%s", outcome.describe())
            if on_progress is not None:
                on_progress(outcome)
        elif not outcome.succeeded:
            logger.debug("Probe failed: %s", outcome.describe())

    report = tally(outcomes, threshold=threshold, base_url=base_url, seed=seed)
    logger.info("Success rate %.1f%% (threshold %.0f%%)", report.success_rate * 100, threshold * 100)
    return report


__all__ = [
    "DEFAULT_THRESHOLD",
    "check_accessibility",
    "classify",
    "execute_probes",
    "tally",
]
