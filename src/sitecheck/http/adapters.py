# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Non-network HttpClient implementations."""

from __future__ import annotations

import random
import threading
from collections.abc import Mapping

from .client import HttpClient
from .models import HttpRequest, HttpResponse

# Roughly what the static site answers for the generated probe mix.
DEFAULT_SIMULATED_DISTRIBUTION: dict[int | None, float] = {
    200: 0.86,
    404: 0.13,
    None: 0.01,
}


class StubHttpClient(HttpClient):
    """Deterministic, programmable HttpClient for tests."""

    def __init__(self, responses: dict[str, HttpResponse] | None = None, default: HttpResponse | None = None):
        self._responses = responses or {}
        self._default = default
        self.requests: list[HttpRequest] = []
        self._lock = threading.Lock()

    def add(self, url: str, response: HttpResponse) -> None:
        self._responses[url] = response

    def request(self, request: HttpRequest) -> HttpResponse:
        with self._lock:
            self.requests.append(request)
        key = f"{request.method.upper()} {request.url}"
        if key in self._responses:
            return self._responses[key]
        if request.url in self._responses:
            return self._responses[request.url]
        if self._default is not None:
            return self._default
        return HttpResponse(
            ok=False,
            status_code=None,
            url=request.url,
            error_message="No stubbed response configured",
            error_type="ConnectError",
        )

    def close(self) -> None:
        return None


class SimulatedHttpClient(HttpClient):
    """
    Seeded fake service returning status codes drawn from a weighted distribution.

    A ``None`` key is a transport failure. Used when no container runtime is
    available so the probe pipeline can still be exercised end to end.
    """

    def __init__(
        self,
        distribution: Mapping[int | None, float] | None = None,
        *,
        seed: int | None = None,
        server: str = "nginx (simulated)",
    ):
        weights = dict(distribution if distribution is not None else DEFAULT_SIMULATED_DISTRIBUTION)
        if not weights or any(w < 0 for w in weights.values()) or sum(weights.values()) <= 0:
            raise ValueError("simulated distribution needs at least one positive weight")
        self._codes = list(weights.keys())
        self._weights = list(weights.values())
        self._rng = random.Random(seed)
        self._lock = threading.Lock()
        self.server = server
        self.calls = 0

    def request(self, request: HttpRequest) -> HttpResponse:
        with self._lock:
            self.calls += 1
            code = self._rng.choices(self._codes, weights=self._weights, k=1)[0]
        if code is None:
            return HttpResponse(
                ok=False,
                url=request.url,
                error_message="simulated connection reset",
                error_type="ConnectError",
            )
        return HttpResponse(
            ok=200 <= code < 400,
            status_code=code,
            headers={"server": self.server},
            url=request.url,
            meta={"simulated": True},
        )

    def close(self) -> None:
        return None
