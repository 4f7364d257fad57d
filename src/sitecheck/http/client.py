# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP client abstraction and factories."""

from __future__ import annotations

import logging
from typing import Protocol

from ..config import Settings, load_settings
from .models import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)


class HttpClient(Protocol):
    """Minimal protocol for issuing HTTP requests."""

    def request(self, request: HttpRequest) -> HttpResponse: ...

    def close(self) -> None:  # pragma: no cover - optional for adapters
        ...


def create_default_http_client(settings: Settings | None = None) -> HttpClient:
    """Factory for the default httpx-backed client."""
    from .httpx_client import HttpxClient

    return HttpxClient(settings or load_settings())


def create_probe_client(settings: Settings | None = None, *, simulate: bool | None = None) -> HttpClient:
    """
    Pick the probe executor.

    ``simulate=None`` selects the simulated client only when no container runtime
    is available on this host.
    """
    settings = settings or load_settings()
    if simulate is None:
        from ..orchestrator.compose import container_runtime_available

        simulate = not container_runtime_available()
        if simulate:
            logger.warning("No container runtime detected; probing a simulated service")
    if simulate:
        from .adapters import SimulatedHttpClient

        return SimulatedHttpClient(seed=settings.seed)
    return create_default_http_client(settings)
