# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP client exports."""

from .adapters import DEFAULT_SIMULATED_DISTRIBUTION, SimulatedHttpClient, StubHttpClient
from .client import HttpClient, create_default_http_client, create_probe_client
from .headers import header_contains, header_value, normalize_headers
from .httpx_client import HttpxClient
from .models import Headers, HttpRequest, HttpResponse
from .url import host_port, join_url

__all__ = [
    "DEFAULT_SIMULATED_DISTRIBUTION",
    "Headers",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpxClient",
    "SimulatedHttpClient",
    "StubHttpClient",
    "create_default_http_client",
    "create_probe_client",
    "header_contains",
    "header_value",
    "host_port",
    "join_url",
    "normalize_headers",
]
