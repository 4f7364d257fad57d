# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpClient implementation."""

from __future__ import annotations

import time

import httpx

from ..config import Settings, load_settings
from .client import HttpClient
from .models import HttpRequest, HttpResponse


class HttpxClient(HttpClient):
    """
    Synchronous httpx client; one instance is safe to share across probe workers.

    Transport failures are returned as ``HttpResponse(ok=False, status_code=None)``
    rather than raised.
    """

    def __init__(self, settings: Settings | None = None, client: httpx.Client | None = None):
        self.settings = settings or load_settings()
        self._client = client or httpx.Client(
            follow_redirects=False,
            timeout=httpx.Timeout(self.settings.request_timeout, connect=self.settings.connect_timeout),
        )

    def _timeout_for(self, request: HttpRequest) -> httpx.Timeout:
        total = request.timeout
        if total is None:
            total = self.settings.head_timeout if request.method.upper() == "HEAD" else self.settings.request_timeout
        connect = request.connect_timeout if request.connect_timeout is not None else self.settings.connect_timeout
        return httpx.Timeout(total, connect=min(connect, total))

    def request(self, request: HttpRequest) -> HttpResponse:
        headers = dict(request.headers or {})
        headers.setdefault("User-Agent", self.settings.user_agent)
        started = time.monotonic()
        try:
            resp = self._client.request(
                request.method,
                request.url,
                headers=headers,
                timeout=self._timeout_for(request),
            )
        except Exception as exc:  # noqa: BLE001
            return HttpResponse(
                ok=False,
                url=request.url,
                elapsed=time.monotonic() - started,
                error_message=str(exc) or type(exc).__name__,
                error_type=type(exc).__name__,
            )

        # HEAD carries no body; the status line alone is the signal.
        text = "" if request.method.upper() == "HEAD" else resp.text
        return HttpResponse(
            ok=resp.is_success,
            status_code=resp.status_code,
            headers={k.lower(): v for k, v in resp.headers.items()},
            text=text,
            url=str(resp.url),
            elapsed=time.monotonic() - started,
            meta={"http_version": resp.http_version},
        )

    def close(self) -> None:
        self._client.close()
