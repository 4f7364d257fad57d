# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request and response records passed through HttpClient."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

Headers = dict[str, str]


@dataclass
class HttpRequest:
    """One request; ``timeout`` and ``connect_timeout`` override the settings defaults."""

    url: str
    method: str = "GET"
    headers: Headers | None = None
    timeout: float | None = None
    connect_timeout: float | None = None


@dataclass
class HttpResponse:
    """
    Normalized HTTP response.

    ``status_code is None`` means no status line was received (transport failure).
    """

    ok: bool
    status_code: int | None = None
    headers: Headers = field(default_factory=dict)
    text: str = ""
    url: str | None = None
    elapsed: float = 0.0
    error_message: str | None = None
    error_type: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def transport_ok(self) -> bool:
        """True when a status line came back, whatever the status."""
        return self.status_code is not None
