# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers shared across probes."""

from __future__ import annotations

from urllib.parse import urlparse


def join_url(base_url: str, path: str) -> str:
    """
    Append an absolute request path to a base URL.

    Unlike ``urljoin`` this keeps any base path prefix, so
    ``join_url("http://host/app", "/style.css")`` is ``http://host/app/style.css``.
    """
    base = str(base_url or "").rstrip("/")
    raw_path = str(path or "/")
    if not raw_path.startswith("/"):
        raw_path = f"/{raw_path}"
    return f"{base}{raw_path}"


def host_port(base_url: str) -> tuple[str, int]:
    """Return (host, port) for a base URL, defaulting the port from the scheme."""
    parsed = urlparse(str(base_url or ""))
    port = parsed.port or (443 if parsed.scheme == "https" else 80)
    return parsed.hostname or "localhost", port


__all__ = ["host_port", "join_url"]
