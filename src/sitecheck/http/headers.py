# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Case-insensitive header access (RFC 9110 field names)."""

from __future__ import annotations

from collections.abc import Mapping


def normalize_headers(headers: Mapping[object, object] | None) -> dict[str, str]:
    """Return a lowercase-keyed copy of a header mapping."""
    if not headers:
        return {}
    out: dict[str, str] = {}
    for key, value in headers.items():
        if key is None:
            continue
        name = str(key).strip().lower()
        if name:
            out[name] = "" if value is None else str(value).strip()
    return out


def header_value(headers: Mapping[object, object] | None, name: str, default: str = "") -> str:
    """Return a header value using case-insensitive key matching."""
    if not headers or not name:
        return default
    return normalize_headers(headers).get(name.lower(), default)


def header_contains(headers: Mapping[object, object] | None, name: str, needle: str) -> bool:
    """True when header ``name`` is present and contains ``needle`` (case-insensitive)."""
    value = header_value(headers, name)
    return bool(value) and needle.lower() in value.lower()


__all__ = ["header_contains", "header_value", "normalize_headers"]
