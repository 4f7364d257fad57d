# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Assertions about what the running site serves: content, headers, 404s."""

from __future__ import annotations

import logging
from collections.abc import Callable

from .http import HttpClient, HttpRequest, HttpResponse, header_contains, header_value, join_url
from .models.check import Recorder, Reporter, SuiteResult

logger = logging.getLogger(__name__)

WELCOME_TEXT = "Welcome to Extensible Web App"
SECURITY_HEADERS: dict[str, str] = {
    "X-Frame-Options": "SAMEORIGIN",
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
}

Assertion = Callable[[HttpResponse], tuple[bool, str]]


def _status(expected: int) -> Assertion:
    def check(response: HttpResponse) -> tuple[bool, str]:
        if response.status_code == expected:
            return True, ""
        got = response.status_code if response.status_code is not None else response.error_message or "no response"
        return False, f"expected status {expected}, got {got}"

    return check


def _content_type(needle: str) -> Assertion:
    def check(response: HttpResponse) -> tuple[bool, str]:
        if header_contains(response.headers, "Content-Type", needle):
            return True, ""
        return False, f"Content-Type is {header_value(response.headers, 'Content-Type') or 'missing'}"

    return check


def _body_contains(needle: str) -> Assertion:
    def check(response: HttpResponse) -> tuple[bool, str]:
        return needle in response.text, "" if needle in response.text else f"body does not contain {needle!r}"

    return check


def _header_equals(name: str, expected: str) -> Assertion:
    def check(response: HttpResponse) -> tuple[bool, str]:
        value = header_value(response.headers, name)
        return value == expected, "" if value == expected else f"{name} is {value or 'missing'}"

    return check


def _header_contains(name: str, needle: str) -> Assertion:
    def check(response: HttpResponse) -> tuple[bool, str]:
        if header_contains(response.headers, name, needle):
            return True, ""
        return False, f"{name} is {header_value(response.headers, name) or 'missing'}"

    return check


def _all(*assertions: Assertion) -> Assertion:
    def check(response: HttpResponse) -> tuple[bool, str]:
        for assertion in assertions:
            passed, message = assertion(response)
            if not passed:
                return False, message
        return True, ""

    return check


ENDPOINT_CHECKS: tuple[tuple[str, str, str, Assertion], ...] = (
    ("Should serve index.html from root URL", "GET", "/", _all(_status(200), _content_type("text/html"))),
    (
        "Should return HTML content with welcome message",
        "GET",
        "/",
        _all(_status(200), _body_contains(WELCOME_TEXT), _body_contains("<!DOCTYPE html>")),
    ),
    ("Should serve /index.html directly", "GET", "/index.html", _all(_status(200), _content_type("text/html"))),
    ("Should serve CSS files", "GET", "/style.css", _status(200)),
    ("Should return correct Content-Type for HTML", "HEAD", "/", _content_type("text/html")),
    ("Should return correct Content-Type for CSS", "HEAD", "/style.css", _content_type("text/css")),
    *(
        (f"Should include {name} header", "HEAD", "/", _header_equals(name, value))
        for name, value in SECURITY_HEADERS.items()
    ),
    ("Should set Cache-Control header for CSS files", "HEAD", "/style.css", _header_contains("Cache-Control", "public")),
    ("Should return 404 for non-existent files", "GET", "/nonexistent.html", _status(404)),
    ("Should identify as nginx server", "HEAD", "/", _header_contains("Server", "nginx")),
)


def check_endpoints(client: HttpClient, base_url: str, *, reporter: Reporter | None = None) -> SuiteResult:
    """Run every endpoint assertion; each issues its own request and fails independently."""
    recorder = Recorder(reporter)
    for name, method, path, assertion in ENDPOINT_CHECKS:
        response = client.request(HttpRequest(url=join_url(base_url, path), method=method))
        if response.status_code is None:
            logger.debug("%s %s failed: %s", method, path, response.error_message)
        passed, message = assertion(response)
        recorder.check(name, passed, message)
    return recorder.result()


__all__ = ["ENDPOINT_CHECKS", "SECURITY_HEADERS", "WELCOME_TEXT", "check_endpoints"]
