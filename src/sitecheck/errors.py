# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
from collections.abc import Sequence
from enum import Enum

import httpx


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    SSL_ERROR = "SSL_ERROR"
    PROTOCOL_ERROR = "PROTOCOL_ERROR"
    INVALID_STATUS = "INVALID_STATUS"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


class SiteCheckError(Exception):
    """Base class for sitecheck failures."""


class SetupError(SiteCheckError):
    """Fatal setup failure; nothing further can run."""


class DescriptorNotFoundError(SetupError):
    """A configuration file the validator needs does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"file not found: {path}")


class OrchestratorError(SiteCheckError):
    """A container orchestrator command exited nonzero."""

    def __init__(self, command: Sequence[str], returncode: int | None, stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(f"`{' '.join(self.command)}` exited with {returncode}{detail}")


class ReadinessTimeoutError(SiteCheckError):
    """A bounded polling loop ran out of attempts."""

    def __init__(self, target: str, attempts: int, condition: str = "ready"):
        self.target = target
        self.attempts = attempts
        self.condition = condition
        super().__init__(f"{target} not {condition} after {attempts} attempts")


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (httpx.RemoteProtocolError, httpx.LocalProtocolError)):
        return ErrorCategory.PROTOCOL_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, (TimeoutError, socket.timeout)):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


_ERROR_TYPE_CATEGORIES = {
    "ConnectTimeout": ErrorCategory.TIMEOUT,
    "ReadTimeout": ErrorCategory.TIMEOUT,
    "WriteTimeout": ErrorCategory.TIMEOUT,
    "PoolTimeout": ErrorCategory.TIMEOUT,
    "TimeoutException": ErrorCategory.TIMEOUT,
    "TimeoutError": ErrorCategory.TIMEOUT,
    "ConnectError": ErrorCategory.CONNECTION_ERROR,
    "ConnectionRefusedError": ErrorCategory.CONNECTION_ERROR,
    "ConnectionResetError": ErrorCategory.CONNECTION_ERROR,
    "ReadError": ErrorCategory.CONNECTION_ERROR,
    "WriteError": ErrorCategory.CONNECTION_ERROR,
    "RemoteProtocolError": ErrorCategory.PROTOCOL_ERROR,
    "LocalProtocolError": ErrorCategory.PROTOCOL_ERROR,
    "SSLError": ErrorCategory.SSL_ERROR,
    "gaierror": ErrorCategory.DNS_ERROR,
}


def categorize_error_type(error_type: str | None) -> ErrorCategory:
    """Categorize a response whose exception was already flattened to a type name."""
    if not error_type:
        return ErrorCategory.NONE
    return _ERROR_TYPE_CATEGORIES.get(error_type, ErrorCategory.UNKNOWN_ERROR)


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Request timed out",
        ErrorCategory.CONNECTION_ERROR: "Connection refused or reset",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.PROTOCOL_ERROR: "Malformed HTTP response",
        ErrorCategory.INVALID_STATUS: "Status code outside 200-599",
        ErrorCategory.UNKNOWN_ERROR: "Network error during probe",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "Probe failed due to network error")


__all__ = [
    "DescriptorNotFoundError",
    "ErrorCategory",
    "OrchestratorError",
    "ReadinessTimeoutError",
    "SetupError",
    "SiteCheckError",
    "categorize_error_type",
    "categorize_exception",
    "error_category_to_reason",
]
