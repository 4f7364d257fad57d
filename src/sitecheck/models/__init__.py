# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for sitecheck."""

from ..http.models import Headers, HttpRequest, HttpResponse
from .check import CheckResult, Recorder, Reporter, SuiteResult
from .probe import ProbeOutcome, ProbeSpec
from .report import AccessibilityReport, StatusDistribution

__all__ = [
    "AccessibilityReport",
    "CheckResult",
    "Headers",
    "HttpRequest",
    "HttpResponse",
    "ProbeOutcome",
    "ProbeSpec",
    "Recorder",
    "Reporter",
    "StatusDistribution",
    "SuiteResult",
]
