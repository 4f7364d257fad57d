# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Human-readable console output."""

from __future__ import annotations

import json
import sys
from typing import Any, TextIO

from .models.check import CheckResult, SuiteResult
from .models.report import AccessibilityReport

MAX_SAMPLE_ERRORS = 5


def _out(stream: TextIO | None) -> TextIO:
    return stream or sys.stdout


def print_check(result: CheckResult, stream: TextIO | None = None) -> None:
    """One line per check, printed as it completes."""
    mark = "PASSED" if result.passed else "FAILED"
    suffix = f" ({result.message})" if result.message and not result.passed else ""
    print(f"  {result.name}... {mark}{suffix}", file=_out(stream))


def print_summary(suite: SuiteResult, stream: TextIO | None = None) -> None:
    out = _out(stream)
    print("", file=out)
    print(f"Test Results: {suite.passed_count} passed, {suite.failed_count} failed", file=out)
    if suite.ok:
        print("All tests passed!", file=out)
    else:
        print("Some tests failed:", file=out)
        for failure in suite.failures():
            detail = f": {failure.message}" if failure.message else ""
            print(f"  - {failure.name}{detail}", file=out)


def format_percent(value: float) -> str:
    return f"{value:.1f}%"


def print_accessibility_report(report: AccessibilityReport, stream: TextIO | None = None) -> None:
    """Counts, success rate, status histogram and, on failure, sample errors."""
    out = _out(stream)
    print("", file=out)
    print("Property Test Results:", file=out)
    print(f"  Successful requests: {report.successes}", file=out)
    print(f"  Failed requests: {report.failures}", file=out)
    print(f"  Success rate: {format_percent(report.success_rate * 100)}", file=out)
    print("", file=out)
    print("Status Code Distribution:", file=out)
    for code, pct in report.percentages().items():
        print(f"   {code}: {report.distribution[code]} requests ({format_percent(pct)})", file=out)
    print("", file=out)
    threshold = format_percent(report.threshold * 100)
    achieved = format_percent(report.success_rate * 100)
    if report.passed:
        print("Property Test PASSED: localhost accessibility verified", file=out)
        print(f"  Achieved {achieved} success rate (threshold: {threshold})", file=out)
        return
    print("Property Test FAILED: accessibility issues detected", file=out)
    print(f"  Only achieved {achieved} success rate (threshold: {threshold})", file=out)
    if report.errors:
        print("  Sample errors encountered:", file=out)
        for error in report.errors[:MAX_SAMPLE_ERRORS]:
            print(f"   - {error}", file=out)
        if len(report.errors) > MAX_SAMPLE_ERRORS:
            print(f"   - ... and {len(report.errors) - MAX_SAMPLE_ERRORS} more errors", file=out)


def print_json(data: Any, stream: TextIO | None = None) -> None:
    out = _out(stream)
    payload = data.to_dict() if hasattr(data, "to_dict") else data
    json.dump(payload, out, indent=2, sort_keys=True)
    out.write("\n")


__all__ = [
    "print_accessibility_report",
    "print_check",
    "print_json",
    "print_summary",
]
