# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Named pass/fail assertions and their aggregate."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

Reporter = Callable[["CheckResult"], None]


@dataclass(frozen=True)
class CheckResult:
    name: str
    passed: bool
    message: str = ""

    @classmethod
    def ok(cls, name: str, message: str = "") -> "CheckResult":
        return cls(name=name, passed=True, message=message)

    @classmethod
    def fail(cls, name: str, message: str = "") -> "CheckResult":
        return cls(name=name, passed=False, message=message)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "passed": self.passed, "message": self.message}


@dataclass(frozen=True)
class SuiteResult:
    """
    Immutable fold of check results.

    Check functions return a SuiteResult (or a list of CheckResult) and callers
    combine them with ``merged``; there are no shared pass/fail counters.
    """

    results: tuple[CheckResult, ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, results: Iterable[CheckResult]) -> "SuiteResult":
        return cls(results=tuple(results))

    def with_result(self, result: CheckResult) -> "SuiteResult":
        return SuiteResult(results=self.results + (result,))

    def merged(self, *others: "SuiteResult") -> "SuiteResult":
        combined = self.results
        for other in others:
            combined = combined + other.results
        return SuiteResult(results=combined)

    @property
    def passed_count(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if not r.passed)

    @property
    def ok(self) -> bool:
        return self.failed_count == 0

    def failures(self) -> list[CheckResult]:
        return [r for r in self.results if not r.passed]

    def get(self, name: str) -> CheckResult | None:
        for result in self.results:
            if result.name == name:
                return result
        return None

    def __len__(self) -> int:
        return len(self.results)

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed_count,
            "failed": self.failed_count,
            "ok": self.ok,
            "checks": [r.to_dict() for r in self.results],
        }


class Recorder:
    """Collects results into a SuiteResult while forwarding each one to a reporter as it lands."""

    def __init__(self, reporter: Reporter | None = None):
        self._reporter = reporter
        self._results: list[CheckResult] = []

    def record(self, result: CheckResult) -> CheckResult:
        self._results.append(result)
        if self._reporter is not None:
            self._reporter(result)
        return result

    def check(self, name: str, passed: bool, message: str = "") -> CheckResult:
        return self.record(CheckResult(name=name, passed=bool(passed), message=message))

    def result(self) -> SuiteResult:
        return SuiteResult.of(self._results)
