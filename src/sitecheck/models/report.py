# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Accessibility property report."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

StatusDistribution = dict[int, int]


@dataclass
class AccessibilityReport:
    """
    Verdict of one accessibility property run.

    ``distribution`` only counts successful probes, so its values always sum to
    ``successes``.
    """

    total: int
    successes: int
    failures: int
    threshold: float
    distribution: StatusDistribution = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    base_url: str | None = None
    seed: int | None = None

    @property
    def success_rate(self) -> float:
        return self.successes / self.total if self.total else 0.0

    @property
    def passed(self) -> bool:
        return self.total > 0 and self.success_rate >= self.threshold

    def percentages(self) -> dict[int, float]:
        if not self.total:
            return {}
        return {code: count * 100.0 / self.total for code, count in sorted(self.distribution.items())}

    def to_dict(self) -> dict[str, Any]:
        return {
            "base_url": self.base_url,
            "seed": self.seed,
            "total": self.total,
            "successes": self.successes,
            "failures": self.failures,
            "success_rate": round(self.success_rate, 4),
            "threshold": self.threshold,
            "passed": self.passed,
            "distribution": {str(code): count for code, count in sorted(self.distribution.items())},
            "errors": list(self.errors),
        }
