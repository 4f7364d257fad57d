# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe request and outcome models."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..errors import ErrorCategory


@dataclass(frozen=True)
class ProbeSpec:
    iteration: int
    path: str
    method: str
    headers: dict[str, str] = field(default_factory=dict, compare=False)

    @property
    def user_agent(self) -> str:
        return self.headers.get("User-Agent", "")


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of one probe. ``status_code`` is None when no valid status line came back."""

    spec: ProbeSpec
    status_code: int | None = None
    elapsed: float = 0.0
    error_category: ErrorCategory = ErrorCategory.NONE
    error_message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 600

    def describe(self) -> str:
        result = str(self.status_code) if self.succeeded else (self.error_message or self.error_category.value)
        return f"Iteration {self.spec.iteration}: {self.spec.method} {self.spec.path} → {result}"
