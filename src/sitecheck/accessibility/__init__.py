# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Randomized HTTP accessibility property check."""

from .probes import (
    DEFAULT_ITERATIONS,
    EDGE_CASE_PATHS,
    METHODS,
    USER_AGENTS,
    VALID_PATHS,
    generate_probes,
)
from .runner import DEFAULT_THRESHOLD, check_accessibility, classify, execute_probes, tally

__all__ = [
    "DEFAULT_ITERATIONS",
    "DEFAULT_THRESHOLD",
    "EDGE_CASE_PATHS",
    "METHODS",
    "USER_AGENTS",
    "VALID_PATHS",
    "check_accessibility",
    "classify",
    "execute_probes",
    "generate_probes",
    "tally",
]
