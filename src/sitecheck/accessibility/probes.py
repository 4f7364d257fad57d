# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Randomized probe generation."""

from __future__ import annotations

import random

from ..models.probe import ProbeSpec

VALID_PATHS: tuple[str, ...] = ("/", "/style.css", "/index.html")
# Includes resources the site does not ship so 404 handling is exercised.
EDGE_CASE_PATHS: tuple[str, ...] = ("/", "/style.css", "/favicon.ico", "/robots.txt", "/nonexistent.html")
METHODS: tuple[str, ...] = ("GET", "HEAD")
USER_AGENTS: tuple[str, ...] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
    "curl/7.68.0",
    "sitecheck property test",
)
BASE_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
}
VALID_PATH_RATIO = 0.8
DEFAULT_ITERATIONS = 120


def random_path(rng: random.Random) -> str:
    if rng.random() < VALID_PATH_RATIO:
        return rng.choice(VALID_PATHS)
    return rng.choice(EDGE_CASE_PATHS)


def random_method(rng: random.Random, methods: tuple[str, ...] = METHODS) -> str:
    return rng.choice(methods)


def random_headers(rng: random.Random) -> dict[str, str]:
    headers = dict(BASE_HEADERS)
    headers["User-Agent"] = rng.choice(USER_AGENTS)
    return headers


def generate_probes(
    count: int = DEFAULT_ITERATIONS,
    rng: random.Random | None = None,
    *,
    methods: tuple[str, ...] = METHODS,
) -> list[ProbeSpec]:
    """Generate ``count`` independent probe specs, numbered from 1."""
    if count < 1:
        raise ValueError("probe count must be at least 1")
    if not methods:
        raise ValueError("at least one HTTP method is required")
    rng = rng or random.Random()
    return [
        ProbeSpec(
            iteration=i,
            path=random_path(rng),
            method=random_method(rng, methods),
            headers=random_headers(rng),
        )
        for i in range(1, count + 1)
    ]


__all__ = [
    "BASE_HEADERS",
    "DEFAULT_ITERATIONS",
    "EDGE_CASE_PATHS",
    "METHODS",
    "USER_AGENTS",
    "VALID_PATHS",
    "VALID_PATH_RATIO",
    "generate_probes",
]
