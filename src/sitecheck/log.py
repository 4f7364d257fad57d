# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging setup for the sitecheck CLI."""

from __future__ import annotations

import logging
import os

DEFAULT_LOG_LEVEL = os.getenv("SITECHECK_LOG_LEVEL", "WARNING").upper()
# httpx logs every request at INFO; hundreds of probes drown the report.
NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(level: str | None = None, *, verbose: bool = False) -> None:
    """Configure root logging; ``verbose`` forces DEBUG for sitecheck only."""
    name = "DEBUG" if verbose else (level or DEFAULT_LOG_LEVEL).upper()
    numeric = getattr(logging, name, logging.WARNING)
    logging.basicConfig(level=numeric, format="%(levelname)s %(name)s: %(message)s")
    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(max(numeric, logging.WARNING))


__all__ = ["setup_logging"]
