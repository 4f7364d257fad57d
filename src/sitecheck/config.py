# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for sitecheck."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"sitecheck/{__version__}"
DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_CONTAINER_NAME = "extensible-web-app"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _optional_int_env(name: str, default: int | None) -> int | None:
    try:
        value = os.getenv(name)
        if value is None or not value.strip():
            return default
        return int(value)
    except ValueError:
        return default


@dataclass
class Settings:
    """Runtime defaults for probing, polling and orchestration."""

    base_url: str = DEFAULT_BASE_URL
    iterations: int = 120
    connect_timeout: float = 3.0
    request_timeout: float = 5.0
    head_timeout: float = 10.0
    workers: int = 3
    success_threshold: float = 0.95
    ready_attempts: int = 30
    ready_interval: float = 1.0
    health_attempts: int = 60
    shutdown_attempts: int = 30
    project_dir: str = "."
    compose_file: str = "docker-compose.yml"
    nginx_conf: str = "nginx/nginx.conf"
    container_name: str = DEFAULT_CONTAINER_NAME
    user_agent: str = DEFAULT_USER_AGENT
    seed: int | None = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables (evaluated at call time)."""
        iterations = _int_env("TOTAL_ITERATIONS", cls.iterations)
        if iterations <= 0:
            iterations = cls.iterations
        workers = _int_env("SITECHECK_WORKERS", cls.workers)
        if workers <= 0:
            workers = cls.workers
        threshold = _float_env("SITECHECK_SUCCESS_THRESHOLD", cls.success_threshold)
        if not 0.0 <= threshold <= 1.0:
            threshold = cls.success_threshold
        return cls(
            base_url=os.getenv("SITECHECK_BASE_URL", cls.base_url).rstrip("/"),
            iterations=iterations,
            connect_timeout=_float_env("SITECHECK_CONNECT_TIMEOUT", cls.connect_timeout),
            request_timeout=_float_env("SITECHECK_REQUEST_TIMEOUT", cls.request_timeout),
            head_timeout=_float_env("SITECHECK_HEAD_TIMEOUT", cls.head_timeout),
            workers=workers,
            success_threshold=threshold,
            ready_attempts=max(1, _int_env("SITECHECK_READY_ATTEMPTS", cls.ready_attempts)),
            ready_interval=_float_env("SITECHECK_READY_INTERVAL", cls.ready_interval),
            health_attempts=max(1, _int_env("SITECHECK_HEALTH_ATTEMPTS", cls.health_attempts)),
            shutdown_attempts=max(1, _int_env("SITECHECK_SHUTDOWN_ATTEMPTS", cls.shutdown_attempts)),
            project_dir=os.getenv("SITECHECK_PROJECT_DIR", cls.project_dir),
            compose_file=os.getenv("SITECHECK_COMPOSE_FILE", cls.compose_file),
            nginx_conf=os.getenv("SITECHECK_NGINX_CONF", cls.nginx_conf),
            container_name=os.getenv("SITECHECK_CONTAINER_NAME", cls.container_name),
            user_agent=os.getenv("SITECHECK_USER_AGENT", cls.user_agent),
            seed=_optional_int_env("SITECHECK_SEED", cls.seed),
        )


def load_settings() -> Settings:
    """Load settings from environment with sensible defaults."""
    return Settings.from_env()
