# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level facade wiring settings, HTTP client and orchestrator together."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager, suppress
from pathlib import Path

from .accessibility import check_accessibility
from .config import Settings, load_settings
from .endpoints import check_endpoints
from .http import HttpClient, create_default_http_client
from .lifecycle import DeploymentDriver
from .models import AccessibilityReport, Reporter, SuiteResult
from .orchestrator import ComposeOrchestrator
from .validate import validate_project


class SiteCheck:
    """
    Shares one HTTP client and one orchestrator across all checks.

    The lifecycle driver and the probes hit the same service, so they should
    agree on base URL, timeouts and container name.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        http_client: HttpClient | None = None,
        orchestrator: ComposeOrchestrator | None = None,
        reporter: Reporter | None = None,
    ):
        self.settings = settings or load_settings()
        self.http_client = http_client or create_default_http_client(self.settings)
        self.orchestrator = orchestrator or ComposeOrchestrator(
            self.settings.project_dir,
            self.settings.compose_file,
            self.settings.container_name,
        )
        self.reporter = reporter

    def driver(self) -> DeploymentDriver:
        return DeploymentDriver(self.orchestrator, self.http_client, self.settings, self.reporter)

    def validate(self) -> SuiteResult:
        base = Path(self.settings.project_dir)
        return validate_project(
            base / self.settings.nginx_conf,
            base / self.settings.compose_file,
            reporter=self.reporter,
        )

    def endpoints(self) -> SuiteResult:
        return check_endpoints(self.http_client, self.settings.base_url, reporter=self.reporter)

    def accessibility(self, client: HttpClient | None = None, **overrides) -> AccessibilityReport:
        return check_accessibility(
            self.settings.base_url,
            client=client or self.http_client,
            settings=self.settings,
            **overrides,
        )

    def deploy(self) -> SuiteResult:
        return self.driver().run_deployment_suite()

    @contextmanager
    def deployed(self) -> Iterator[DeploymentDriver]:
        """Run the body against a freshly started instance, always torn down afterwards."""
        driver = self.driver()
        with driver.managed():
            yield driver

    def close(self) -> None:
        with suppress(Exception):
            if hasattr(self.http_client, "close"):
                self.http_client.close()

    def __enter__(self) -> "SiteCheck":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()
