# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
sitecheck package entrypoint.

Validation, deployment-lifecycle and HTTP accessibility checks for the
containerized static site. HTTP behavior is abstracted behind an injectable
client interface and the container runtime behind an injectable command
runner, so every check can run against fakes.
"""

from .accessibility import check_accessibility, generate_probes
from .config import Settings, load_settings
from .endpoints import check_endpoints
from .errors import (
    DescriptorNotFoundError,
    ErrorCategory,
    OrchestratorError,
    ReadinessTimeoutError,
    SetupError,
    SiteCheckError,
)
from .http import (
    HttpClient,
    HttpRequest,
    HttpResponse,
    HttpxClient,
    SimulatedHttpClient,
    StubHttpClient,
    create_default_http_client,
    create_probe_client,
)
from .lifecycle import DeploymentDriver, wait_until_ready
from .log import setup_logging
from .models import AccessibilityReport, CheckResult, ProbeOutcome, ProbeSpec, SuiteResult
from .orchestrator import ComposeOrchestrator
from .runtime import SiteCheck
from .validate import validate_project
from .version import __version__

__all__ = [
    "AccessibilityReport",
    "CheckResult",
    "ComposeOrchestrator",
    "DeploymentDriver",
    "DescriptorNotFoundError",
    "ErrorCategory",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpxClient",
    "OrchestratorError",
    "ProbeOutcome",
    "ProbeSpec",
    "ReadinessTimeoutError",
    "SetupError",
    "SimulatedHttpClient",
    "SiteCheck",
    "SiteCheckError",
    "StubHttpClient",
    "SuiteResult",
    "Settings",
    "__version__",
    "check_accessibility",
    "check_endpoints",
    "create_default_http_client",
    "create_probe_client",
    "generate_probes",
    "load_settings",
    "setup_logging",
    "validate_project",
    "wait_until_ready",
]
