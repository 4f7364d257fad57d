# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Deployment lifecycle driver: start, await readiness, introspect, stop, restart."""

from __future__ import annotations

import atexit
import logging
import re
import signal
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from .config import Settings, load_settings
from .errors import OrchestratorError, ReadinessTimeoutError, SetupError, SiteCheckError
from .http import HttpClient, HttpRequest, create_default_http_client, host_port, join_url
from .models.check import CheckResult, Recorder, Reporter, SuiteResult
from .orchestrator.compose import ComposeOrchestrator

logger = logging.getLogger(__name__)

STATIC_MOUNT = "/usr/share/nginx/html"
CONFIG_MOUNT = "/etc/nginx/nginx.conf"
CONTAINER_PORT = "80/tcp"
RESTART_POLICY = "unless-stopped"
STARTUP_LOG_RE = re.compile(r"start|ready|listening", re.IGNORECASE)

POLL_CONNECT_TIMEOUT = 1.0
POLL_TIMEOUT = 2.0
RELEASE_ATTEMPTS = 5


def _probe_status(client: HttpClient, url: str) -> int | None:
    response = client.request(
        HttpRequest(url=url, method="GET", timeout=POLL_TIMEOUT, connect_timeout=POLL_CONNECT_TIMEOUT)
    )
    status = response.status_code
    if status is not None and 200 <= status < 600:
        return status
    return None


def wait_until_ready(client: HttpClient, url: str, *, attempts: int = 30, interval: float = 1.0) -> int:
    """
    Poll ``url`` one request at a time until any status in [200, 600) comes back.

    Even an error status proves the listener is up. Returns the number of
    attempts used; raises ReadinessTimeoutError when the budget runs out.
    """
    for attempt in range(1, attempts + 1):
        status = _probe_status(client, url)
        if status is not None:
            logger.debug("%s answered %s on attempt %d", url, status, attempt)
            return attempt
        if attempt < attempts:
            time.sleep(interval)
    raise ReadinessTimeoutError(url, attempts)


def wait_until_unreachable(client: HttpClient, url: str, *, attempts: int = RELEASE_ATTEMPTS, interval: float = 1.0) -> bool:
    """True once a request to ``url`` fails at the transport level."""
    for attempt in range(1, attempts + 1):
        if _probe_status(client, url) is None:
            return True
        if attempt < attempts:
            time.sleep(interval)
    return False


def _wait_for(predicate: Callable[[], bool], *, attempts: int, interval: float) -> bool:
    for attempt in range(1, attempts + 1):
        if predicate():
            return True
        if attempt < attempts:
            time.sleep(interval)
    return False


class DeploymentDriver:
    """
    Drives one compose-managed instance through its lifecycle.

    Individual introspection and shutdown checks never raise; they are recorded
    as named results. Only a failed ``up`` (SetupError) or a readiness timeout
    escapes, and ``cleanup`` always runs ``down`` for an instance this driver
    started.
    """

    def __init__(
        self,
        orchestrator: ComposeOrchestrator | None = None,
        client: HttpClient | None = None,
        settings: Settings | None = None,
        reporter: Reporter | None = None,
    ):
        self.settings = settings or load_settings()
        self.orchestrator = orchestrator or ComposeOrchestrator(
            self.settings.project_dir,
            self.settings.compose_file,
            self.settings.container_name,
        )
        self.client = client or create_default_http_client(self.settings)
        self.reporter = reporter
        self.started = False
        self._cleanup_lock = threading.RLock()
        self._cleaning = False
        self._pending_signal: int | None = None
        self._previous_handlers: dict[int, Any] = {}

    @property
    def root_url(self) -> str:
        return join_url(self.settings.base_url, "/")

    # -- start / readiness -------------------------------------------------

    def start(self) -> int:
        """Bring the service up and wait for readiness. Returns readiness attempts used."""
        if self.started:
            raise SetupError("an instance started by this driver is already running")
        try:
            self.orchestrator.up()
        except OrchestratorError as exc:
            raise SetupError(f"Failed to start container: {exc}") from exc
        self.started = True
        logger.info("Container started; waiting for %s", self.root_url)
        return self.await_ready()

    def await_ready(self) -> int:
        return wait_until_ready(
            self.client,
            self.root_url,
            attempts=self.settings.ready_attempts,
            interval=self.settings.ready_interval,
        )

    # -- introspection -----------------------------------------------------

    def _attempt(self, recorder: Recorder, name: str, check: Callable[[], tuple[bool, str]]) -> CheckResult:
        try:
            passed, message = check()
        except SiteCheckError as exc:
            passed, message = False, str(exc)
        return recorder.check(name, passed, message)

    def _check_running(self) -> tuple[bool, str]:
        running = self.orchestrator.ps(status="running")
        return bool(running), "" if running else f"{self.orchestrator.container_name} is not running"

    def _check_port_binding(self) -> tuple[bool, str]:
        _, expected = host_port(self.settings.base_url)
        data = self.orchestrator.inspect()
        ports = (data.get("NetworkSettings") or {}).get("Ports") or {}
        bindings = ports.get(CONTAINER_PORT)
        if not bindings:
            bindings = ((data.get("HostConfig") or {}).get("PortBindings") or {}).get(CONTAINER_PORT) or []
        host_ports = sorted({str(b.get("HostPort")) for b in bindings if b.get("HostPort")})
        if str(expected) in host_ports:
            return True, ""
        return False, f"expected {expected}->{CONTAINER_PORT}, found {host_ports or 'no bindings'}"

    def _check_health(self) -> tuple[bool, str]:
        seen: list[str] = []

        def settled() -> bool:
            status = self.orchestrator.health_status()
            seen.append(status)
            return status in {"healthy", "unhealthy", "none"}

        if not _wait_for(settled, attempts=self.settings.health_attempts, interval=self.settings.ready_interval):
            return False, f"timeout waiting for health check (last status: {seen[-1] if seen else 'unknown'})"
        status = seen[-1]
        if status == "healthy":
            return True, ""
        if status == "none":
            return False, "container has no health check"
        return False, status

    def _check_mount(self, destination: str) -> tuple[bool, str]:
        mounts = self.orchestrator.inspect().get("Mounts") or []
        destinations = [str(m.get("Destination")) for m in mounts]
        if destination in destinations:
            return True, ""
        return False, f"{destination} not mounted (mounts: {destinations or 'none'})"

    def _check_restart_policy(self) -> tuple[bool, str]:
        policy = ((self.orchestrator.inspect().get("HostConfig") or {}).get("RestartPolicy") or {}).get("Name")
        return policy == RESTART_POLICY, "" if policy == RESTART_POLICY else f"restart policy is {policy!r}"

    def _check_startup_logs(self) -> tuple[bool, str]:
        found = bool(STARTUP_LOG_RE.search(self.orchestrator.logs()))
        return found, "" if found else "no startup lines in container logs"

    def _check_serves_root(self) -> tuple[bool, str]:
        status = _probe_status(self.client, self.root_url)
        return status == 200, "" if status == 200 else f"GET / returned {status or 'no response'}"

    def introspect(self) -> SuiteResult:
        """Assert container metadata. Each check is independent."""
        recorder = Recorder(self.reporter)
        self._attempt(recorder, "Container is created and running", self._check_running)
        _, port = host_port(self.settings.base_url)
        self._attempt(recorder, f"Port mapping is configured correctly ({port}:80)", self._check_port_binding)
        self._attempt(recorder, "Container health check passes", self._check_health)
        self._attempt(recorder, f"Service is accessible on {self.settings.base_url}", self._check_serves_root)
        self._attempt(recorder, "Container logs show successful startup", self._check_startup_logs)
        self._attempt(recorder, "Static files volume is mounted correctly", lambda: self._check_mount(STATIC_MOUNT))
        self._attempt(recorder, "Nginx config volume is mounted correctly", lambda: self._check_mount(CONFIG_MOUNT))
        self._attempt(recorder, f"Container restart policy is set to '{RESTART_POLICY}'", self._check_restart_policy)
        return recorder.result()

    # -- stop / restart ----------------------------------------------------

    def stop(self) -> SuiteResult:
        """Tear down and prove the container and the listener are gone."""
        recorder = Recorder(self.reporter)
        try:
            self.orchestrator.down()
        except SiteCheckError as exc:
            recorder.check("docker compose down executes successfully", False, str(exc))
            return recorder.result()
        self.started = False
        recorder.check("docker compose down executes successfully", True)

        self._attempt(
            recorder,
            "Container is stopped and removed",
            lambda: (
                _wait_for(
                    lambda: not self.orchestrator.is_present(),
                    attempts=self.settings.shutdown_attempts,
                    interval=self.settings.ready_interval,
                ),
                "container still exists",
            ),
        )
        _, port = host_port(self.settings.base_url)
        self._attempt(
            recorder,
            f"Port {port} is released after shutdown",
            lambda: (
                wait_until_unreachable(self.client, self.root_url, interval=self.settings.ready_interval),
                f"{self.root_url} still answers",
            ),
        )
        self._attempt(
            recorder,
            "No orphaned containers remain",
            lambda: (not self.orchestrator.is_present(), "container still listed by docker ps -a"),
        )
        return recorder.result()

    def restart(self) -> SuiteResult:
        """Restart the running service and confirm it recovers."""
        recorder = Recorder(self.reporter)
        try:
            self.orchestrator.restart()
        except SiteCheckError as exc:
            recorder.check("docker compose restart works", False, str(exc))
        else:
            recorder.check("docker compose restart works", True)
        try:
            attempts = self.await_ready()
        except ReadinessTimeoutError as exc:
            recorder.check("Service remains accessible after restart", False, str(exc))
        else:
            recorder.check("Service remains accessible after restart", True, f"ready after {attempts} attempt(s)")
        return recorder.result()

    # -- cleanup -----------------------------------------------------------

    def cleanup(self) -> None:
        """
        Idempotent teardown of an instance this driver started.

        A signal that lands while ``down`` runs is deferred: teardown finishes
        first, then SystemExit is raised for it.
        """
        with self._cleanup_lock:
            if self._cleaning or not self.started:
                return
            self._cleaning = True
            logger.info("Cleaning up: stopping %s", self.orchestrator.container_name)
            try:
                self.orchestrator.down()
            except SiteCheckError as exc:
                logger.warning("Failed to stop container cleanly: %s", exc)
            finally:
                self.started = False
                self._cleaning = False
        signum, self._pending_signal = self._pending_signal, None
        if signum is not None:
            raise SystemExit(128 + signum)

    def _handle_signal(self, signum: int, frame: Any) -> None:  # noqa: ARG002
        if self._cleaning:
            logger.warning("Received signal %d during teardown; exiting once it completes", signum)
            self._pending_signal = signum
            return
        logger.warning("Received signal %d, cleaning up", signum)
        self.cleanup()
        raise SystemExit(128 + signum)

    def install_signal_handlers(self) -> None:
        """Route SIGINT/SIGTERM and interpreter exit through ``cleanup``."""
        atexit.register(self.cleanup)
        if threading.current_thread() is not threading.main_thread():
            return
        for signum in (signal.SIGINT, signal.SIGTERM):
            self._previous_handlers[signum] = signal.signal(signum, self._handle_signal)

    def restore_signal_handlers(self) -> None:
        atexit.unregister(self.cleanup)
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()

    @contextmanager
    def managed(self) -> Iterator[DeploymentDriver]:
        """Start, yield, and always tear down, also on failure or interrupt."""
        self.install_signal_handlers()
        try:
            self.start()
            yield self
        finally:
            try:
                self.cleanup()
            finally:
                self.restore_signal_handlers()

    # -- full suite --------------------------------------------------------

    def run_deployment_suite(self) -> SuiteResult:
        """
        up -> introspect -> down -> up -> restart, always ending torn down.

        A failed ``up`` or a readiness timeout aborts the run after cleanup.
        """
        self.orchestrator.ensure_ready()
        try:
            self.orchestrator.down()
        except SiteCheckError as exc:
            logger.debug("Pre-run down failed (nothing to stop?): %s", exc)

        self.install_signal_handlers()
        try:
            attempts = self.start()
            started = CheckResult.ok("docker compose up starts the service", f"ready after {attempts} attempt(s)")
            suite = SuiteResult.of([self._report(started)])
            suite = suite.merged(self.introspect(), self.stop())
            attempts = self.start()
            restarted = CheckResult.ok("Container starts again for restart test", f"ready after {attempts} attempt(s)")
            suite = suite.merged(SuiteResult.of([self._report(restarted)]), self.restart())
        finally:
            try:
                self.cleanup()
            finally:
                self.restore_signal_handlers()
        return suite

    def _report(self, result: CheckResult) -> CheckResult:
        if self.reporter is not None:
            self.reporter(result)
        return result


__all__ = [
    "DeploymentDriver",
    "wait_until_ready",
    "wait_until_unreachable",
]
