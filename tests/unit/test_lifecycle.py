# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import signal
import time

import pytest

from sitecheck import lifecycle
from sitecheck.config import Settings
from sitecheck.errors import OrchestratorError, ReadinessTimeoutError, SetupError
from sitecheck.http import HttpRequest, HttpResponse
from sitecheck.lifecycle import DeploymentDriver, wait_until_ready, wait_until_unreachable

INSPECT = {
    "State": {"Running": True, "Health": {"Status": "healthy"}},
    "NetworkSettings": {"Ports": {"80/tcp": [{"HostIp": "0.0.0.0", "HostPort": "8080"}]}},
    "HostConfig": {"RestartPolicy": {"Name": "unless-stopped"}},
    "Mounts": [
        {"Source": "/srv/public", "Destination": "/usr/share/nginx/html"},
        {"Source": "/srv/nginx/nginx.conf", "Destination": "/etc/nginx/nginx.conf"},
    ],
}


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(time, "sleep", lambda _: None)


class FakeOrchestrator:
    container_name = "extensible-web-app"

    def __init__(self, inspect=None, fail_on=(), logs="start worker processes\n"):
        self.running = False
        self.inspect_data = inspect or INSPECT
        self.fail_on = set(fail_on)
        self.log_text = logs
        self.calls = []

    def _maybe_fail(self, name):
        self.calls.append(name)
        if name in self.fail_on:
            raise OrchestratorError(["docker", "compose", name], 1, f"{name} failed")

    def ensure_ready(self):
        self._maybe_fail("ensure_ready")

    def up(self):
        self._maybe_fail("up")
        self.running = True

    def down(self):
        self._maybe_fail("down")
        self.running = False

    def restart(self):
        self._maybe_fail("restart")
        self.running = True

    def ps(self, *, all=False, status=None):
        return [self.container_name] if self.running else []

    def is_present(self):
        return self.running

    def inspect(self):
        if not self.running:
            raise OrchestratorError(["docker", "inspect", self.container_name], 1, "no such container")
        return self.inspect_data

    def health_status(self):
        return str(((self.inspect().get("State") or {}).get("Health") or {}).get("Status") or "none")

    def logs(self, tail=None):
        return self.log_text


class ServiceClient:
    """Answers 200 while the fake container runs, connection refused otherwise."""

    def __init__(self, orchestrator, warmup=0):
        self.orchestrator = orchestrator
        self.warmup = warmup
        self.requests = []

    def request(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        if self.orchestrator.running and self.warmup <= 0:
            return HttpResponse(ok=True, status_code=200, url=request.url)
        self.warmup -= 1
        return HttpResponse(ok=False, url=request.url, error_type="ConnectError", error_message="refused")

    def close(self):
        return None


class SequenceClient:
    def __init__(self, statuses):
        self.statuses = list(statuses)
        self.calls = 0

    def request(self, request):
        status = self.statuses[min(self.calls, len(self.statuses) - 1)]
        self.calls += 1
        if status is None:
            return HttpResponse(ok=False, error_type="ConnectError", error_message="refused")
        return HttpResponse(ok=status < 400, status_code=status)

    def close(self):
        return None


def _settings(**overrides):
    values = {"ready_attempts": 5, "health_attempts": 3, "shutdown_attempts": 3, "ready_interval": 0.0}
    values.update(overrides)
    return Settings(**values)


def _driver(orchestrator=None, client=None, **overrides):
    orchestrator = orchestrator or FakeOrchestrator()
    client = client or ServiceClient(orchestrator)
    return DeploymentDriver(orchestrator, client, _settings(**overrides))


def test_wait_until_ready_counts_attempts():
    client = SequenceClient([None, None, 200])
    assert wait_until_ready(client, "http://localhost:8080/", attempts=5, interval=0) == 3


def test_wait_until_ready_accepts_error_status():
    assert wait_until_ready(SequenceClient([503]), "http://localhost:8080/", attempts=2) == 1


def test_wait_until_ready_times_out():
    client = SequenceClient([None])
    with pytest.raises(ReadinessTimeoutError) as excinfo:
        wait_until_ready(client, "http://localhost:8080/", attempts=4, interval=0)
    assert client.calls == 4
    assert excinfo.value.attempts == 4


def test_wait_until_ready_sleeps_between_attempts_only(monkeypatch):
    sleeps = []
    monkeypatch.setattr(time, "sleep", sleeps.append)
    with pytest.raises(ReadinessTimeoutError):
        wait_until_ready(SequenceClient([None]), "http://localhost:8080/", attempts=3, interval=0.5)
    assert sleeps == [0.5, 0.5]


def test_wait_until_unreachable():
    assert wait_until_unreachable(SequenceClient([200, None]), "http://localhost:8080/", attempts=3)
    assert not wait_until_unreachable(SequenceClient([200]), "http://localhost:8080/", attempts=3)


def test_start_waits_for_listener():
    orchestrator = FakeOrchestrator()
    driver = _driver(orchestrator, ServiceClient(orchestrator, warmup=2))

    assert driver.start() == 3
    assert driver.started


def test_start_failure_is_fatal_and_leaves_nothing_to_clean():
    orchestrator = FakeOrchestrator(fail_on={"up"})
    driver = _driver(orchestrator)

    with pytest.raises(SetupError, match="Failed to start container"):
        driver.start()
    assert not driver.started
    driver.cleanup()
    assert "down" not in orchestrator.calls


def test_start_twice_is_rejected():
    driver = _driver()
    driver.start()
    with pytest.raises(SetupError):
        driver.start()


def test_introspect_all_checks_pass():
    driver = _driver()
    driver.start()
    suite = driver.introspect()

    assert suite.ok, suite.failures()
    assert len(suite) == 8
    assert suite.get("Port mapping is configured correctly (8080:80)").passed
    assert suite.get("Container restart policy is set to 'unless-stopped'").passed


def test_introspect_failures_are_independent():
    data = dict(INSPECT)
    data["HostConfig"] = {"RestartPolicy": {"Name": "always"}}
    data["Mounts"] = [{"Destination": "/usr/share/nginx/html"}]
    data["State"] = {"Running": True, "Health": {"Status": "unhealthy"}}
    orchestrator = FakeOrchestrator(inspect=data, logs="")
    driver = _driver(orchestrator)
    driver.start()

    suite = driver.introspect()

    assert {r.name for r in suite.failures()} == {
        "Container health check passes",
        "Container logs show successful startup",
        "Nginx config volume is mounted correctly",
        "Container restart policy is set to 'unless-stopped'",
    }
    assert suite.get("Container restart policy is set to 'unless-stopped'").message == "restart policy is 'always'"
    assert suite.get("Static files volume is mounted correctly").passed


def test_health_check_times_out_while_starting():
    data = dict(INSPECT, State={"Running": True, "Health": {"Status": "starting"}})
    driver = _driver(FakeOrchestrator(inspect=data))
    driver.start()

    result = driver.introspect().get("Container health check passes")
    assert not result.passed
    assert "starting" in result.message


def test_port_mapping_mismatch():
    driver = _driver(base_url="http://localhost:9090")
    driver.orchestrator.running = True
    result = driver.introspect().get("Port mapping is configured correctly (9090:80)")
    assert not result.passed
    assert "8080" in result.message


def test_stop_releases_container_and_port():
    driver = _driver()
    driver.start()
    suite = driver.stop()

    assert suite.ok, suite.failures()
    assert [r.name for r in suite.results] == [
        "docker compose down executes successfully",
        "Container is stopped and removed",
        "Port 8080 is released after shutdown",
        "No orphaned containers remain",
    ]
    assert not driver.started


def test_stop_reports_down_failure():
    orchestrator = FakeOrchestrator(fail_on={"down"})
    driver = _driver(orchestrator)
    driver.start()

    suite = driver.stop()
    assert len(suite) == 1
    assert not suite.ok
    assert driver.started


def test_restart_recovers():
    driver = _driver()
    driver.start()
    suite = driver.restart()
    assert suite.ok
    assert suite.get("Service remains accessible after restart").message == "ready after 1 attempt(s)"


def test_restart_failure_is_recorded():
    orchestrator = FakeOrchestrator(fail_on={"restart"})
    driver = _driver(orchestrator)
    driver.start()

    suite = driver.restart()
    assert not suite.get("docker compose restart works").passed
    assert suite.get("Service remains accessible after restart").passed


def test_cleanup_is_idempotent():
    orchestrator = FakeOrchestrator()
    driver = _driver(orchestrator)
    driver.start()

    driver.cleanup()
    driver.cleanup()

    assert orchestrator.calls.count("down") == 1


def test_cleanup_logs_down_failure(caplog):
    orchestrator = FakeOrchestrator(fail_on={"down"})
    driver = _driver(orchestrator)
    driver.start()

    driver.cleanup()

    assert not driver.started
    assert "Failed to stop container cleanly" in caplog.text


def test_managed_tears_down_on_error():
    orchestrator = FakeOrchestrator()
    driver = _driver(orchestrator)
    previous = signal.getsignal(signal.SIGTERM)

    with pytest.raises(RuntimeError):
        with driver.managed():
            assert orchestrator.running
            raise RuntimeError("check crashed")

    assert not orchestrator.running
    assert "down" in orchestrator.calls
    assert signal.getsignal(signal.SIGTERM) == previous


def test_managed_tears_down_on_readiness_timeout():
    orchestrator = FakeOrchestrator()
    driver = _driver(orchestrator, ServiceClient(orchestrator, warmup=100))

    with pytest.raises(ReadinessTimeoutError):
        with driver.managed():
            pass

    assert orchestrator.calls[-1] == "down"
    assert not orchestrator.running


def test_signal_handler_cleans_up_and_exits():
    orchestrator = FakeOrchestrator()
    driver = _driver(orchestrator)
    driver.start()

    with pytest.raises(SystemExit) as excinfo:
        driver._handle_signal(signal.SIGTERM, None)

    assert excinfo.value.code == 128 + signal.SIGTERM
    assert not orchestrator.running


def test_run_deployment_suite_passes_and_ends_torn_down():
    orchestrator = FakeOrchestrator()
    reported = []
    driver = DeploymentDriver(orchestrator, ServiceClient(orchestrator), _settings(), reporter=reported.append)

    suite = driver.run_deployment_suite()

    assert suite.ok, suite.failures()
    assert [r.name for r in suite.results] == [r.name for r in reported]
    assert suite.results[0].name == "docker compose up starts the service"
    assert suite.get("Container starts again for restart test").passed
    assert suite.results[-1].name == "Service remains accessible after restart"
    assert not orchestrator.running
    assert orchestrator.calls[:2] == ["ensure_ready", "down"]
    assert orchestrator.calls[-1] == "down"


def test_run_deployment_suite_aborts_on_failed_up():
    orchestrator = FakeOrchestrator(fail_on={"up"})
    driver = _driver(orchestrator)

    with pytest.raises(SetupError):
        driver.run_deployment_suite()
    assert orchestrator.calls == ["ensure_ready", "down", "up"]


def test_startup_log_pattern():
    assert lifecycle.STARTUP_LOG_RE.search("nginx: ready for start up")
    assert not lifecycle.STARTUP_LOG_RE.search("")


class InterruptedDownOrchestrator(FakeOrchestrator):
    """Delivers a real signal to this process while ``down`` is running."""

    def __init__(self, signum):
        super().__init__()
        self.signum = signum

    def down(self):
        super().down()
        signal.raise_signal(self.signum)


@pytest.mark.parametrize("signum", [signal.SIGINT, signal.SIGTERM])
def test_signal_during_teardown_finishes_cleanup_then_exits(signum):
    orchestrator = InterruptedDownOrchestrator(signum)
    driver = _driver(orchestrator)
    previous = signal.getsignal(signum)

    with pytest.raises(SystemExit) as excinfo:
        with driver.managed():
            pass

    assert excinfo.value.code == 128 + signum
    assert orchestrator.calls.count("down") == 1
    assert not orchestrator.running
    assert not driver.started
    assert signal.getsignal(signum) == previous


def test_handler_reentered_from_down_defers_exit():
    orchestrator = FakeOrchestrator()
    driver = _driver(orchestrator)
    driver.start()

    original_down = orchestrator.down

    def down():
        original_down()
        driver._handle_signal(signal.SIGTERM, None)
        assert driver.started

    orchestrator.down = down

    with pytest.raises(SystemExit) as excinfo:
        driver.cleanup()

    assert excinfo.value.code == 128 + signal.SIGTERM
    assert orchestrator.calls.count("down") == 1
    assert not driver.started
    driver.cleanup()
    assert orchestrator.calls.count("down") == 1
