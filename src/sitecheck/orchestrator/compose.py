# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Thin wrapper over the docker compose CLI."""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from ..config import DEFAULT_CONTAINER_NAME
from ..errors import OrchestratorError, SetupError

logger = logging.getLogger(__name__)

DEFAULT_COMMAND_TIMEOUT = 120.0

CommandRunner = Callable[..., "subprocess.CompletedProcess[str]"]


def _run(args: Sequence[str], *, cwd: str | None = None, timeout: float | None = DEFAULT_COMMAND_TIMEOUT) -> "subprocess.CompletedProcess[str]":
    return subprocess.run(
        list(args),
        cwd=cwd,
        capture_output=True,
        text=True,
        timeout=timeout,
        check=False,
    )


def detect_compose_command(runner: CommandRunner = _run) -> list[str] | None:
    """Prefer the ``docker compose`` plugin, fall back to legacy ``docker-compose``."""
    if shutil.which("docker"):
        try:
            completed = runner(["docker", "compose", "version"], timeout=15)
        except (OSError, subprocess.SubprocessError) as exc:
            logger.debug("docker compose version failed: %s", exc)
        else:
            if completed.returncode == 0:
                return ["docker", "compose"]
    if shutil.which("docker-compose"):
        return ["docker-compose"]
    return None


def container_runtime_available(runner: CommandRunner = _run) -> bool:
    return detect_compose_command(runner) is not None


class ComposeOrchestrator:
    """
    Runs compose/docker commands for a single-service project.

    Every call goes through ``runner`` (``subprocess.run`` semantics) so tests can
    substitute a fake. Nonzero exits raise OrchestratorError; a missing binary
    raises SetupError.
    """

    def __init__(
        self,
        project_dir: str | Path = ".",
        compose_file: str = "docker-compose.yml",
        container_name: str = DEFAULT_CONTAINER_NAME,
        *,
        runner: CommandRunner = _run,
        compose_command: Sequence[str] | None = None,
        timeout: float = DEFAULT_COMMAND_TIMEOUT,
    ):
        self.project_dir = str(project_dir)
        self.compose_file = compose_file
        self.container_name = container_name
        self.timeout = timeout
        self._runner = runner
        self._compose_command = list(compose_command) if compose_command else None

    @property
    def compose_path(self) -> Path:
        return Path(self.project_dir) / self.compose_file

    def ensure_ready(self) -> None:
        """Fail fast when the runtime or the descriptor is missing."""
        self._compose()
        if not self.compose_path.is_file():
            raise SetupError(f"{self.compose_file} not found in {self.project_dir}")

    def _compose(self) -> list[str]:
        if self._compose_command is None:
            detected = detect_compose_command(self._runner)
            if detected is None:
                raise SetupError("Docker Compose is not installed or not in PATH")
            self._compose_command = detected
        return list(self._compose_command)

    def _completed(self, args: Sequence[str], *, timeout: float | None = None) -> "subprocess.CompletedProcess[str]":
        command = list(args)
        logger.debug("Running %s", " ".join(command))
        try:
            completed = self._runner(command, cwd=self.project_dir, timeout=timeout or self.timeout)
        except FileNotFoundError as exc:
            raise SetupError(f"{command[0]} is not installed or not in PATH") from exc
        except subprocess.TimeoutExpired as exc:
            raise OrchestratorError(command, None, f"timed out after {exc.timeout}s") from exc
        if completed.returncode != 0:
            raise OrchestratorError(command, completed.returncode, completed.stderr or "")
        return completed

    def _exec(self, args: Sequence[str], *, timeout: float | None = None) -> str:
        return self._completed(args, timeout=timeout).stdout or ""

    def _compose_exec(self, *args: str) -> str:
        return self._exec([*self._compose(), "-f", self.compose_file, *args])

    def up(self) -> str:
        return self._compose_exec("up", "-d")

    def down(self) -> str:
        return self._compose_exec("down")

    def restart(self) -> str:
        return self._compose_exec("restart")

    def ps(self, *, all: bool = False, status: str | None = None) -> list[str]:
        """Names of containers matching this project's container name."""
        args = ["docker", "ps"]
        if all:
            args.append("-a")
        args += ["--filter", f"name={self.container_name}"]
        if status:
            args += ["--filter", f"status={status}"]
        args += ["--format", "{{.Names}}"]
        output = self._exec(args)
        return [line.strip() for line in output.splitlines() if line.strip() == self.container_name]

    def is_present(self) -> bool:
        return bool(self.ps(all=True))

    def inspect(self) -> dict[str, Any]:
        output = self._exec(["docker", "inspect", self.container_name])
        try:
            data = json.loads(output or "[]")
        except json.JSONDecodeError as exc:
            raise OrchestratorError(["docker", "inspect", self.container_name], 0, f"invalid JSON: {exc}") from exc
        if not data:
            raise OrchestratorError(["docker", "inspect", self.container_name], 0, "no such container")
        return data[0]

    def health_status(self) -> str:
        state = self.inspect().get("State") or {}
        return str((state.get("Health") or {}).get("Status") or "none")

    def logs(self, tail: int | None = None) -> str:
        args = ["docker", "logs"]
        if tail:
            args += ["--tail", str(tail)]
        args.append(self.container_name)
        # nginx writes its startup notices to stderr.
        completed = self._completed(args)
        return (completed.stdout or "") + (completed.stderr or "")


__all__ = [
    "CommandRunner",
    "ComposeOrchestrator",
    "container_runtime_available",
    "detect_compose_command",
]
