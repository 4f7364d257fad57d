# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Container orchestrator integration."""

from .compose import CommandRunner, ComposeOrchestrator, container_runtime_available, detect_compose_command

__all__ = [
    "CommandRunner",
    "ComposeOrchestrator",
    "container_runtime_available",
    "detect_compose_command",
]
