# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Static checks over the Nginx config and compose descriptor text."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import DescriptorNotFoundError
from .models.check import CheckResult, Recorder, Reporter, SuiteResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternCheck:
    """A named assertion that every one of ``patterns`` occurs in a file."""

    name: str
    patterns: tuple[str, ...]
    flags: int = re.MULTILINE

    def missing(self, text: str) -> list[str]:
        return [p for p in self.patterns if re.search(p, text, self.flags) is None]

    def matches(self, text: str) -> bool:
        return not self.missing(text)


def _check(name: str, *patterns: str) -> PatternCheck:
    return PatternCheck(name=name, patterns=tuple(patterns))


NGINX_CHECKS: tuple[PatternCheck, ...] = (
    _check("Nginx listens on port 80", r"^\s*listen\s+80\b"),
    _check("Nginx document root is set", r"^\s*root\s+/usr/share/nginx/html\s*;"),
    _check("Nginx index file is index.html", r"^\s*index\s+[^;]*\bindex\.html\b"),
    _check("X-Frame-Options header is set", r"^\s*add_header\s+X-Frame-Options\s+\"?SAMEORIGIN\"?"),
    _check("X-Content-Type-Options header is set", r"^\s*add_header\s+X-Content-Type-Options\s+\"?nosniff\"?"),
    _check("X-XSS-Protection header is set", r"^\s*add_header\s+X-XSS-Protection\s+\"1;\s*mode=block\""),
    _check("Gzip compression is enabled", r"^\s*gzip\s+on\s*;"),
    _check("Static assets expire after 1 year", r"^\s*expires\s+1y\s*;"),
    _check("Static assets are publicly cacheable", r"^\s*add_header\s+Cache-Control\s+\"[^\"]*\bpublic\b"),
    _check("MIME types are included", r"^\s*include\s+\S*mime\.types\s*;"),
    _check("Custom 404 error page is configured", r"^\s*error_page\s+[^;]*\b404\b"),
    _check("Custom 5xx error page is configured", r"^\s*error_page\s+[^;]*\b50[0-4]\b"),
)

COMPOSE_CHECKS: tuple[PatternCheck, ...] = (
    _check("Compose uses an nginx image", r"^\s*image:\s*[\"']?nginx(:[\w.\-]+)?[\"']?\s*$"),
    _check("Compose container name is set", r"^\s*container_name:\s*\S+"),
    _check("Compose maps port 8080 to 80", r"^\s*-\s*[\"']?8080:80[\"']?\s*$"),
    _check(
        "Compose mounts static content",
        r"^\s*-\s*[\"']?\./public:/usr/share/nginx/html(:ro)?[\"']?\s*$",
    ),
    _check(
        "Compose mounts nginx.conf",
        r"^\s*-\s*[\"']?\./nginx/nginx\.conf:/etc/nginx/nginx\.conf(:ro)?[\"']?\s*$",
    ),
    _check(
        "Compose mounts are read-only",
        r"^\s*-\s*[\"']?[^\s#\"']+:/usr/share/nginx/html:ro\b",
        r"^\s*-\s*[\"']?[^\s#\"']+:/etc/nginx/nginx\.conf:ro\b",
    ),
    _check("Compose restart policy is unless-stopped", r"^\s*restart:\s*[\"']?unless-stopped[\"']?\s*$"),
    _check(
        "Compose defines a health check",
        r"^\s*healthcheck:\s*$",
        r"^\s*test:.*\b(wget|curl)\b.*https?://localhost",
        r"^\s*interval:\s*\S+",
        r"^\s*timeout:\s*\S+",
        r"^\s*retries:\s*\d+",
        r"^\s*start_period:\s*\S+",
    ),
)


def check_text(text: str, checks: Sequence[PatternCheck], source: str = "<text>") -> list[CheckResult]:
    """Run every check against ``text``; one failure never stops the rest."""
    results = []
    for check in checks:
        missing = check.missing(text)
        if not missing:
            results.append(CheckResult.ok(check.name))
        else:
            results.append(CheckResult.fail(check.name, f"pattern not found in {source}: {missing[0]}"))
    return results


def read_descriptor(path: str | Path) -> str:
    file_path = Path(path)
    if not file_path.is_file():
        raise DescriptorNotFoundError(str(file_path))
    return file_path.read_text(encoding="utf-8")


def validate_file(path: str | Path, checks: Sequence[PatternCheck]) -> list[CheckResult]:
    """Check one file. Raises DescriptorNotFoundError if it does not exist."""
    text = read_descriptor(path)
    logger.debug("Validating %s against %d patterns", path, len(checks))
    return check_text(text, checks, source=str(path))


def validate_project(
    nginx_conf: str | Path = "nginx/nginx.conf",
    compose_file: str | Path = "docker-compose.yml",
    *,
    nginx_checks: Sequence[PatternCheck] = NGINX_CHECKS,
    compose_checks: Sequence[PatternCheck] = COMPOSE_CHECKS,
    reporter: Reporter | None = None,
) -> SuiteResult:
    """
    Validate both descriptors.

    Both files are read before any pattern runs, so a missing file fails the
    whole suite up front.
    """
    sources = (
        (str(nginx_conf), read_descriptor(nginx_conf), nginx_checks),
        (str(compose_file), read_descriptor(compose_file), compose_checks),
    )
    recorder = Recorder(reporter)
    for source, text, checks in sources:
        for result in check_text(text, checks, source=source):
            recorder.record(result)
    return recorder.result()


__all__ = [
    "COMPOSE_CHECKS",
    "NGINX_CHECKS",
    "PatternCheck",
    "check_text",
    "read_descriptor",
    "validate_file",
    "validate_project",
]
