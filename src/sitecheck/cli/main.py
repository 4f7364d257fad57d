# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""sitecheck CLI."""

from __future__ import annotations

import argparse
import logging
import sys
from contextlib import nullcontext

from ..config import Settings, load_settings
from ..errors import SiteCheckError
from ..http import create_probe_client
from ..log import setup_logging
from ..models import AccessibilityReport, ProbeOutcome, SuiteResult
from ..report import print_accessibility_report, print_check, print_json, print_summary
from ..runtime import SiteCheck

logger = logging.getLogger(__name__)


BASE_URL_HELP = "Service base URL (default: $SITECHECK_BASE_URL or http://localhost:8080)"
PROJECT_DIR_HELP = "Directory holding docker-compose.yml and nginx/"
JSON_HELP = "Output JSON instead of human-friendly lines"


def _common_options() -> argparse.ArgumentParser:
    # Accepted after the subcommand too; SUPPRESS keeps an omitted flag from
    # clobbering the value given before the subcommand.
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--base-url", default=argparse.SUPPRESS, help=BASE_URL_HELP)
    common.add_argument("--project-dir", default=argparse.SUPPRESS, help=PROJECT_DIR_HELP)
    common.add_argument("--json", action="store_true", default=argparse.SUPPRESS, help=JSON_HELP)
    return common


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sitecheck",
        description="Validate, deploy and probe the containerized static site",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--base-url", help=BASE_URL_HELP)
    parser.add_argument("--project-dir", help=PROJECT_DIR_HELP)
    parser.add_argument("--json", action="store_true", help=JSON_HELP)
    common = [_common_options()]
    sub = parser.add_subparsers(dest="command", required=True)

    validate = sub.add_parser("validate", parents=common, help="Statically check nginx.conf and docker-compose.yml")
    validate.add_argument("--nginx-conf", help="Path to the Nginx config (relative to the project dir)")
    validate.add_argument("--compose-file", help="Path to the compose descriptor (relative to the project dir)")

    endpoints = sub.add_parser("endpoints", parents=common, help="Check content, headers and 404 handling of the running site")
    endpoints.add_argument("--manage", action="store_true", help="Start the container first and tear it down after")

    sub.add_parser("deploy", parents=common, help="Exercise compose up, introspection, down and restart")

    access = sub.add_parser("accessibility", parents=common, help="Randomized HTTP accessibility property check")
    access.add_argument("--iterations", type=int, help="Number of probes (default: $TOTAL_ITERATIONS or 120)")
    access.add_argument("--seed", type=int, help="Seed for the probe generator")
    access.add_argument("--workers", type=int, help="Probe worker-pool width (default: 3)")
    access.add_argument("--threshold", type=float, help="Required success rate, 0-1 (default: 0.95)")
    access.add_argument("--get-only", action="store_true", help="Only issue GET probes")
    mode = access.add_mutually_exclusive_group()
    mode.add_argument("--simulate", dest="simulate", action="store_true", default=None, help="Probe a simulated service")
    mode.add_argument("--live", dest="simulate", action="store_false", help="Always probe the real service")
    access.add_argument("--manage", action="store_true", help="Start the container first and tear it down after")
    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = load_settings()
    if args.base_url:
        settings.base_url = args.base_url.rstrip("/")
    if args.project_dir:
        settings.project_dir = args.project_dir
    if getattr(args, "nginx_conf", None):
        settings.nginx_conf = args.nginx_conf
    if getattr(args, "compose_file", None):
        settings.compose_file = args.compose_file
    return settings


def _finish(suite: SuiteResult, args: argparse.Namespace) -> int:
    if args.json:
        print_json(suite)
    else:
        print_summary(suite)
    return 0 if suite.ok else 1


def _run_validate(args: argparse.Namespace, settings: Settings) -> int:
    with SiteCheck(settings, reporter=None if args.json else print_check) as site:
        if not args.json:
            print("Running configuration validation")
        return _finish(site.validate(), args)


def _run_endpoints(args: argparse.Namespace, settings: Settings) -> int:
    with SiteCheck(settings, reporter=None if args.json else print_check) as site:
        with site.deployed() if args.manage else nullcontext():
            if not args.json:
                print(f"Checking endpoints on {settings.base_url}")
            suite = site.endpoints()
        return _finish(suite, args)


def _run_deploy(args: argparse.Namespace, settings: Settings) -> int:
    with SiteCheck(settings, reporter=None if args.json else print_check) as site:
        if not args.json:
            print("Running single-command deployment tests")
        return _finish(site.deploy(), args)


def _print_progress(outcome: ProbeOutcome) -> None:
    print(f"  {outcome.describe()}")


def _run_accessibility(args: argparse.Namespace, settings: Settings) -> int:
    if args.iterations is not None:
        if args.iterations < 1:
            raise SystemExit("--iterations must be at least 1")
        settings.iterations = args.iterations
    if args.seed is not None:
        settings.seed = args.seed
    if args.workers is not None:
        settings.workers = max(1, args.workers)
    if args.threshold is not None:
        if not 0.0 <= args.threshold <= 1.0:
            raise SystemExit("--threshold must be a fraction between 0 and 1")
        settings.success_threshold = args.threshold

    simulate = False if args.manage else args.simulate
    probe_client = create_probe_client(settings, simulate=simulate)
    methods = ("GET",) if args.get_only else ("GET", "HEAD")

    with SiteCheck(settings, reporter=None if args.json else print_check) as site:
        with site.deployed() if args.manage else nullcontext():
            if not args.json:
                print(f"Running {settings.iterations} property test iterations against {settings.base_url}")
            try:
                report: AccessibilityReport = site.accessibility(
                    client=probe_client,
                    methods=methods,
                    on_progress=None if args.json else _print_progress,
                )
            finally:
                probe_client.close()

    if args.json:
        print_json(report)
    else:
        print_accessibility_report(report)
    return 0 if report.passed else 1


COMMANDS = {
    "validate": _run_validate,
    "endpoints": _run_endpoints,
    "deploy": _run_deploy,
    "accessibility": _run_accessibility,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose)
    settings = _settings_from_args(args)

    try:
        return COMMANDS[args.command](args, settings)
    except SiteCheckError as exc:
        logger.debug("Fatal error", exc_info=True)
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
