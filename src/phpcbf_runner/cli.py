# PHPCBF Runner
# Copyright (C) 2025 Phoenix Link (Pty) Ltd. All Rights Reserved.
#
# This file is part of PHPCBF Runner.
#
# PHPCBF Runner is dual-licensed:
#
# 1. Open Source: GNU Affero General Public License v3.0 (AGPL-3.0)
# 2. Commercial: Available from Phoenix Link (Pty) Ltd
#
# Contributions require a signed CLA. See COPYRIGHT.md and CLA.md.
"""
PHPCBF Runner CLI -- format PHP files in place with phpcbf.

Usage:
    phpcbf-runner src/Foo.php src/Bar.php
    phpcbf-runner --standard PSR12 --debug src/Foo.php
    phpcbf-runner --config-search --workspace . src/Foo.php
    phpcbf-runner --version
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence

from phpcbf_runner import __version__
from phpcbf_runner.options import FormatOptions, load_settings, resolve_executable_path
from phpcbf_runner.service import PhpcbfFormatter
from phpcbf_runner.sinks import configure_logging

logger = logging.getLogger("phpcbf_runner.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="phpcbf-runner",
        description="Format PHP files in place with phpcbf",
    )
    parser.add_argument("files", nargs="*", help="PHP files to format")
    parser.add_argument(
        "--settings",
        default=None,
        help="Path to settings.yaml (default: ~/.phpcbf/settings.yaml)",
    )
    parser.add_argument(
        "--executable",
        default=None,
        help="phpcbf executable (overrides settings, supports {{workspaceFolder}} and ~/)",
    )
    parser.add_argument("--standard", default=None, help="Ruleset name or path (overrides settings)")
    parser.add_argument(
        "--config-search",
        action="store_true",
        default=None,
        help="Use the nearest phpcs.xml / ruleset.xml above each file",
    )
    parser.add_argument("--debug", action="store_true", default=None, help="Verbose phpcbf output")
    parser.add_argument("--workspace", default=None, help="Workspace root for {{workspaceFolder}}")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    return parser


def options_from_args(args: argparse.Namespace) -> FormatOptions:
    """Settings file with command-line overrides applied."""
    workspace = str(Path(args.workspace).resolve()) if args.workspace else None
    options = load_settings(args.settings, workspace=workspace)

    changes: dict[str, object] = {}
    if args.executable:
        changes["executable_path"] = resolve_executable_path(args.executable, workspace)
    if args.standard:
        changes["standard"] = args.standard
    if args.config_search:
        changes["config_search"] = True
    if args.debug:
        changes["debug"] = True
    return options.replace(**changes) if changes else options


async def format_files(formatter: PhpcbfFormatter, files: Sequence[str]) -> int:
    """Format *files* concurrently; returns the number of failures."""

    async def _one(path: str) -> bool:
        try:
            report = await formatter.format_file(path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("%s: %s", path, exc)
            return False

        if report.result is None:
            status = "skipped (disabled)"
        elif report.failed:
            status = f"failed ({report.result.message})"
        else:
            status = "formatted" if report.changed else "unchanged"
        print(f"{path}: {status}")
        return not report.failed

    results = await asyncio.gather(*(_one(f) for f in files))
    return sum(1 for ok in results if not ok)


def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"phpcbf-runner {__version__}")
        return 0

    configure_logging("DEBUG" if args.debug else args.log_level)

    if not args.files:
        logger.error("No files given")
        return 2

    formatter = PhpcbfFormatter(options_from_args(args))
    failures = asyncio.run(format_files(formatter, args.files))
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
