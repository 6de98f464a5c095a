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
"""Error / debug sinks and logging setup.

The orchestrator and the config resolver never log user-facing messages
directly; they push them into two injected callables.  ``logging_sinks``
returns the pair used by the CLI and the formatter service.
"""

from __future__ import annotations

import logging
from typing import Callable

Sink = Callable[[str], None]

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def null_sink(message: str) -> None:
    """Discard *message*."""


def logging_sinks(logger: logging.Logger | None = None) -> tuple[Sink, Sink]:
    """Return ``(on_error, on_debug)`` sinks writing to *logger*."""
    log = logger or logging.getLogger("phpcbf_runner")

    def on_error(message: str) -> None:
        log.error("PHPCBF: ERROR %s", message)

    def on_debug(message: str) -> None:
        log.debug("PHPCBF: DEBUG %s", message)

    return on_error, on_debug


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
