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
"""Ruleset config discovery by upward directory walk.

Starting from the directory that contains a PHP file, each ancestor
directory is listed and its entries are checked against the recognized
ruleset file names.  The nearest directory with a match wins; the search
does not continue upward once something is found.

Listing failures (permission denied, vanished directory ...) are reported
through the error sink and the walk moves on to the next ancestor.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from phpcbf_runner.options import DEFAULT_CONFIG_FILENAMES
from phpcbf_runner.sinks import Sink, null_sink

logger = logging.getLogger("phpcbf_runner.config_search")


def ancestor_directories(path: str | Path) -> Iterator[str]:
    """Yield the directories to scan for *path*, nearest first.

    A path naming an existing directory starts the walk at itself, any other
    path at its parent.  One segment is removed per step; empty candidates
    (the bare root of an absolute POSIX path) are skipped.
    """
    path = os.path.abspath(str(path))
    if os.path.isdir(path):
        segments = path.rstrip(os.sep).split(os.sep)
    else:
        segments = path.split(os.sep)
        segments.pop()

    while segments:
        candidate = os.sep.join(segments)
        segments.pop()

        if not candidate:
            continue

        # "C:" alone means the drive's current directory, not its root
        if candidate.endswith(":") and os.sep == "\\":
            candidate += os.sep

        yield candidate


def first_match(directory: str, entries: Iterable[str], names: Sequence[str]) -> str | None:
    """Joined path of the first entry (sorted listing order) found in *names*."""
    wanted = set(names)
    for entry in sorted(entries):
        if entry in wanted:
            return os.path.join(directory, entry)
    return None


class ConfigResolver:
    """Find the ruleset file that applies to a PHP file.

    Usage::

        resolver = ConfigResolver(on_error=print)
        standard = await resolver.resolve("/project/src/Controller.php")
        # -> "/project/phpcs.xml" or None
    """

    def __init__(
        self,
        config_filenames: Sequence[str] = DEFAULT_CONFIG_FILENAMES,
        on_error: Sink = null_sink,
    ) -> None:
        self.config_filenames = tuple(config_filenames)
        self.on_error = on_error

    async def resolve(self, path: str | Path) -> str | None:
        """Return the nearest ruleset file for *path*, or None."""
        loop = asyncio.get_running_loop()
        for directory in ancestor_directories(path):
            try:
                entries = await loop.run_in_executor(None, os.listdir, directory)
            except OSError as exc:
                self._report_listing_error(directory, exc)
                continue

            match = first_match(directory, entries, self.config_filenames)
            if match:
                logger.debug("Ruleset for %s: %s", path, match)
                return match

        logger.debug("No ruleset found for %s", path)
        return None

    def find(self, path: str | Path) -> str | None:
        """Synchronous variant of :meth:`resolve`."""
        for directory in ancestor_directories(path):
            try:
                entries = os.listdir(directory)
            except OSError as exc:
                self._report_listing_error(directory, exc)
                continue

            match = first_match(directory, entries, self.config_filenames)
            if match:
                return match
        return None

    def _report_listing_error(self, directory: str, exc: OSError) -> None:
        logger.debug("Cannot list %s: %s", directory, exc)
        self.on_error(f"{directory} - {exc}")
