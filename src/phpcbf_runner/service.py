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
"""Formatter service -- what an editor integration calls.

Combines the config search and the orchestrator into a document-level API:
  - ``format_document`` returns new text only when there is something to apply
  - ``reload`` swaps the options snapshot (configuration changed)
  - ``should_format_on_save`` decides whether a save should trigger a format

Errors never reach the caller as exceptions; they are logged and pushed to
the error sink verbatim, and the document is treated as unformatted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from phpcbf_runner.config_search import ConfigResolver
from phpcbf_runner.options import FormatOptions
from phpcbf_runner.orchestrator import FormatOrchestrator
from phpcbf_runner.results import InvocationResult
from phpcbf_runner.sinks import Sink, logging_sinks

logger = logging.getLogger("phpcbf_runner.service")

PHP_LANGUAGE_ID = "php"


@dataclass(frozen=True)
class FileReport:
    """Result of formatting one file in place."""

    path: Path
    result: InvocationResult | None  # None when the formatter is disabled
    changed: bool = False

    @property
    def failed(self) -> bool:
        return self.result is not None and not self.result.ok


class PhpcbfFormatter:
    """Document formatter backed by phpcbf."""

    def __init__(
        self,
        options: FormatOptions | None = None,
        on_error: Sink | None = None,
        on_debug: Sink | None = None,
        temp_dir: str | Path | None = None,
    ) -> None:
        default_error, default_debug = logging_sinks(logger)
        self._options = options or FormatOptions()
        self.on_error = on_error or default_error
        self.on_debug = on_debug or default_debug
        self.temp_dir = temp_dir

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------
    @property
    def options(self) -> FormatOptions:
        """Current options snapshot."""
        return self._options

    def reload(self, options: FormatOptions) -> None:
        """Replace the options snapshot; calls in flight keep the old one."""
        self._options = options
        logger.debug("Options reloaded: %s", options)

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------
    async def resolve_standard(
        self,
        file_path: str | Path | None,
        options: FormatOptions | None = None,
    ) -> str | None:
        """Standard to pass to phpcbf for *file_path*.

        With config search enabled, the nearest ruleset file overrides the
        configured standard.
        """
        options = options or self._options
        if not file_path or not options.config_search:
            return options.standard

        resolver = ConfigResolver(options.config_filenames, on_error=self.on_error)
        config_file = await resolver.resolve(file_path)
        return config_file or options.standard

    async def run(self, text: str, file_path: str | Path | None = None) -> InvocationResult:
        """Run phpcbf on *text* and return the raw invocation result."""
        options = self._options
        standard = await self.resolve_standard(file_path, options)
        orchestrator = FormatOrchestrator(
            options,
            on_error=self.on_error,
            on_debug=self.on_debug,
            temp_dir=self.temp_dir,
        )
        return await orchestrator.format(text, standard=standard)

    async def format_document(self, text: str, file_path: str | Path | None = None) -> str | None:
        """Formatted text for a document, or None when nothing should change.

        Both ``enable`` and ``document_formatting_provider`` must be on; with
        the provider off, document formatting requests are ignored.
        """
        options = self._options
        if not options.enable or not options.document_formatting_provider:
            return None

        result = await self.run(text, file_path)
        if not result.ok:
            self.on_error(result.message)
            return None

        if not result.has_content or result.content == text:
            return None
        return result.content

    async def format_file(self, path: str | Path) -> FileReport:
        """Format a file in place, writing it back only when phpcbf changed it."""
        path = Path(path)
        original = path.read_bytes().decode("utf-8")
        if not self._options.enable:
            return FileReport(path=path, result=None)

        result = await self.run(original, path)
        if not result.ok:
            self.on_error(result.message)
            return FileReport(path=path, result=result)

        if not result.has_content or result.content == original:
            return FileReport(path=path, result=result)

        path.write_bytes(result.content.encode("utf-8"))
        logger.info("Formatted %s", path)
        return FileReport(path=path, result=result, changed=True)

    def should_format_on_save(self, language_id: str, editor_format_on_save: bool = False) -> bool:
        """Whether saving a document should trigger a phpcbf format.

        The editor's own format-on-save already formats the document, so
        phpcbf only steps in when that is off and ``onsave`` is on.
        """
        return (
            language_id == PHP_LANGUAGE_ID
            and not editor_format_on_save
            and self._options.on_save
        )
