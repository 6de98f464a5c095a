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
"""Error taxonomy for a phpcbf format call.

Every failure of a format call is classified into one ``ErrorKind``.
The kinds map 1:1 to the messages shown to the user, so callers can surface
``FormatError.message`` verbatim.

phpcbf exit codes:
  - 0: no fixable errors were found, nothing was fixed
  - 1: all fixable errors were fixed
  - 2: phpcbf failed to fix some of the fixable errors it found
  - 3: general script execution error
  - 16 / 32 / 64: application config, fixer config, application exception
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Classified failure of a single format call."""

    TEMP_FILE_CREATE_FAILED = "temp_file_create_failed"
    TEMP_FILE_DELETE_FAILED = "temp_file_delete_failed"
    EXECUTABLE_NOT_FOUND = "executable_not_found"
    EMPTY_FIX_RESULT = "empty_fix_result"
    GENERAL_EXECUTION_ERROR = "general_execution_error"
    APPLICATION_CONFIG_ERROR = "application_config_error"
    FIXER_CONFIG_ERROR = "fixer_config_error"
    APPLICATION_EXCEPTION = "application_exception"
    UNDEFINED_EXIT_CODE = "undefined_exit_code"
    EXECUTION_ERROR = "execution_error"


ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.TEMP_FILE_CREATE_FAILED: "PHPCBF: An error occurred while creating the temp file",
    ErrorKind.TEMP_FILE_DELETE_FAILED: "PHPCBF: An error occurred while deleting the temp file",
    ErrorKind.EXECUTABLE_NOT_FOUND: "PHPCBF: Executable path not found",
    ErrorKind.EMPTY_FIX_RESULT: "PHPCBF: Content is empty",
    ErrorKind.GENERAL_EXECUTION_ERROR: "PHPCBF: General script execution error",
    ErrorKind.APPLICATION_CONFIG_ERROR: "PHPCBF: Configuration error of the application",
    ErrorKind.FIXER_CONFIG_ERROR: "PHPCBF: Configuration error of a fixer",
    ErrorKind.APPLICATION_EXCEPTION: "PHPCBF: Exception raised within the application",
    ErrorKind.UNDEFINED_EXIT_CODE: "PHPCBF: An unhandled error occurred",
    ErrorKind.EXECUTION_ERROR: "PHPCBF: Execution error",
}


def error_message(kind: ErrorKind, detail: str = "") -> str:
    """User-facing message for *kind*, with an optional detail suffix."""
    base = ERROR_MESSAGES[kind]
    if detail:
        return f"{base}: {detail}"
    return base


class FormatError(Exception):
    """A classified failure of a format call."""

    def __init__(self, kind: ErrorKind, detail: str = "", message: str | None = None) -> None:
        self.kind = kind
        self.detail = detail
        self.message = message or error_message(kind, detail)
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"FormatError({self.kind.value!r}, {self.message!r})"
