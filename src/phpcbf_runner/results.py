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
"""Structured outcome of one phpcbf invocation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from phpcbf_runner.errors import ErrorKind, FormatError, error_message


class Outcome(str, Enum):
    NO_FIXES_FOUND = "no_fixes_found"
    FIXED = "fixed"
    PARTIALLY_FIXED = "partially_fixed"
    EXECUTION_ERROR = "execution_error"


_SUCCESS_OUTCOMES = (Outcome.NO_FIXES_FOUND, Outcome.FIXED, Outcome.PARTIALLY_FIXED)


@dataclass(frozen=True)
class InvocationResult:
    """Tagged result of a format call.

    ``content`` is only meaningful for ``FIXED`` / ``PARTIALLY_FIXED``.
    A result whose staged file could not be removed after a successful run
    is an ``EXECUTION_ERROR`` with ``error=TEMP_FILE_DELETE_FAILED`` that
    still carries the content that was read back.
    """

    outcome: Outcome
    content: str = ""
    error: ErrorKind | None = None
    message: str = ""
    exit_code: int | None = None
    cleanup_error: ErrorKind | None = None

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------
    @classmethod
    def no_fixes_found(cls) -> InvocationResult:
        return cls(outcome=Outcome.NO_FIXES_FOUND, exit_code=0)

    @classmethod
    def fixed(cls, content: str) -> InvocationResult:
        return cls(outcome=Outcome.FIXED, content=content, exit_code=1)

    @classmethod
    def partially_fixed(cls, content: str) -> InvocationResult:
        return cls(outcome=Outcome.PARTIALLY_FIXED, content=content, exit_code=2)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        detail: str = "",
        *,
        exit_code: int | None = None,
        content: str = "",
    ) -> InvocationResult:
        return cls(
            outcome=Outcome.EXECUTION_ERROR,
            content=content,
            error=kind,
            message=error_message(kind, detail),
            exit_code=exit_code,
        )

    @classmethod
    def from_error(cls, err: FormatError, *, exit_code: int | None = None) -> InvocationResult:
        return cls.failure(err.kind, err.detail, exit_code=exit_code)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def ok(self) -> bool:
        """True for NoFixesFound, Fixed and PartiallyFixed."""
        return self.outcome in _SUCCESS_OUTCOMES

    @property
    def has_content(self) -> bool:
        """True when the formatter rewrote the staged file."""
        return self.outcome in (Outcome.FIXED, Outcome.PARTIALLY_FIXED)

    def raise_for_error(self) -> InvocationResult:
        """Raise ``FormatError`` for a failed call, otherwise return self."""
        if self.error is not None:
            raise FormatError(self.error, message=self.message or None)
        return self

    def with_cleanup_error(self, kind: ErrorKind) -> InvocationResult:
        """Attach a cleanup failure without touching the primary outcome."""
        return InvocationResult(
            outcome=self.outcome,
            content=self.content,
            error=self.error,
            message=self.message,
            exit_code=self.exit_code,
            cleanup_error=kind,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dict."""
        return {
            "outcome": self.outcome.value,
            "content": self.content,
            "error": self.error.value if self.error else None,
            "message": self.message,
            "exit_code": self.exit_code,
            "cleanup_error": self.cleanup_error.value if self.cleanup_error else None,
        }
