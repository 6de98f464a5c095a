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
"""Staged temp file handed to phpcbf.

phpcbf works on files, not on stdin, so every format call writes the
buffer to ``<tempdir>/temp-<token>.<ext>`` and lets phpcbf rewrite it in
place.  Each call owns exactly one staged file.
"""

from __future__ import annotations

import logging
import os
import secrets
import string
import tempfile
from dataclasses import dataclass
from pathlib import Path

from phpcbf_runner.errors import ErrorKind, FormatError

logger = logging.getLogger("phpcbf_runner.staging")

TOKEN_LENGTH = 10
_MAX_CREATE_ATTEMPTS = 5


def random_token(length: int = TOKEN_LENGTH) -> str:
    """Random lowercase ASCII token."""
    return "".join(secrets.choice(string.ascii_lowercase) for _ in range(length))


def staged_file_name(extension: str, token: str | None = None) -> str:
    return f"temp-{token or random_token()}.{extension.lstrip('.')}"


@dataclass(frozen=True)
class StagedFile:
    """Temp copy of a buffer, owned by one in-flight format call."""

    path: Path
    content: bytes

    @classmethod
    def create(
        cls,
        text: str,
        extension: str = "php",
        directory: str | Path | None = None,
    ) -> StagedFile:
        """Write *text* to a new uniquely named file.

        The file is opened with exclusive create, so two calls can never end
        up sharing a path even if their tokens collided.

        Raises:
            FormatError: TEMP_FILE_CREATE_FAILED on any OS error, or when
                *text* cannot be encoded as UTF-8 (lone surrogates).
        """
        base = Path(directory) if directory else Path(tempfile.gettempdir())
        try:
            content = text.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise FormatError(ErrorKind.TEMP_FILE_CREATE_FAILED, str(exc)) from exc

        for _ in range(_MAX_CREATE_ATTEMPTS):
            path = base / staged_file_name(extension)
            try:
                with open(path, "xb") as fh:
                    fh.write(content)
            except FileExistsError:
                continue
            except OSError as exc:
                logger.debug("Cannot stage %s: %s", path, exc)
                # A partially written file still belongs to this call
                _remove_quietly(path)
                raise FormatError(ErrorKind.TEMP_FILE_CREATE_FAILED, str(exc)) from exc
            return cls(path=path, content=content)

        raise FormatError(ErrorKind.TEMP_FILE_CREATE_FAILED, "no free temp file name")

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    def read_text(self) -> str:
        """Current content of the staged file, decoded as UTF-8."""
        return self.read_bytes().decode("utf-8")

    def exists(self) -> bool:
        return self.path.exists()

    def delete(self) -> None:
        """Remove the staged file.

        Raises:
            FormatError: TEMP_FILE_DELETE_FAILED when the file cannot be removed.
        """
        try:
            os.unlink(self.path)
        except OSError as exc:
            raise FormatError(ErrorKind.TEMP_FILE_DELETE_FAILED, str(exc)) from exc


def _remove_quietly(path: Path) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not remove partial temp file %s: %s", path, exc)
