"""Pytest configuration for phpcbf-runner tests."""

from __future__ import annotations

import itertools
import shlex
import sys
from pathlib import Path
from typing import Callable

import pytest

# Ensure src/phpcbf_runner is importable
src_path = str(Path(__file__).parent.parent / "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)


@pytest.fixture
def staging_dir(tmp_path: Path) -> Path:
    """Directory receiving the staged temp files of a test."""
    path = tmp_path / "staging"
    path.mkdir()
    return path


@pytest.fixture
def make_phpcbf(tmp_path: Path) -> Callable[..., Path]:
    """Factory for fake phpcbf executables.

    The script receives ``<flag> <file> [--standard=...]`` like phpcbf:
      - ``output``: text written over the staged file (None leaves it alone)
      - ``stdout`` / ``stderr``: one line echoed to each stream
      - ``args_log``: file receiving one argument per line
      - ``background``: shell command left running after exit, holding
        the output streams open
    """
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    counter = itertools.count()

    def _make(
        exit_code: int = 0,
        output: str | None = None,
        stdout: str = "",
        stderr: str = "",
        args_log: Path | None = None,
        background: str | None = None,
    ) -> Path:
        n = next(counter)
        lines = ["#!/bin/sh"]
        if args_log is not None:
            lines.append(f'printf \'%s\\n\' "$@" > "{args_log}"')
        if stdout:
            lines.append(f"echo {shlex.quote(stdout)}")
        if stderr:
            lines.append(f"echo {shlex.quote(stderr)} >&2")
        if output is not None:
            source = bin_dir / f"output-{n}"
            source.write_bytes(output.encode("utf-8"))
            lines.append(f'cat "{source}" > "$2"')
        if background:
            lines.append(f"{background} &")
        lines.append(f"exit {exit_code}")

        script = bin_dir / f"phpcbf-{n}"
        script.write_text("\n".join(lines) + "\n")
        script.chmod(0o755)
        return script

    return _make
