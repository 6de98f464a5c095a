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
"""Format orchestrator -- runs phpcbf against a staged copy of a buffer.

One call of :meth:`FormatOrchestrator.format`:
  1. stages the text into ``<tempdir>/temp-<token>.php``
  2. builds ``[-lq | -l, <staged path>, --standard=<name>?]``
  3. spawns phpcbf and awaits its exit
  4. classifies the exit code, reading the staged file back for 1 and 2
  5. deletes the staged file, whatever happened before

Results are returned as ``InvocationResult`` objects; nothing here raises
for a phpcbf failure.  In debug mode the command line and the child's
stdout / stderr lines are pushed to the debug / error sinks while the
process runs.
"""

from __future__ import annotations

import asyncio
import logging
import shlex
import subprocess
from pathlib import Path

from phpcbf_runner.errors import ErrorKind, FormatError
from phpcbf_runner.options import FormatOptions
from phpcbf_runner.results import InvocationResult, Outcome
from phpcbf_runner.sinks import Sink, null_sink
from phpcbf_runner.staging import StagedFile

logger = logging.getLogger("phpcbf_runner.orchestrator")

# ---------------------------------------------------------------------------
# Exit code table
# ---------------------------------------------------------------------------
EXIT_CODE_OUTCOMES: dict[int, Outcome] = {
    0: Outcome.NO_FIXES_FOUND,
    1: Outcome.FIXED,
    2: Outcome.PARTIALLY_FIXED,
}

EXIT_CODE_ERRORS: dict[int, ErrorKind] = {
    3: ErrorKind.GENERAL_EXECUTION_ERROR,
    16: ErrorKind.APPLICATION_CONFIG_ERROR,
    32: ErrorKind.FIXER_CONFIG_ERROR,
    64: ErrorKind.APPLICATION_EXCEPTION,
}

QUIET_FLAG = "-lq"
VERBOSE_FLAG = "-l"
_CHUNK_SIZE = 64 * 1024

# Seconds the debug readers get to flush after the process has exited
READER_GRACE = 0.5


def classify_exit_code(code: int) -> Outcome | ErrorKind:
    """Map a phpcbf exit code to an outcome or an error kind."""
    if code in EXIT_CODE_OUTCOMES:
        return EXIT_CODE_OUTCOMES[code]
    return EXIT_CODE_ERRORS.get(code, ErrorKind.UNDEFINED_EXIT_CODE)


def build_arguments(
    file_path: str | Path,
    standard: str | None = None,
    debug: bool = False,
) -> list[str]:
    """Argument list for phpcbf: verbosity flag, file, optional standard."""
    args = [VERBOSE_FLAG if debug else QUIET_FLAG, str(file_path)]
    if standard:
        args.append(f"--standard={standard}")
    return args


async def _drain(stream: asyncio.StreamReader, prefix: str, sink: Sink) -> None:
    """Forward each line of *stream* to *sink* until EOF."""
    while True:
        try:
            line = await stream.readline()
        except ValueError:
            # Line longer than the reader limit: flush what is buffered
            line = await stream.read(_CHUNK_SIZE)
        if not line:
            break
        sink(f"{prefix} {line.decode('utf-8', errors='replace').rstrip()}")


class _StreamingProtocol(asyncio.subprocess.SubprocessStreamProtocol):
    """Stream protocol whose ``exited`` future resolves on process exit.

    ``Process.wait()`` also waits for the pipes to close, which never
    happens while a grandchild keeps them open.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        super().__init__(limit=_CHUNK_SIZE, loop=loop)
        self.exited: asyncio.Future[int] = loop.create_future()
        self.transport: asyncio.SubprocessTransport | None = None

    def connection_made(self, transport) -> None:
        super().connection_made(transport)
        self.transport = transport

    def process_exited(self) -> None:
        if not self.exited.done():
            self.exited.set_result(self.transport.get_returncode())
        super().process_exited()


async def _start_streaming(cmd: list[str]) -> tuple[asyncio.SubprocessTransport, _StreamingProtocol]:
    loop = asyncio.get_running_loop()
    return await loop.subprocess_exec(
        lambda: _StreamingProtocol(loop),
        *cmd,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )


class FormatOrchestrator:
    """Run phpcbf end-to-end for one buffer at a time.

    The orchestrator holds only a read-only options snapshot and the two
    sinks, so any number of :meth:`format` calls may run concurrently.

    Usage::

        orchestrator = FormatOrchestrator(FormatOptions(standard="PSR12"))
        result = await orchestrator.format(source)
        if result.has_content:
            source = result.content
    """

    def __init__(
        self,
        options: FormatOptions | None = None,
        on_error: Sink = null_sink,
        on_debug: Sink = null_sink,
        temp_dir: str | Path | None = None,
    ) -> None:
        self.options = options or FormatOptions()
        self.on_error = on_error
        self.on_debug = on_debug
        self.temp_dir = temp_dir

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def format(self, text: str, standard: str | None = None) -> InvocationResult:
        """Format *text* with phpcbf.

        Args:
            text: Source buffer to format.
            standard: Ruleset for this call; defaults to ``options.standard``.

        Returns:
            InvocationResult describing the outcome.
        """
        options = self.options
        if standard is None:
            standard = options.standard

        try:
            staged = StagedFile.create(text, options.source_extension, self.temp_dir)
        except FormatError as err:
            logger.warning("Staging failed: %s", err.message)
            return InvocationResult.from_error(err)

        args = build_arguments(staged.path, standard, options.debug)
        try:
            result = await self._execute(staged, args, options)
        finally:
            cleanup = self._cleanup(staged)

        if cleanup is None:
            return result
        if result.ok:
            # Keep the text already read; the caller decides what to do with it
            return InvocationResult.failure(
                cleanup.kind,
                cleanup.detail,
                exit_code=result.exit_code,
                content=result.content,
            )
        return result.with_cleanup_error(cleanup.kind)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _execute(
        self,
        staged: StagedFile,
        args: list[str],
        options: FormatOptions,
    ) -> InvocationResult:
        code = await self._spawn(options.executable_path, args, options.debug)
        if isinstance(code, InvocationResult):
            return code

        classified = classify_exit_code(code)
        logger.debug("phpcbf exited with %d (%s)", code, classified.value)

        if isinstance(classified, ErrorKind):
            detail = f"exit code {code}" if classified is ErrorKind.UNDEFINED_EXIT_CODE else ""
            return InvocationResult.failure(classified, detail, exit_code=code)

        if classified is Outcome.NO_FIXES_FOUND:
            return InvocationResult.no_fixes_found()

        try:
            data = staged.read_bytes()
        except OSError as exc:
            return InvocationResult.failure(
                ErrorKind.EXECUTION_ERROR, f"cannot read fixed file: {exc}", exit_code=code
            )

        if not data:
            return InvocationResult.failure(ErrorKind.EMPTY_FIX_RESULT, exit_code=code)

        try:
            content = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            return InvocationResult.failure(
                ErrorKind.EXECUTION_ERROR, f"fixed file is not valid UTF-8: {exc}", exit_code=code
            )

        if classified is Outcome.FIXED:
            return InvocationResult.fixed(content)
        return InvocationResult.partially_fixed(content)

    async def _spawn(self, executable: str, args: list[str], debug: bool) -> int | InvocationResult:
        """Start phpcbf and wait for it; spawn failures come back classified."""
        cmd = [executable, *args]
        if debug:
            self.on_debug(shlex.join(cmd))

        try:
            if debug:
                transport, protocol = await _start_streaming(cmd)
            else:
                process = await asyncio.create_subprocess_exec(
                    *cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL
                )
        except FileNotFoundError:
            logger.debug("Executable not found: %s", executable)
            return InvocationResult.failure(ErrorKind.EXECUTABLE_NOT_FOUND)
        except OSError as exc:
            logger.debug("Cannot start %s: %s", executable, exc)
            return InvocationResult.failure(ErrorKind.EXECUTION_ERROR, str(exc))

        if debug:
            return await self._stream_until_exit(transport, protocol)
        return await process.wait()

    async def _stream_until_exit(
        self,
        transport: asyncio.SubprocessTransport,
        protocol: _StreamingProtocol,
    ) -> int:
        """Forward output lines while the process runs; return its exit code.

        Completion follows the process exit, not the end of its pipes: a
        grandchild still holding stdout / stderr gets ``READER_GRACE``
        seconds before its output is dropped.
        """
        readers: list[asyncio.Task[None]] = []
        if protocol.stdout is not None:
            readers.append(asyncio.create_task(_drain(protocol.stdout, "[stdout]", self.on_debug)))
        if protocol.stderr is not None:
            readers.append(asyncio.create_task(_drain(protocol.stderr, "[stderr]", self.on_error)))

        try:
            code = await protocol.exited
            if readers:
                done, pending = await asyncio.wait(readers, timeout=READER_GRACE)
                if pending:
                    logger.debug("Output pipes still open after exit; dropping the rest")
                for task in done:
                    task.result()
        finally:
            for task in readers:
                task.cancel()
            await asyncio.gather(*readers, return_exceptions=True)
            transport.close()
        return code

    def _cleanup(self, staged: StagedFile) -> FormatError | None:
        """Delete the staged file once; report and return a failure."""
        try:
            staged.delete()
        except FormatError as err:
            logger.warning("Could not delete %s: %s", staged.path, err.detail)
            self.on_error(err.message)
            return err
        return None
