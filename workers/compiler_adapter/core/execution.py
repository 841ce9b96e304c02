"""
Execution — run the compiler as a subprocess and capture its output.

The working directory of a compiler run is always the directory holding
the input file.  gfortran writes .mod files into its current directory
and has no flag to put them elsewhere; later compilations that ``use``
those modules look for them beside the source.  The override is applied
to a copy of the caller's options, which are never mutated.

A nonzero exit code is data.  Only a failure to start the process at all
raises (``CompilerSpawnError``).  A run that exceeds its timeout is
killed and still returns a well-formed result with ``timed_out`` set.
"""
from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import logging
import os
import time
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from compiler_adapter.config import Settings, get_settings
from compiler_adapter.errors import CompilerSpawnError

logger = logging.getLogger(__name__)

TRUNCATED_MARKER = "\n[Truncated]"
TIMEOUT_EXIT_CODE = -1
KILL_DRAIN_TIMEOUT = 2.0  # seconds
READ_CHUNK = 64 * 1024


@dataclass(frozen=True)
class ExecutionOptions:
    """How to launch one subprocess."""

    env: Optional[Mapping[str, str]] = None   # None -> inherit os.environ
    custom_cwd: Optional[str] = None
    timeout: Optional[float] = None           # seconds; None -> no limit
    max_output: Optional[int] = None          # bytes per stream; None -> no cap

    def with_cwd(self, cwd: str) -> "ExecutionOptions":
        return dataclasses.replace(self, custom_cwd=cwd)


@dataclass(frozen=True)
class RawExecResult:
    """Verbatim outcome of a subprocess run."""

    exit_code: int
    stdout: str
    stderr: str
    timed_out: bool = False
    truncated: bool = False
    exec_time_ms: int = 0


def default_exec_options(
    extra_env: Optional[Mapping[str, str]] = None,
    settings: Optional[Settings] = None,
) -> ExecutionOptions:
    """Process-wide defaults: inherited environment, configured limits."""
    settings = settings or get_settings()
    env = dict(os.environ)
    if extra_env:
        env.update(extra_env)
    return ExecutionOptions(
        env=env,
        timeout=settings.EXEC_TIMEOUT,
        max_output=settings.MAX_OUTPUT,
    )


def _decode(raw: bytes, limit: Optional[int]) -> tuple[str, bool]:
    truncated = limit is not None and len(raw) > limit
    if truncated:
        raw = raw[:limit]
    text = raw.decode("utf-8", errors="replace")
    if truncated:
        text += TRUNCATED_MARKER
    return text, truncated


def _kill(proc: asyncio.subprocess.Process) -> None:
    # The child may have exited on its own right at the deadline.
    with contextlib.suppress(ProcessLookupError):
        proc.kill()


async def _drain(stream: Optional[asyncio.StreamReader], sink: bytearray) -> None:
    if stream is None:
        return
    while True:
        chunk = await stream.read(READ_CHUNK)
        if not chunk:
            return
        sink.extend(chunk)


async def run_process(
    executable: str,
    args: Sequence[str],
    options: ExecutionOptions,
) -> RawExecResult:
    """
    Spawn *executable* with *args* (no shell) and wait for it to exit.

    Raises
    ------
    CompilerSpawnError
        If the process cannot be started.
    """
    env = dict(options.env) if options.env is not None else None
    logger.debug("exec %s %s (cwd=%s)", executable, list(args), options.custom_cwd)

    t0 = time.monotonic()
    try:
        proc = await asyncio.create_subprocess_exec(
            executable,
            *args,
            cwd=options.custom_cwd,
            env=env,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise CompilerSpawnError(executable, str(e)) from e

    # Buffers outlive a cancelled read, so output produced before a
    # timeout is kept.
    out, err = bytearray(), bytearray()
    timed_out = False
    try:
        await asyncio.wait_for(
            asyncio.gather(_drain(proc.stdout, out), _drain(proc.stderr, err), proc.wait()),
            timeout=options.timeout,
        )
    except asyncio.TimeoutError:
        timed_out = True
        logger.warning("%s exceeded %ss, killing", executable, options.timeout)
        _kill(proc)
        await proc.wait()
        try:
            await asyncio.wait_for(
                asyncio.gather(_drain(proc.stdout, out), _drain(proc.stderr, err)),
                timeout=KILL_DRAIN_TIMEOUT,
            )
        except asyncio.TimeoutError:
            logger.warning("%s: output pipes still open after kill", executable)
    except asyncio.CancelledError:
        _kill(proc)
        await proc.wait()
        raise
    duration = int((time.monotonic() - t0) * 1000)

    stdout, out_truncated = _decode(bytes(out), options.max_output)
    stderr, err_truncated = _decode(bytes(err), options.max_output)

    if timed_out:
        stderr += f"\nKilled - processing time exceeded ({options.timeout}s)"
        exit_code = TIMEOUT_EXIT_CODE
    else:
        exit_code = proc.returncode if proc.returncode is not None else TIMEOUT_EXIT_CODE

    return RawExecResult(
        exit_code=exit_code,
        stdout=stdout,
        stderr=stderr,
        timed_out=timed_out,
        truncated=out_truncated or err_truncated,
        exec_time_ms=duration,
    )


async def run_compiler_process(
    compiler: str,
    args: Sequence[str],
    input_filename: str,
    options: Optional[ExecutionOptions] = None,
) -> RawExecResult:
    """
    Run *compiler* with its working directory set to the input's directory.

    Any ``custom_cwd`` in *options* is replaced; the caller's object is left
    untouched.
    """
    if options is None:
        options = default_exec_options()
    options = options.with_cwd(os.path.dirname(input_filename) or os.curdir)
    return await run_process(compiler, args, options)
