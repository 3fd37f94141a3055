# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Pipeline runner and timing collector.

Runs a one- or two-stage pipeline of external programs and measures how long
it takes, wall clock, with millisecond resolution:

    stdin source -> stage1 [-> stage2] -> stdout sink

The measured window starts right before the first spawn and ends right after
the last stage has been reaped. Input and output files are opened before the
window starts, the same way a shell sets up redirections before it runs the
command being timed.

The children never talk to us. Their stderr is our stderr, their final stdout
is either the sink file or our own stdout, and the only pipe we create connects
stage1 straight to stage2. Nothing they produce passes through this process,
so a caller redirecting our stdout gets exactly the bytes the pipeline wrote.
The one exception is an in-memory payload, which we have to write into
stage1's stdin ourselves.
"""

import subprocess
import time
from contextlib import ExitStack
from pathlib import Path
from typing import IO, Optional, Sequence

from bin2c_bench.bench.exceptions import PipelineSpawnError
from bin2c_bench.bench.models import PipelineResult, StdinSource, Variant
from bin2c_bench.logging.logger import get_logger

logger = get_logger(__name__)


def _spawn(
    argv: Sequence[str],
    stdin: "int | IO[bytes] | None",
    stdout: "int | IO[bytes] | None",
) -> "subprocess.Popen[bytes]":
    try:
        return subprocess.Popen(list(argv), stdin=stdin, stdout=stdout)
    except OSError as err:
        raise PipelineSpawnError(argv, err.strerror or str(err)) from err


def _feed(proc: "subprocess.Popen[bytes]", payload: bytes) -> None:
    """
    Write an in-memory payload into a stage's stdin and close it.

    A stage that exits before reading all of its input breaks the pipe. That
    is reported through its exit code, same as Popen.communicate does.
    """
    assert proc.stdin is not None
    try:
        proc.stdin.write(payload)
    except BrokenPipeError:
        pass
    try:
        proc.stdin.close()
    except BrokenPipeError:
        pass


def _reap(procs: list["subprocess.Popen[bytes]"]) -> None:
    for proc in procs:
        if proc.poll() is None:
            proc.kill()
        proc.wait()


def _timed_run(
    stage1: Sequence[str],
    stage2: Optional[Sequence[str]],
    stdin: "int | IO[bytes] | None",
    stdout: "IO[bytes] | None",
    payload: Optional[bytes],
) -> PipelineResult:
    procs: list["subprocess.Popen[bytes]"] = []

    start = time.monotonic()
    try:
        first = _spawn(
            stage1,
            stdin=stdin,
            stdout=subprocess.PIPE if stage2 is not None else stdout,
        )
        procs.append(first)

        if stage2 is not None:
            assert first.stdout is not None
            try:
                procs.append(_spawn(stage2, stdin=first.stdout, stdout=stdout))
            finally:
                # Only stage2 may hold the read end, otherwise stage1 never
                # sees SIGPIPE when stage2 exits early.
                first.stdout.close()

        if payload is not None:
            _feed(first, payload)

        exit_codes = tuple(proc.wait() for proc in procs)
    except BaseException:
        _reap(procs)
        raise
    elapsed = round(time.monotonic() - start, 3)

    return PipelineResult(elapsed_seconds=elapsed, exit_codes=exit_codes)


def run_pipeline(
    stage1: Sequence[str],
    stage2: Optional[Sequence[str]] = None,
    stdin: StdinSource = None,
    stdout: Optional[Path] = None,
) -> PipelineResult:
    """
    Run `stage1 [| stage2]` and return its elapsed time and exit codes.

    Args:
        stage1: argv of the first stage.
        stage2: Optional argv of a second stage reading stage1's stdout.
        stdin: What stage1 reads. A Path is opened and handed over as the
               child's stdin, bytes are written into a pipe, None inherits
               our own stdin.
        stdout: File the last stage writes to (truncated first). None means
                the last stage writes straight to our own stdout.

    Returns:
        A PipelineResult. A non-zero exit from any stage makes it unsuccessful,
        but the elapsed time is reported either way.

    Raises:
        PipelineSpawnError: A stage could not be started. Any stage that was
            already running is killed and reaped first, and no time is reported.
        OSError: The stdin or stdout file could not be opened.
    """
    with ExitStack() as stack:
        stdin_arg: "int | IO[bytes] | None" = None
        payload: Optional[bytes] = None
        if isinstance(stdin, bytes):
            stdin_arg = subprocess.PIPE
            payload = stdin
        elif stdin is not None:
            stdin_arg = stack.enter_context(stdin.open("rb"))

        stdout_arg: "IO[bytes] | None" = None
        if stdout is not None:
            stdout_arg = stack.enter_context(stdout.open("wb"))

        result = _timed_run(stage1, stage2, stdin_arg, stdout_arg, payload)

    logger.debug(
        "Pipeline finished",
        extra={
            "stage1": stage1[0],
            "stage2": stage2[0] if stage2 is not None else None,
            "exit_codes": list(result.exit_codes),
            "elapsed_seconds": result.elapsed_seconds,
        },
    )
    return result


def run_variant(variant: Variant) -> PipelineResult:
    """Run one configured variant's pipeline."""
    return run_pipeline(
        variant.stage1,
        variant.stage2,
        stdin=variant.stdin,
        stdout=variant.stdout,
    )
