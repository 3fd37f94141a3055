# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The measurement loop.

    INIT -> RUNNING -> (cancelled) -> CLEANUP -> TERMINATED

INIT opens the session. RUNNING repeats forever: write a fresh payload, then
run every variant once, recording each timing as soon as it is known.
Everything is sequential so that no two benchmarks ever compete for the CPU.

The loop only stops through cancellation. SIGINT and SIGTERM set a token
instead of raising, and the loop checks the token before every variant. A
pipeline that was running when the signal arrived finishes (or dies from the
same SIGINT the terminal sent to the whole process group) and its timing is
thrown away. CLEANUP is the session's close(), which runs on every way out
of the loop, including a crash.
"""

import signal
import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from types import FrameType
from typing import IO, Optional

from bin2c_bench.bench.exceptions import PipelineSpawnError
from bin2c_bench.bench.models import BenchmarkRecord, PipelineResult, Variant
from bin2c_bench.bench.recorder import ResultsStore
from bin2c_bench.bench.session import BenchmarkSession
from bin2c_bench.bench.timing import run_variant
from bin2c_bench.bench.variants import build_variants
from bin2c_bench.bench.workload import payload_size_bytes, write_payload
from bin2c_bench.config.schema import BenchmarkConfig
from bin2c_bench.logging.logger import get_logger
from bin2c_bench.runtime.bootstrap import warn_missing_tools
from bin2c_bench.runtime.environment import supports_ld_binary_objects

logger = get_logger(__name__)

VariantRunner = Callable[[Variant], PipelineResult]

CANCEL_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


class CancellationToken:
    """A one-way flag: once cancelled, always cancelled. Safe to set from a signal handler."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason


@contextmanager
def cancel_on_signals(
    token: CancellationToken,
    signals: Sequence[signal.Signals] = CANCEL_SIGNALS,
) -> Iterator[CancellationToken]:
    """
    Turn the given signals into cancellation of `token` for the duration of the block.

    The previous handlers are put back on exit.
    """

    def _handler(signum: int, frame: Optional[FrameType]) -> None:
        token.cancel(signal.Signals(signum).name)

    previous = {sig: signal.signal(sig, _handler) for sig in signals}
    try:
        yield token
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def measure_variant(
    variant: Variant,
    byte_count: int,
    store: ResultsStore,
    token: CancellationToken,
    runner: VariantRunner = run_variant,
) -> Optional[BenchmarkRecord]:
    """
    Run one variant and record its timing.

    Returns the stored record, or None when nothing was recorded: the
    pipeline could not be started, or cancellation arrived while it ran.
    A pipeline that ran but exited non-zero is still recorded.
    """
    logger.info("Benchmark started", extra={"label": variant.label})
    try:
        result = runner(variant)
    except (PipelineSpawnError, OSError) as err:
        logger.error(
            "Benchmark could not run",
            extra={"label": variant.label, "error": str(err)},
        )
        return None

    if token.cancelled:
        logger.info(
            "Discarding in-flight result after cancellation",
            extra={"label": variant.label, "elapsed_seconds": result.elapsed_seconds},
        )
        return None

    if not result.success:
        logger.warning(
            "Benchmark pipeline exited with an error",
            extra={"label": variant.label, "exit_codes": list(result.exit_codes)},
        )

    record = BenchmarkRecord(
        label=variant.label,
        byte_count=byte_count,
        elapsed_seconds=result.elapsed_seconds,
    )
    store.append(record)
    logger.info(
        "Benchmark finished",
        extra={"label": variant.label, "elapsed_seconds": result.elapsed_seconds},
    )
    return record


def run_iteration(
    config: BenchmarkConfig,
    session: BenchmarkSession,
    variants: Sequence[Variant],
    token: CancellationToken,
    runner: VariantRunner = run_variant,
) -> int:
    """
    One cycle: fresh payload, then every variant in order.

    Returns the number of records stored. Stops early once cancelled. If no
    payload can be produced the iteration is skipped.
    """
    try:
        byte_count = write_payload(session.files.entropy, config.payload_mb)
    except (NotImplementedError, OSError) as err:
        logger.error(
            "Could not write the payload, skipping this iteration",
            extra={"entropy_file": str(session.files.entropy), "error": str(err)},
        )
        return 0
    recorded = 0
    for variant in variants:
        if token.cancelled:
            break
        if measure_variant(variant, byte_count, session.store, token, runner) is not None:
            recorded += 1
    return recorded


def run_benchmarks(
    config: BenchmarkConfig,
    session: BenchmarkSession,
    token: CancellationToken,
    runner: VariantRunner = run_variant,
    ld_supported: Optional[bool] = None,
) -> int:
    """
    Measure until `token` is cancelled. Returns the number of completed iterations.
    """
    if ld_supported is None:
        ld_supported = supports_ld_binary_objects()
    variants = build_variants(config, session.files, ld_supported=ld_supported)
    warn_missing_tools(variants)

    logger.info(
        "Benchmark loop running",
        extra={
            "variants": [variant.label for variant in variants],
            "payload_bytes": payload_size_bytes(config.payload_mb),
        },
    )

    iterations = 0
    while not token.cancelled:
        run_iteration(config, session, variants, token, runner)
        if not token.cancelled:
            iterations += 1

    logger.info(
        "Benchmark loop stopped",
        extra={"reason": token.reason, "iterations": iterations},
    )
    return iterations


def run_benchmark_session(
    config: BenchmarkConfig,
    token: Optional[CancellationToken] = None,
    runner: VariantRunner = run_variant,
    ld_supported: Optional[bool] = None,
    report_stream: Optional[IO[str]] = None,
    base_dir: Optional[Path] = None,
) -> int:
    """
    The whole lifecycle: open the session, loop until cancelled, clean up.

    Signal handlers are installed only while the loop runs. The session is
    closed (report, deletion) on every exit path.
    """
    token = token if token is not None else CancellationToken()
    with cancel_on_signals(token):
        with BenchmarkSession(config, report_stream=report_stream, base_dir=base_dir) as session:
            return run_benchmarks(config, session, token, runner, ld_supported)
