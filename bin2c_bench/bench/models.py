# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Data models for the benchmark harness.

These are the types everything in the measurement loop passes around. They're
frozen dataclasses: a record that changes after it was timed would be a bug.
"""

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

BYTES_PER_MB = 1_000_000

# What a pipeline's first stage reads: nothing, a file, or an in-memory buffer.
StdinSource = Union[None, Path, bytes]


@dataclass(frozen=True)
class BenchmarkRecord:
    """
    One timed pipeline invocation, as stored in the results file.

    The label is written as the first whitespace-separated field of a line,
    so it must be non-empty and free of whitespace.
    """

    label: str
    byte_count: int
    elapsed_seconds: float

    def __post_init__(self) -> None:
        if not self.label or any(ch.isspace() for ch in self.label):
            raise ValueError(f"Invalid label {self.label!r}: must be non-empty with no whitespace")
        if self.byte_count <= 0:
            raise ValueError(f"byte_count must be positive, got {self.byte_count}")
        if not math.isfinite(self.elapsed_seconds) or self.elapsed_seconds < 0:
            raise ValueError(f"elapsed_seconds must be finite and >= 0, got {self.elapsed_seconds}")


@dataclass(frozen=True)
class AggregateEntry:
    """Throughput of one label over every record stored for it."""

    label: str
    throughput_mb_per_s: float


@dataclass(frozen=True)
class ReportSection:
    """One block of the report. `marker` is None for the baseline section."""

    marker: Optional[str]
    entries: tuple[AggregateEntry, ...]


@dataclass(frozen=True)
class Variant:
    """
    A labelled pipeline the loop runs once per iteration.

    stage1 reads `stdin`; if stage2 is set it reads stage1's output. Whatever
    the last stage writes goes to `stdout` (a file the runner opens), or to
    the harness's own stdout when `stdout` is None.
    """

    label: str
    stage1: tuple[str, ...]
    stage2: Optional[tuple[str, ...]] = None
    stdin: Optional[Path] = None
    stdout: Optional[Path] = None


@dataclass(frozen=True)
class SessionFiles:
    """Scratch files a benchmark session keeps in its directory."""

    entropy: Path
    xxd_source: Path
    bin2c_source: Path
    ld_output: Path
    results: Path

    @classmethod
    def under(cls, directory: Path) -> "SessionFiles":
        return cls(
            entropy=directory / "dummy_entropy",
            xxd_source=directory / "dummy_xxd.c",
            bin2c_source=directory / "dummy_bin2c.c",
            ld_output=directory / "dummy",
            results=directory / "results",
        )


@dataclass(frozen=True)
class PipelineResult:
    """How long a pipeline took and how each of its stages exited."""

    elapsed_seconds: float
    exit_codes: tuple[int, ...] = field(default_factory=tuple)

    @property
    def success(self) -> bool:
        return all(code == 0 for code in self.exit_codes)
