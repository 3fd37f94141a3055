# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Append-only results store.

One line per timed run, three whitespace-separated fields:

    bin2c_gcc 50000000 1.234

label, payload size in bytes, elapsed seconds with millisecond precision.
Every append is flushed and fsync'd before it returns, so a crash can only
ever lose the run that was still in flight. Only one process writes to a
store at a time, so there is no locking.

Reading is forgiving: lines that don't parse are skipped, because a store
that was cut short by a crash should still produce a report.
"""

from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import IO, Optional

from bin2c_bench.bench.exceptions import ResultsStoreClosedError
from bin2c_bench.bench.models import BenchmarkRecord
from bin2c_bench.logging.logger import get_logger
from bin2c_bench.utils.filesystem import durable_append_line

logger = get_logger(__name__)


def format_record(record: BenchmarkRecord) -> str:
    """Serialize a record as one results line, without the newline."""
    return f"{record.label} {record.byte_count} {record.elapsed_seconds:.3f}"


def parse_record(line: str) -> Optional[BenchmarkRecord]:
    """
    Parse one results line, or return None if it isn't a valid record.

    Fields past the third are ignored.
    """
    fields = line.split()
    if len(fields) < 3:
        return None
    try:
        return BenchmarkRecord(
            label=fields[0],
            byte_count=int(fields[1]),
            elapsed_seconds=float(fields[2]),
        )
    except ValueError:
        return None


def parse_records(lines: Iterable[str]) -> Iterator[BenchmarkRecord]:
    """Yield every valid record from `lines`, skipping malformed ones."""
    for lineno, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        record = parse_record(line)
        if record is None:
            logger.debug("Skipping malformed results line", extra={"lineno": lineno})
            continue
        yield record


def read_records_from(stream: IO[str]) -> list[BenchmarkRecord]:
    """Read every valid record from an open text stream."""
    return list(parse_records(stream))


class ResultsStore:
    """
    A results file that only ever grows.

    The store can be closed once the measurement loop has stopped; appending
    after that raises ResultsStoreClosedError. Reading still works.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._closed = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def append(self, record: BenchmarkRecord) -> None:
        """Durably append one record. Returns only after it reached the disk."""
        if self._closed:
            raise ResultsStoreClosedError(
                f"Results store {self._path} is closed, cannot record {record.label}"
            )
        durable_append_line(self._path, format_record(record))

    def read(self) -> list[BenchmarkRecord]:
        """All valid records in the order they were appended. Missing file means none."""
        if not self._path.exists():
            return []
        # Undecodable bytes become U+FFFD and go through the normal line parser.
        with self._path.open("r", encoding="utf-8", errors="replace") as handle:
            return read_records_from(handle)
