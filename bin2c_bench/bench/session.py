# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Benchmark session: where results and scratch files live, and who cleans up.

A session either creates a fresh directory under the system temp dir, which
it then owns, or reuses a directory the caller supplied, which it never
deletes. The results store follows the same rule: the default store inside
an owned directory is owned, a store given with `results_file` is not.

Closing the session is the cleanup step, and it runs once no matter how the
run ended:
  1. the store stops accepting records
  2. if the store is owned, the report is printed once
  3. if the directory is owned, it is deleted

Cleanup is best effort. A report that can't be read or a directory that
can't be removed is logged, not raised, because by then the measurements are
already over.
"""

import sys
import tempfile
from datetime import datetime
from pathlib import Path
from types import TracebackType
from typing import IO, Optional

from bin2c_bench.bench.aggregate import emit_report
from bin2c_bench.bench.models import SessionFiles
from bin2c_bench.bench.recorder import ResultsStore
from bin2c_bench.config.schema import BenchmarkConfig
from bin2c_bench.logging.logger import get_logger
from bin2c_bench.utils.filesystem import remove_tree

logger = get_logger(__name__)

SESSION_PREFIX = "bin2c-bench-"


def create_session_dir(base_dir: Optional[Path] = None) -> Path:
    """Make a new, uniquely named session directory."""
    stamp = datetime.now().strftime("%Y-%m-%d-%H%M%S")
    return Path(
        tempfile.mkdtemp(
            prefix=f"{SESSION_PREFIX}{stamp}-",
            dir=str(base_dir) if base_dir else None,
        )
    )


class BenchmarkSession:
    """
    Context manager owning a session directory and its results store.

    Usage:
        with BenchmarkSession(config) as session:
            session.store.append(record)
        # report printed and directory removed here, if owned
    """

    def __init__(
        self,
        config: BenchmarkConfig,
        report_stream: Optional[IO[str]] = None,
        base_dir: Optional[Path] = None,
    ) -> None:
        self._config = config
        self._report_stream = report_stream
        self._base_dir = base_dir
        self._directory: Optional[Path] = None
        self._files: Optional[SessionFiles] = None
        self._store: Optional[ResultsStore] = None
        self._owns_directory = False
        self._owns_store = False
        self._closed = False

    @property
    def directory(self) -> Path:
        if self._directory is None:
            raise RuntimeError("Session has not been opened")
        return self._directory

    @property
    def files(self) -> SessionFiles:
        if self._files is None:
            raise RuntimeError("Session has not been opened")
        return self._files

    @property
    def store(self) -> ResultsStore:
        if self._store is None:
            raise RuntimeError("Session has not been opened")
        return self._store

    @property
    def owns_directory(self) -> bool:
        return self._owns_directory

    @property
    def owns_store(self) -> bool:
        return self._owns_store

    def open(self) -> "BenchmarkSession":
        if self._config.session_dir is not None:
            self._directory = Path(self._config.session_dir)
            self._directory.mkdir(parents=True, exist_ok=True)
            self._owns_directory = False
        else:
            self._directory = create_session_dir(self._base_dir)
            self._owns_directory = True

        self._files = SessionFiles.under(self._directory)

        if self._config.results_file is not None:
            results_path = Path(self._config.results_file)
            self._owns_store = False
        else:
            results_path = self._files.results
            self._owns_store = self._owns_directory
        self._store = ResultsStore(results_path)

        logger.info(
            "Benchmark session opened",
            extra={
                "session_dir": str(self._directory),
                "results_file": str(results_path),
                "owns_directory": self._owns_directory,
                "owns_store": self._owns_store,
            },
        )
        return self

    def close(self) -> None:
        """Stop recording, report and delete what this session owns. Idempotent."""
        if self._closed or self._store is None:
            return
        self._closed = True
        self._store.close()

        try:
            if self._owns_store:
                self._emit_report()
        finally:
            if self._owns_directory:
                self._remove_directory()

    def _emit_report(self) -> None:
        assert self._store is not None
        stream = self._report_stream if self._report_stream is not None else sys.stderr
        try:
            stream.write("\n\n")
            emit_report(self._store.read(), self._config.report, stream)
        except (OSError, ValueError) as err:
            logger.error(
                "Could not produce the benchmark report",
                extra={"results_file": str(self._store.path), "error": str(err)},
            )

    def _remove_directory(self) -> None:
        assert self._directory is not None
        try:
            remove_tree(self._directory)
        except OSError as err:
            logger.error(
                "Could not remove session directory",
                extra={"session_dir": str(self._directory), "error": str(err)},
            )
            return
        logger.debug("Session directory removed", extra={"session_dir": str(self._directory)})

    def __enter__(self) -> "BenchmarkSession":
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
