# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Errors raised by the measurement engine."""


class BenchError(Exception):
    """Base for all benchmark harness errors."""


class PipelineSpawnError(BenchError):
    """
    Raised when a pipeline stage could not be started at all.

    No elapsed time exists for such a run, so nothing gets recorded for it.
    """

    def __init__(self, argv: tuple[str, ...] | list[str], reason: str) -> None:
        self.argv = tuple(argv)
        self.reason = reason
        super().__init__(f"Cannot start {' '.join(self.argv)!r}: {reason}")


class ResultsStoreClosedError(BenchError):
    """Raised when a record is appended after the session has terminated."""
