# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the pipeline runner and timing collector.

These run real child processes, using only POSIX sh, cat and tr, so they
need no compiler or converter installed. The key property is that child
output reaches the inherited file descriptors untouched, which capfd checks
at the descriptor level.
"""

import shutil
import time
from pathlib import Path

import pytest

from bin2c_bench.bench.exceptions import PipelineSpawnError
from bin2c_bench.bench.models import Variant
from bin2c_bench.bench.timing import run_pipeline, run_variant

pytestmark = pytest.mark.skipif(
    any(shutil.which(tool) is None for tool in ("sh", "cat", "tr")),
    reason="needs POSIX sh, cat and tr",
)

MISSING_TOOL = "bin2c-bench-no-such-tool"


class TestSingleStage:
    def test_bytes_stdin_to_stdout_file(self, tmp_path: Path) -> None:
        out = tmp_path / "out.c"
        result = run_pipeline(["cat"], stdin=b"payload bytes", stdout=out)

        assert result.success
        assert result.exit_codes == (0,)
        assert out.read_bytes() == b"payload bytes"

    def test_file_stdin(self, tmp_path: Path) -> None:
        source = tmp_path / "in.bin"
        source.write_bytes(b"\x00\x01\x02")
        out = tmp_path / "out.bin"

        run_pipeline(["cat"], stdin=source, stdout=out)
        assert out.read_bytes() == b"\x00\x01\x02"

    def test_stdout_file_is_truncated(self, tmp_path: Path) -> None:
        out = tmp_path / "out.txt"
        out.write_text("stale content that is longer", encoding="utf-8")

        run_pipeline(["sh", "-c", "printf new"], stdout=out)
        assert out.read_text(encoding="utf-8") == "new"

    def test_non_zero_exit_still_reports_time(self) -> None:
        result = run_pipeline(["sh", "-c", "exit 3"])

        assert not result.success
        assert result.exit_codes == (3,)
        assert result.elapsed_seconds >= 0

    def test_stage_exiting_before_reading_input_is_not_an_error(self) -> None:
        result = run_pipeline(["sh", "-c", "exit 0"], stdin=b"x" * 1_000_000)
        assert result.exit_codes == (0,)


class TestTwoStages:
    def test_stage1_feeds_stage2(self, tmp_path: Path) -> None:
        out = tmp_path / "upper.txt"
        result = run_pipeline(["cat"], ["tr", "a-z", "A-Z"], stdin=b"hello", stdout=out)

        assert result.exit_codes == (0, 0)
        assert out.read_bytes() == b"HELLO"

    def test_failure_in_second_stage_is_surfaced(self) -> None:
        result = run_pipeline(["sh", "-c", "echo data"], ["sh", "-c", "cat >/dev/null; exit 5"])

        assert not result.success
        assert result.exit_codes == (0, 5)


class TestInheritedStreams:
    def test_last_stage_writes_to_our_stdout(self, capfd: pytest.CaptureFixture[str]) -> None:
        run_pipeline(["sh", "-c", "echo first"], ["cat"])
        captured = capfd.readouterr()
        assert captured.out == "first\n"

    def test_single_stage_writes_to_our_stdout(self, capfd: pytest.CaptureFixture[str]) -> None:
        run_pipeline(["sh", "-c", "echo only"])
        assert capfd.readouterr().out == "only\n"

    def test_stderr_is_passed_through(self, capfd: pytest.CaptureFixture[str]) -> None:
        run_pipeline(["sh", "-c", "echo oops >&2"])
        captured = capfd.readouterr()
        assert "oops" in captured.err
        assert captured.out == ""


class TestTiming:
    def test_elapsed_covers_the_run(self) -> None:
        result = run_pipeline(["sh", "-c", "sleep 0.2"])
        assert 0.15 <= result.elapsed_seconds < 5

    def test_millisecond_resolution(self) -> None:
        result = run_pipeline(["sh", "-c", "exit 0"])
        assert round(result.elapsed_seconds, 3) == result.elapsed_seconds


class TestSpawnFailures:
    def test_missing_stage1_raises(self) -> None:
        with pytest.raises(PipelineSpawnError) as excinfo:
            run_pipeline([MISSING_TOOL])
        assert excinfo.value.argv == (MISSING_TOOL,)

    def test_missing_stage2_kills_stage1(self) -> None:
        started = time.monotonic()
        with pytest.raises(PipelineSpawnError):
            run_pipeline(["sh", "-c", "sleep 5"], [MISSING_TOOL])
        assert time.monotonic() - started < 4

    def test_non_executable_file_raises(self, tmp_path: Path) -> None:
        script = tmp_path / "not_executable"
        script.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
        script.chmod(0o644)

        with pytest.raises(PipelineSpawnError):
            run_pipeline([str(script)])


class TestRunVariant:
    def test_runs_the_variant_pipeline(self, tmp_path: Path) -> None:
        source = tmp_path / "in.txt"
        source.write_bytes(b"abc")
        out = tmp_path / "out.txt"
        variant = Variant("upper", ("cat",), ("tr", "a-z", "A-Z"), stdin=source, stdout=out)

        result = run_variant(variant)

        assert result.success
        assert out.read_bytes() == b"ABC"
