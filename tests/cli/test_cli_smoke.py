# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI smoke tests.

CLI tests must verify:
  - commands execute
  - exit codes are correct
  - help text exists

We use subprocess to test the actual CLI entrypoint the way a user would.
This catches issues that unit tests miss, like broken imports or entrypoint
registration. The benchmark command itself runs until interrupted, so only
its help and config handling are exercised here.
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest


def _cli_env() -> dict[str, str]:
    return {key: value for key, value in os.environ.items() if not key.startswith("BENCH_")}


def _run_cli(*args: str, stdin: str | None = None) -> subprocess.CompletedProcess[str]:
    """Run `bin2c-bench` with the given arguments and capture output."""
    return subprocess.run(
        [sys.executable, "-m", "bin2c_bench.cli.main", *args],
        capture_output=True,
        text=True,
        input=stdin,
        env=_cli_env(),
        timeout=10,
    )


class TestHelpTexts:
    """Every subcommand must have working --help output."""

    @pytest.mark.parametrize("subcommand", ["benchmark", "evaluate"])
    def test_subcommand_help_exits_zero(self, subcommand: str) -> None:
        result = _run_cli(subcommand, "--help")
        assert result.returncode == 0
        assert "usage" in result.stdout.lower()

    def test_benchmark_help_lists_switches(self) -> None:
        result = _run_cli("benchmark", "--help")
        for flag in ("--no-xxd", "--no-ld", "--no-compile", "--previous-versions"):
            assert flag in result.stdout

    def test_root_help_exits_with_user_error(self) -> None:
        """Running bin2c-bench with no args should show help and exit with USER_ERROR (1)."""
        result = _run_cli()
        assert result.returncode == 1

    def test_unknown_subcommand_is_rejected(self) -> None:
        result = _run_cli("frobnicate")
        assert result.returncode != 0


class TestEvaluate:
    def test_report_goes_to_stderr(self, results_file: Path) -> None:
        result = _run_cli("evaluate", str(results_file))
        assert result.returncode == 0
        assert result.stdout == ""
        assert "bin2c_gcc" in result.stderr
        assert "MB/s" in result.stderr

    def test_reads_stdin_when_no_file_given(self) -> None:
        result = _run_cli("evaluate", stdin="bin2c 1000000 0.500\n")
        assert result.returncode == 0
        assert "2.00  MB/s" in result.stderr

    def test_dash_reads_stdin(self) -> None:
        result = _run_cli("evaluate", "-", stdin="xxd 1000000 2.000\n")
        assert result.returncode == 0
        assert "0.50  MB/s" in result.stderr

    def test_undecodable_line_in_file_is_skipped(self, tmp_path: Path) -> None:
        results = tmp_path / "results"
        results.write_bytes(b"bin2c 1000000 0.500\n\xff\xfe garbage\nxxd 1000000 1.000\n")

        result = _run_cli("evaluate", str(results))
        assert result.returncode == 0
        assert "bin2c" in result.stderr
        assert "1.00  MB/s" in result.stderr
        assert "Traceback" not in result.stderr

    def test_undecodable_line_on_stdin_is_skipped(self) -> None:
        result = subprocess.run(
            [sys.executable, "-m", "bin2c_bench.cli.main", "evaluate", "-"],
            capture_output=True,
            input=b"\xff\xfe garbage\nbin2c 1000000 0.500\n",
            env=_cli_env(),
            timeout=10,
        )
        assert result.returncode == 0
        assert b"2.00  MB/s" in result.stderr

    def test_missing_results_file_is_user_error(self, tmp_path: Path) -> None:
        result = _run_cli("evaluate", str(tmp_path / "absent"))
        assert result.returncode == 1  # USER_ERROR


class TestConfigLoading:
    """Subcommands should handle config loading failures gracefully."""

    def test_nonexistent_config_returns_config_error(self) -> None:
        result = _run_cli("evaluate", "--config", "/nonexistent/path.yaml", "-", stdin="")
        assert result.returncode == 2  # CONFIG_ERROR

    def test_invalid_config_returns_config_error(self, invalid_config_file: Path) -> None:
        result = _run_cli("benchmark", "--config", str(invalid_config_file))
        assert result.returncode == 2

    def test_valid_config_is_accepted(self, tmp_config_file: Path, results_file: Path) -> None:
        result = _run_cli("evaluate", "--config", str(tmp_config_file), str(results_file))
        assert result.returncode == 0

    def test_invalid_cli_override_returns_config_error(self) -> None:
        result = _run_cli("benchmark", "--payload-mb", "0")
        assert result.returncode == 2
