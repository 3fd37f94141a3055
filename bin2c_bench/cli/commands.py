# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the bin2c-bench CLI.

Each handler takes the parsed arguments and returns an exit code. No print()
calls: diagnostics go through the structured logger, and the report is
written to stderr as plain text because it is the product, not a log line.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from bin2c_bench.bench.aggregate import emit_report
from bin2c_bench.bench.controller import run_benchmark_session
from bin2c_bench.bench.recorder import parse_records, read_records_from
from bin2c_bench.cli.exit_codes import CONFIG_ERROR, RUNTIME_ERROR, SUCCESS, USER_ERROR
from bin2c_bench.config.exceptions import ConfigError
from bin2c_bench.config.loader import (
    apply_cli_overrides,
    apply_environment_overrides,
    default_config,
    load_config,
)
from bin2c_bench.config.schema import BenchConfig
from bin2c_bench.logging.logger import get_logger
from bin2c_bench.runtime.bootstrap import bootstrap


def _benchmark_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Command-line values for the benchmark section; None means not given."""
    return {
        "payload_mb": getattr(args, "payload_mb", None),
        "skip_xxd": getattr(args, "skip_xxd", None),
        "skip_ld": getattr(args, "skip_ld", None),
        "skip_compile": getattr(args, "skip_compile", None),
        "previous_versions": getattr(args, "previous_versions", None),
        "compilers": getattr(args, "compilers", None),
        "bin2c_prefix": getattr(args, "bin2c_prefix", None),
        "results_file": getattr(args, "results_file", None),
        "session_dir": getattr(args, "session_dir", None),
    }


def _load_and_bootstrap(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, BenchConfig | None, logging.Logger]:
    """
    The shared setup every command needs: load config, apply overrides, bootstrap.

    Returns a tuple of (exit_code, config, logger). If exit_code is not SUCCESS,
    the caller should return it immediately.
    """
    logger = get_logger(f"bin2c_bench.cli.{command_name}", log_level=args.log_level or "INFO")

    try:
        config = load_config(Path(args.config)) if args.config is not None else default_config()
        config = apply_environment_overrides(config)
        config = apply_cli_overrides(config, _benchmark_overrides(args))
    except ConfigError as err:
        logger.error(
            "Configuration error",
            extra={"command": command_name, "error": str(err)},
        )
        return CONFIG_ERROR, None, logger

    if args.log_level is not None:
        config = config.model_copy(
            update={"global_config": config.global_config.model_copy(update={"log_level": args.log_level})}
        )
    bootstrap(config.global_config)
    return SUCCESS, config, logger


def handle_benchmark(args: argparse.Namespace) -> int:
    """Measure every configured variant, over and over, until interrupted."""
    exit_code, config, logger = _load_and_bootstrap(args, "benchmark")
    if exit_code != SUCCESS:
        return exit_code
    assert config is not None

    try:
        logger.info(
            "Starting benchmarks, press Ctrl-C to stop",
            extra={"command": "benchmark", "payload_mb": config.benchmark.payload_mb},
        )
        iterations = run_benchmark_session(config.benchmark)
        logger.info("Benchmarks stopped", extra={"iterations": iterations})
        return SUCCESS
    except Exception as err:
        logger.error("Benchmark run failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_evaluate(args: argparse.Namespace) -> int:
    """Print the throughput report for a results file (or stdin) to stderr."""
    exit_code, config, logger = _load_and_bootstrap(args, "evaluate")
    if exit_code != SUCCESS:
        return exit_code
    assert config is not None

    source = args.results
    try:
        if source is None or source == "-":
            text = sys.stdin.buffer.read().decode("utf-8", errors="replace")
            records = list(parse_records(text.splitlines()))
        else:
            with Path(source).open("r", encoding="utf-8", errors="replace") as handle:
                records = read_records_from(handle)
    except OSError as err:
        logger.error(
            "Cannot read results",
            extra={"command": "evaluate", "results": source, "error": str(err)},
        )
        return USER_ERROR

    try:
        emit_report(records, config.benchmark.report, sys.stderr)
        return SUCCESS
    except Exception as err:
        logger.error("Evaluation failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR
