# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for bin2c-bench.

Every operation is a subcommand of `bin2c-bench`, and the set is fixed:
SUBCOMMANDS maps each name to its handler. Anything else is rejected by the
parser before a handler is ever looked up.

The global options (--config, --log-level) are inherited by every subcommand
through argparse's parent parser mechanism.

Usage:
    bin2c-bench benchmark --no-xxd --cc gcc
    bin2c-bench benchmark --results-file results.txt --previous-versions "v0.1 v0.2"
    bin2c-bench evaluate results.txt
"""

import argparse
import sys
from collections.abc import Callable

from bin2c_bench.cli.commands import handle_benchmark, handle_evaluate
from bin2c_bench.cli.exit_codes import USER_ERROR

Handler = Callable[[argparse.Namespace], int]

SUBCOMMANDS: dict[str, tuple[str, Handler]] = {
    "benchmark": ("Run the benchmarks until interrupted, then print the report.", handle_benchmark),
    "evaluate": ("Print the throughput report for a results file.", handle_evaluate),
}


def _build_global_parser() -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    A separate parent parser (add_help=False) keeps the help text from
    colliding between the root and the subcommand parsers.
    """
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level (overrides the config).",
    )
    return parent


def _add_benchmark_options(parser: argparse.ArgumentParser) -> None:
    # store_true with default=None, so an absent flag doesn't override config.
    parser.add_argument(
        "--no-xxd", action="store_true", default=None, dest="skip_xxd",
        help="Don't benchmark xxd.",
    )
    parser.add_argument(
        "--no-ld", action="store_true", default=None, dest="skip_ld",
        help="Don't benchmark `ld -r -b binary` object creation.",
    )
    parser.add_argument(
        "--no-compile", action="store_true", default=None, dest="skip_compile",
        help="Only time the conversion to C, skip every compiler comparison.",
    )
    parser.add_argument(
        "--previous-versions", type=str, default=None, dest="previous_versions",
        help="Space-separated previous bin2c builds to compare against.",
    )
    parser.add_argument(
        "--cc", action="append", default=None, dest="compilers",
        help="C compiler to compare with (repeatable, default: gcc and clang).",
    )
    parser.add_argument(
        "--payload-mb", type=int, default=None, dest="payload_mb",
        help="Megabytes of random input per iteration (default: 50).",
    )
    parser.add_argument(
        "--bin2c-prefix", type=str, default=None, dest="bin2c_prefix",
        help="Checkout whose build/bin2c is benchmarked (default: current directory).",
    )
    parser.add_argument(
        "--results-file", type=str, default=None, dest="results_file",
        help="Append results to this existing file instead of a temporary one.",
    )
    parser.add_argument(
        "--session-dir", type=str, default=None, dest="session_dir",
        help="Reuse this directory for scratch files; it is not deleted afterwards.",
    )


def build_parser() -> argparse.ArgumentParser:
    parent = _build_global_parser()

    root_parser = argparse.ArgumentParser(
        prog="bin2c-bench",
        description="bin2c-bench: throughput benchmarks for binary-to-C converters.",
        parents=[parent],
    )
    subparsers = root_parser.add_subparsers(dest="command")

    for name, (help_text, _) in SUBCOMMANDS.items():
        subparsers.add_parser(name, parents=[parent], help=help_text)

    _add_benchmark_options(subparsers.choices["benchmark"])
    subparsers.choices["evaluate"].add_argument(
        "results",
        nargs="?",
        default=None,
        help="Results file to evaluate; '-' or nothing reads stdin.",
    )
    return root_parser


def main() -> None:
    """
    Main CLI entrypoint. This is what pyproject.toml's [project.scripts] points to.

    If no subcommand is given, we show help and exit with USER_ERROR.
    """
    root_parser = build_parser()
    args = root_parser.parse_args()

    if args.command not in SUBCOMMANDS:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    _, handler = SUBCOMMANDS[args.command]
    sys.exit(handler(args))


if __name__ == "__main__":
    main()
