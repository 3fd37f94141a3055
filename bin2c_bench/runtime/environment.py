# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Environment checks for bin2c-bench.

Checks that the machine can run the harness before we start, and reports
which benchmarked tools are missing so a run full of spawn failures doesn't
come as a surprise.
"""

import platform
import shutil
import sys
from collections.abc import Iterable
from typing import NamedTuple

MINIMUM_PYTHON_MAJOR = 3
MINIMUM_PYTHON_MINOR = 11


class SystemInfo(NamedTuple):
    """Snapshot of the current system environment."""

    python_version: str
    platform: str
    architecture: str
    hostname: str


def get_python_version() -> tuple[int, int, int]:
    """Return the current Python version as a (major, minor, micro) tuple."""
    return sys.version_info[:3]


def check_minimum_python() -> None:
    """
    Verify we're running Python 3.11+.

    Raises:
        RuntimeError: If Python version is below 3.11.
    """
    major, minor, _ = get_python_version()
    if major < MINIMUM_PYTHON_MAJOR or (
        major == MINIMUM_PYTHON_MAJOR and minor < MINIMUM_PYTHON_MINOR
    ):
        raise RuntimeError(
            f"bin2c-bench requires Python >= {MINIMUM_PYTHON_MAJOR}.{MINIMUM_PYTHON_MINOR}, "
            f"but you're running {major}.{minor}. Please upgrade."
        )


def get_system_info() -> SystemInfo:
    """Collect basic system information for logging and diagnostics."""
    return SystemInfo(
        python_version=platform.python_version(),
        platform=platform.system(),
        architecture=platform.machine(),
        hostname=platform.node(),
    )


def supports_ld_binary_objects(system: str | None = None) -> bool:
    """
    Whether `ld -r -b binary` can turn a file into an object here.

    That needs a BFD-style ELF linker. macOS's ld64 has no binary input format.
    """
    name = system if system is not None else platform.system()
    return name != "Darwin"


def find_missing_tools(tools: Iterable[str]) -> list[str]:
    """Names from `tools` that can't be found as executables, in input order, deduplicated."""
    missing: list[str] = []
    for tool in tools:
        if tool not in missing and shutil.which(tool) is None:
            missing.append(tool)
    return missing
