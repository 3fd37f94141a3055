# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runtime bootstrap for bin2c-bench.

The one-time setup before any command does real work:
  1. Validate the environment (Python version)
  2. Configure the loggers from the config
  3. Log a snapshot of the system, since throughput numbers mean little
     without knowing which machine produced them
"""

from pathlib import Path

from bin2c_bench.bench.models import Variant
from bin2c_bench.config.schema import GlobalConfig
from bin2c_bench.logging.logger import configure_package_logging, get_logger
from bin2c_bench.runtime.environment import check_minimum_python, find_missing_tools, get_system_info

logger = get_logger(__name__)


def bootstrap(config: GlobalConfig) -> None:
    """
    Run the bootstrap sequence.

    Args:
        config: The validated global configuration.
    """
    check_minimum_python()

    log_file = Path(config.log_file) if config.log_file is not None else None
    configure_package_logging(config.log_level, log_file)

    system_info = get_system_info()
    logger.info(
        "bin2c-bench bootstrap complete",
        extra={
            "python_version": system_info.python_version,
            "platform": system_info.platform,
            "architecture": system_info.architecture,
            "hostname": system_info.hostname,
        },
    )


def warn_missing_tools(variants: list[Variant]) -> list[str]:
    """
    Log a warning for every executable the variants need but PATH lacks.

    Missing tools are not fatal: those variants fail to spawn and the rest
    still get measured. Paths (anything with a slash) are left to the spawn.
    """
    tools: list[str] = []
    for variant in variants:
        for stage in (variant.stage1, variant.stage2):
            if stage is not None and "/" not in stage[0]:
                tools.append(stage[0])

    missing = find_missing_tools(tools)
    if missing:
        logger.warning(
            "Some benchmarked tools are not installed, their variants will fail",
            extra={"missing": missing},
        )
    return missing
