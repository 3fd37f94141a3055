# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Config loader: reads YAML from disk and produces a validated, frozen BenchConfig.

The loading pipeline is linear:
  1. Read raw text from the file
  2. Parse as YAML into a plain dict
  3. Hand the dict to pydantic for schema validation
  4. Layer environment and command-line overrides on top, re-validating each time

Precedence is defaults < YAML < environment < command line. Every layer goes
through the same schema, so a bad override fails exactly like a bad YAML key.
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from bin2c_bench.config.exceptions import ConfigLoadError, ConfigValidationError
from bin2c_bench.config.schema import BenchConfig

DEFAULT_CONFIG_VERSION = "1.0.0"

# Switches honoured from the environment, mirroring the variables the old
# shell harness read. A non-empty value turns a flag on.
_ENV_FLAGS: dict[str, str] = {
    "BENCH_NO_XXD": "skip_xxd",
    "BENCH_NO_LD": "skip_ld",
    "BENCH_NO_COMPILE": "skip_compile",
}
_ENV_VALUES: dict[str, str] = {
    "BENCH_PREVIOUS_VERSIONS": "previous_versions",
    "BENCH_CC": "compilers",
    "BIN2C_BENCH_TMPDIR": "session_dir",
}


def _read_yaml_file(config_path: Path) -> dict[str, Any]:
    """
    Read a YAML file and return the parsed dict.

    Existence is checked up front because yaml.safe_load gives cryptic errors
    on missing files.

    Raises:
        ConfigLoadError: If the file doesn't exist, isn't readable, or isn't valid YAML.
    """
    if not config_path.exists():
        raise ConfigLoadError(f"Config file not found: {config_path}")

    if not config_path.is_file():
        raise ConfigLoadError(f"Config path is not a file: {config_path}")

    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except OSError as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err

    try:
        parsed = yaml.safe_load(raw_text)
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"Config file must contain a YAML mapping (dict), got {type(parsed).__name__}"
        )

    return parsed


def _validate(raw_data: dict[str, Any], source: str) -> BenchConfig:
    try:
        return BenchConfig.model_validate(raw_data)
    except ValidationError as err:
        raise ConfigValidationError(f"Config validation failed for {source}:\n{err}") from err


def load_config(config_path: Path) -> BenchConfig:
    """
    Load, validate, and freeze a config file into a BenchConfig object.

    Args:
        config_path: Path to a YAML config file.

    Returns:
        A fully validated, frozen BenchConfig instance.

    Raises:
        ConfigLoadError: File I/O or YAML parse failures.
        ConfigValidationError: Schema violations (missing fields, wrong types, unknown keys).
    """
    raw_data = _read_yaml_file(config_path)
    return _validate(raw_data, str(config_path))


def default_config() -> BenchConfig:
    """The config used when no --config file is given."""
    return _validate({"global": {"config_version": DEFAULT_CONFIG_VERSION}}, "defaults")


def _with_benchmark_updates(
    config: BenchConfig,
    updates: Mapping[str, Any],
    source: str,
) -> BenchConfig:
    if not updates:
        return config
    raw = config.model_dump(by_alias=True)
    raw["benchmark"].update(updates)
    return _validate(raw, source)


def apply_environment_overrides(
    config: BenchConfig,
    environ: Mapping[str, str] | None = None,
) -> BenchConfig:
    """
    Return a copy of `config` with the BENCH_* environment switches applied.

    Empty variables are treated as unset, the way `test -n` would.
    """
    env = os.environ if environ is None else environ
    updates: dict[str, Any] = {}

    for var, field_name in _ENV_FLAGS.items():
        if env.get(var):
            updates[field_name] = True

    for var, field_name in _ENV_VALUES.items():
        value = env.get(var)
        if value:
            updates[field_name] = value

    return _with_benchmark_updates(config, updates, "environment")


def apply_cli_overrides(config: BenchConfig, overrides: Mapping[str, Any]) -> BenchConfig:
    """
    Return a copy of `config` with command-line values applied.

    Entries whose value is None (flag not given) are ignored, so argparse
    defaults never clobber YAML or environment settings.
    """
    updates = {key: value for key, value in overrides.items() if value is not None}
    return _with_benchmark_updates(config, updates, "command line")
