# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for bin2c-bench tests.

Fixtures here are available to every test file automatically.
We keep them minimal: just the stuff that multiple test modules need.
"""

import textwrap
from pathlib import Path

import pytest

from bin2c_bench.config.schema import BenchmarkConfig


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """The smallest config that passes schema validation."""
    config_content = textwrap.dedent("""\
        global:
          config_version: "1.0.0"
          log_level: "DEBUG"
    """)
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def invalid_config_file(tmp_path: Path) -> Path:
    """Valid YAML that fails schema validation (missing config_version)."""
    config_content = textwrap.dedent("""\
        global:
          log_level: "INFO"
    """)
    config_file = tmp_path / "invalid_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file


@pytest.fixture()
def results_file(tmp_path: Path) -> Path:
    """A small results store with repeated labels from every report section."""
    results = tmp_path / "results"
    results.write_text(
        textwrap.dedent("""\
            bin2c 1000000 0.500
            xxd 1000000 2.000
            bin2c_gcc 1000000 1.000
            bin2c 1000000 0.500
            bin2c_clang 1000000 4.000
            compile_ld 1000000 0.100
        """),
        encoding="utf-8",
    )
    return results


@pytest.fixture()
def small_benchmark_config() -> BenchmarkConfig:
    """One-megabyte payloads, so tests that write payloads stay fast."""
    return BenchmarkConfig(payload_mb=1)
