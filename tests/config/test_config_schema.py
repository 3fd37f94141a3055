# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the pydantic config models: field constraints and validators.
"""

import pytest
from pydantic import ValidationError

from bin2c_bench.config.schema import BenchmarkConfig, GlobalConfig, ReportConfig


class TestGlobalConfig:
    def test_log_level_is_normalised(self) -> None:
        assert GlobalConfig(config_version="1.0.0", log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GlobalConfig(config_version="1.0.0", log_level="chatty")


class TestBenchmarkConfig:
    def test_payload_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            BenchmarkConfig(payload_mb=0)

    def test_space_separated_previous_versions(self) -> None:
        config = BenchmarkConfig(previous_versions="  old  older ")
        assert config.previous_versions == ["old", "older"]

    def test_previous_version_cannot_contain_whitespace(self) -> None:
        with pytest.raises(ValidationError):
            BenchmarkConfig(previous_versions=["my build"])

    def test_previous_version_cannot_be_empty(self) -> None:
        with pytest.raises(ValidationError):
            BenchmarkConfig(previous_versions=[""])

    def test_compilers_cannot_be_empty(self) -> None:
        with pytest.raises(ValidationError):
            BenchmarkConfig(compilers=[])

    def test_compiler_names_cannot_contain_whitespace(self) -> None:
        with pytest.raises(ValidationError):
            BenchmarkConfig(compilers=["gcc -O2"])

    def test_symbol_name_must_be_identifier(self) -> None:
        with pytest.raises(ValidationError):
            BenchmarkConfig(symbol_name="my-file")


class TestReportConfig:
    def test_default_markers_in_section_order(self) -> None:
        assert ReportConfig().markers == ["gcc", "clang", "ld"]

    def test_empty_marker_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ReportConfig(markers=["gcc", ""])
