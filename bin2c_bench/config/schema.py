# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for bin2c-bench.

Every config section gets its own frozen pydantic model. Frozen means once you
create it, you cannot mutate it. Overrides from the environment or the command
line produce a new copy instead, so the value threaded through the harness is
the single source of truth for a run.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class GlobalConfig(BaseModel):
    """Cross-cutting settings: schema version and observability."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        description="Schema version for compatibility tracking, e.g. '1.0.0'"
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in _VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_VALID_LOG_LEVELS)}")
        return upper


class ReportConfig(BaseModel):
    """
    How the evaluation report is laid out.

    Each marker opens its own report section after the baseline section.
    A label lands in a marker's section when the marker is a substring of the
    label; labels that contain no marker at all form the baseline section.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    markers: list[str] = Field(
        default_factory=lambda: ["gcc", "clang", "ld"],
        min_length=1,
        description="Compiler-tool markers, in section order",
    )
    unit: str = Field(default="MB/s", description="Unit text printed after each throughput")

    @field_validator("markers")
    @classmethod
    def _check_markers(cls, value: list[str]) -> list[str]:
        if any(not marker for marker in value):
            raise ValueError("markers must be non-empty strings")
        return value


class BenchmarkConfig(BaseModel):
    """
    Everything the measurement loop needs: which variants to run, how big the
    workload is, which compilers to compare, and where results go.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    payload_mb: int = Field(
        default=50,
        ge=1,
        description="Size of the random payload generated per iteration, in MB (10^6 bytes)",
    )
    skip_xxd: bool = Field(default=False, description="Omit the xxd baseline converter")
    skip_ld: bool = Field(
        default=False,
        description="Omit the `ld -r -b binary` object-file comparison",
    )
    skip_compile: bool = Field(
        default=False,
        description="Omit all compiler timings, run raw conversions only",
    )
    previous_versions: list[str] = Field(
        default_factory=list,
        description="Alternate bin2c builds to compare against, by path",
    )
    previous_versions_root: str = Field(
        default="build/previous",
        description="Directory relative previous-version entries are resolved under",
    )
    compilers: list[str] = Field(
        default_factory=lambda: ["gcc", "clang"],
        min_length=1,
        description="C compiler executables used for the compile-stage comparisons",
    )
    bin2c_prefix: str = Field(
        default=".",
        description="Checkout whose build/bin2c is the converter under test",
    )
    symbol_name: str = Field(default="myfile", description="C symbol name passed to bin2c")
    results_file: Optional[str] = Field(
        default=None,
        description="Existing results store to append to; never deleted by the harness",
    )
    session_dir: Optional[str] = Field(
        default=None,
        description="Existing session directory to reuse; never deleted by the harness",
    )
    report: ReportConfig = Field(default_factory=ReportConfig)

    @field_validator("previous_versions", "compilers", mode="before")
    @classmethod
    def _split_space_separated(cls, value: object) -> object:
        # Accept the same "a b c" form the environment variables use.
        if isinstance(value, str):
            return value.split()
        return value

    @field_validator("compilers")
    @classmethod
    def _check_compilers(cls, value: list[str]) -> list[str]:
        # Compiler names end up inside result labels, which can't hold whitespace.
        if any(not cc or any(ch.isspace() for ch in cc) for cc in value):
            raise ValueError("compiler names must be non-empty and contain no whitespace")
        return value

    @field_validator("previous_versions")
    @classmethod
    def _check_previous_versions(cls, value: list[str]) -> list[str]:
        # The basename becomes part of a result label.
        if any(not entry or any(ch.isspace() for ch in entry) for entry in value):
            raise ValueError("previous_versions entries must be non-empty and contain no whitespace")
        return value

    @field_validator("symbol_name")
    @classmethod
    def _check_symbol_name(cls, value: str) -> str:
        if not value.isidentifier():
            raise ValueError("symbol_name must be a valid C identifier")
        return value


class BenchConfig(BaseModel):
    """
    Top-level config container.

    A YAML file holds a `global:` section and optionally a `benchmark:`
    section; anything not given keeps its default.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    global_config: GlobalConfig = Field(alias="global")
    benchmark: BenchmarkConfig = Field(default_factory=BenchmarkConfig)
