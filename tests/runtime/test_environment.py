# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for environment checks and the bootstrap sequence.
"""

import logging
import sys
from pathlib import Path

import pytest

from bin2c_bench.bench.models import Variant
from bin2c_bench.config.schema import GlobalConfig
from bin2c_bench.runtime.bootstrap import bootstrap, warn_missing_tools
from bin2c_bench.runtime.environment import (
    check_minimum_python,
    find_missing_tools,
    get_system_info,
    supports_ld_binary_objects,
)


class TestEnvironment:
    def test_current_python_passes(self) -> None:
        check_minimum_python()

    def test_old_python_is_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("bin2c_bench.runtime.environment.get_python_version", lambda: (3, 9, 0))
        with pytest.raises(RuntimeError, match="3.11"):
            check_minimum_python()

    def test_system_info_is_populated(self) -> None:
        info = get_system_info()
        assert info.python_version.startswith(f"{sys.version_info.major}.")
        assert info.platform

    @pytest.mark.parametrize(("system", "expected"), [("Linux", True), ("FreeBSD", True), ("Darwin", False)])
    def test_ld_binary_support(self, system: str, expected: bool) -> None:
        assert supports_ld_binary_objects(system) is expected

    def test_find_missing_tools_deduplicates(self) -> None:
        missing = find_missing_tools(["no-such-tool-xyz", "no-such-tool-xyz", "other-missing-abc"])
        assert missing == ["no-such-tool-xyz", "other-missing-abc"]

    def test_present_tool_is_not_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("bin2c_bench.runtime.environment.shutil.which", lambda tool: f"/usr/bin/{tool}")
        assert find_missing_tools(["cat", "gcc"]) == []


class TestBootstrap:
    def test_bootstrap_sets_package_level(self) -> None:
        bootstrap(GlobalConfig(config_version="1.0.0", log_level="WARNING"))
        assert logging.getLogger("bin2c_bench.runtime.bootstrap").level == logging.WARNING
        bootstrap(GlobalConfig(config_version="1.0.0", log_level="INFO"))

    def test_bootstrap_writes_log_file(self, tmp_path: Path) -> None:
        log_file = tmp_path / "bench.log"
        bootstrap(GlobalConfig(config_version="1.0.0", log_level="INFO", log_file=str(log_file)))
        assert "bootstrap complete" in log_file.read_text(encoding="utf-8")
        for name in list(logging.Logger.manager.loggerDict):
            if name.startswith("bin2c_bench"):
                existing = logging.getLogger(name)
                for handler in [h for h in existing.handlers if isinstance(h, logging.FileHandler)]:
                    existing.removeHandler(handler)
                    handler.close()

    def test_warn_missing_tools_ignores_paths(self) -> None:
        variants = [
            Variant("bin2c", ("build/bin2c", "myfile")),
            Variant("fake_cc", ("cat",), ("no-such-cc-xyz", "-c")),
        ]
        assert warn_missing_tools(variants) == ["no-such-cc-xyz"]
