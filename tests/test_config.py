"""Tests for config.py — .covtab.yml parsing and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from covtab.config import (
    CovtabConfig,
    ReportConfig,
    RunnerConfig,
    ScanConfig,
    _resolve_dict,
    _resolve_env_vars,
    load_config,
    validate_config,
)
from covtab.errors import ConfigurationError


def _write_config(root: Path, data: dict[str, Any]) -> None:
    """Write .covtab.yml with given data."""
    (root / ".covtab.yml").write_text(yaml.dump(data), encoding="utf-8")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("COVTAB_FAIL_UNDER", "COVTAB_RUNNER_TIMEOUT", "COVTAB_ENTRYPOINT_DETECTION"):
        monkeypatch.delenv(var, raising=False)


# ── _resolve_env_vars / _resolve_dict ─────────────────────────────────


class TestResolveEnvVars:
    def test_resolves_existing_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_VAR", "hello")
        assert _resolve_env_vars("${MY_VAR}") == "hello"

    def test_missing_var_returns_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MISSING_VAR", raising=False)
        assert _resolve_env_vars("${MISSING_VAR}") == ""

    def test_nested_dict_and_lists(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GO_BIN", "/opt/go/bin/go")
        data = {"runner": {"command": ["${GO_BIN}", "test"], "timeout": 5}}
        assert _resolve_dict(data) == {
            "runner": {"command": ["/opt/go/bin/go", "test"], "timeout": 5}
        }


# ── load_config ──────────────────────────────────────────────────────


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)

        assert config.root == str(tmp_path.resolve())
        assert config.module_file == "go.mod"
        assert config.module_file_path == tmp_path.resolve() / "go.mod"
        assert config.scan == ScanConfig()
        assert config.report == ReportConfig()
        assert config.runner == RunnerConfig()
        assert config.scan.skip_dirs == ["testdata"]
        assert config.report.excluded_segments == ["mocks"]
        assert config.runner.command == ["go", "test"]
        assert config.runner.timeout == 0.0

    def test_full_file(self, tmp_path: Path) -> None:
        _write_config(
            tmp_path,
            {
                "scan": {
                    "skip_dirs": ["testdata", "vendor"],
                    "entrypoint_detection": "parse",
                },
                "report": {"excluded_segments": ["mocks", "fakes"], "fail_under": 75},
                "runner": {
                    "command": ["go", "test"],
                    "extra_args": ["-race"],
                    "timeout": 600,
                    "env": {"CGO_ENABLED": 0},
                },
            },
        )

        config = load_config(tmp_path)

        assert config.scan.skip_dirs == ["testdata", "vendor"]
        assert config.scan.entrypoint_detection == "parse"
        assert config.report.excluded_segments == ["mocks", "fakes"]
        assert config.report.fail_under == 75.0
        assert config.runner.extra_args == ["-race"]
        assert config.runner.timeout == 600.0
        assert config.runner.env == {"CGO_ENABLED": "0"}

    def test_single_string_becomes_list(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"scan": {"skip_dirs": "fixtures"}})
        assert load_config(tmp_path).scan.skip_dirs == ["fixtures"]

    def test_empty_list_disables_rule(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"report": {"excluded_segments": []}})
        assert load_config(tmp_path).report.excluded_segments == []

    def test_env_fallbacks(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COVTAB_FAIL_UNDER", "60")
        monkeypatch.setenv("COVTAB_RUNNER_TIMEOUT", "90")
        monkeypatch.setenv("COVTAB_ENTRYPOINT_DETECTION", "parse")

        config = load_config(tmp_path)

        assert config.report.fail_under == 60.0
        assert config.runner.timeout == 90.0
        assert config.scan.entrypoint_detection == "parse"

    def test_file_overrides_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COVTAB_FAIL_UNDER", "60")
        _write_config(tmp_path, {"report": {"fail_under": 10}})
        assert load_config(tmp_path).report.fail_under == 10.0

    def test_non_mapping_section_falls_back_to_defaults(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"scan": ["not", "a", "mapping"]})
        assert load_config(tmp_path).scan == ScanConfig()

    def test_empty_file(self, tmp_path: Path) -> None:
        (tmp_path / ".covtab.yml").write_text("", encoding="utf-8")
        assert load_config(tmp_path).raw == {}

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        (tmp_path / ".covtab.yml").write_text("scan: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Unable to read"):
            load_config(tmp_path)

    def test_top_level_list_raises(self, tmp_path: Path) -> None:
        (tmp_path / ".covtab.yml").write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(tmp_path)

    def test_bad_number_raises(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"runner": {"timeout": "soon"}})
        with pytest.raises(ConfigurationError, match="Invalid value"):
            load_config(tmp_path)


# ── validate_config ──────────────────────────────────────────────────


class TestValidateConfig:
    def test_defaults_are_valid(self, tmp_path: Path) -> None:
        assert validate_config(load_config(tmp_path)) == []

    def test_unknown_entrypoint_strategy(self) -> None:
        config = CovtabConfig(root="/x", scan=ScanConfig(entrypoint_detection="ast"))
        errors = validate_config(config)
        assert len(errors) == 1
        assert "scan.entrypoint_detection" in errors[0]

    def test_fail_under_out_of_range(self) -> None:
        config = CovtabConfig(root="/x", report=ReportConfig(fail_under=120.0))
        assert any("report.fail_under" in e for e in validate_config(config))

    def test_unknown_format(self) -> None:
        config = CovtabConfig(root="/x", report=ReportConfig(format="html"))
        assert any("report.format" in e for e in validate_config(config))

    def test_negative_timeout_and_empty_command(self) -> None:
        config = CovtabConfig(root="/x", runner=RunnerConfig(command=[], timeout=-1))
        errors = validate_config(config)
        assert any("runner.command" in e for e in errors)
        assert any("runner.timeout" in e for e in errors)

    def test_empty_source_suffix(self) -> None:
        config = CovtabConfig(root="/x", scan=ScanConfig(source_suffix=""))
        assert any("scan.source_suffix" in e for e in validate_config(config))
