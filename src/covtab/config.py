"""Configuration parsing from ``.covtab.yml``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from covtab.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".covtab.yml"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")

ENTRYPOINT_STRATEGIES = frozenset({"line", "parse"})
OUTPUT_FORMATS = frozenset({"table", "json"})


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_env_vars(item) if isinstance(item, str) else item for item in value
            ]
        else:
            result[key] = value
    return result


@dataclass
class ScanConfig:
    """Rules deciding which files belong to the coverage universe."""

    source_suffix: str = ".go"
    """Only files ending with this suffix are candidates."""

    test_suffix: str = "_test.go"
    """Files ending with this suffix are tests and never coverage targets."""

    hidden_prefix: str = "."
    """Directories whose name starts with this prefix are not descended into."""

    skip_dirs: list[str] = field(default_factory=lambda: ["testdata"])
    """Directory names pruned entirely (the go tool ignores them as well)."""

    entrypoint_marker: str = "package main"
    """Exact line that marks an entry-point file under the ``line`` strategy."""

    entrypoint_package: str = "main"
    """Package name that marks an entry-point file under the ``parse`` strategy."""

    entrypoint_detection: str = "line"
    """How entry-point files are recognised: ``line`` or ``parse``."""


@dataclass
class ReportConfig:
    """Aggregation and output configuration."""

    excluded_segments: list[str] = field(default_factory=lambda: ["mocks"])
    """Directory names whose files never count toward the total."""

    format: str = "table"
    """Default output format: table or json."""

    fail_under: float = 0.0
    """Exit non-zero when the total falls below this percentage (0 = disabled)."""


@dataclass
class RunnerConfig:
    """External test run configuration."""

    command: list[str] = field(default_factory=lambda: ["go", "test"])
    """Test command; ``-coverprofile <file>`` and the packages are appended."""

    packages: list[str] = field(default_factory=lambda: ["./..."])
    """Package patterns passed to the test command."""

    extra_args: list[str] = field(default_factory=list)
    """Additional arguments placed before the package patterns."""

    timeout: float = 0.0
    """Seconds to wait for the test run (0 = wait indefinitely)."""

    env: dict[str, str] = field(default_factory=dict)
    """Extra environment variables for the test run."""


@dataclass
class CovtabConfig:
    """Top-level configuration for a coverage run."""

    root: str
    """Module root directory (absolute)."""

    module_file: str = "go.mod"
    """Module definition file, relative to ``root``."""

    scan: ScanConfig = field(default_factory=ScanConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    runner: RunnerConfig = field(default_factory=RunnerConfig)

    raw: dict[str, Any] = field(default_factory=dict)
    """Raw parsed YAML, kept for ``config show``."""

    @property
    def root_path(self) -> Path:
        return Path(self.root)

    @property
    def module_file_path(self) -> Path:
        return self.root_path / self.module_file


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name, {})
    if not isinstance(value, dict):
        logger.warning("Ignoring non-mapping '%s' section in %s", name, CONFIG_FILE_NAME)
        return {}
    return value


def _str_list(value: Any, default: list[str]) -> list[str]:
    if value is None:
        return list(default)
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(item) for item in value]
    return list(default)


def _parse_scan_config(raw: dict[str, Any]) -> ScanConfig:
    """Parse scan configuration from raw YAML."""
    scan_raw = _section(raw, "scan")
    defaults = ScanConfig()

    return ScanConfig(
        source_suffix=str(scan_raw.get("source_suffix", defaults.source_suffix)),
        test_suffix=str(scan_raw.get("test_suffix", defaults.test_suffix)),
        hidden_prefix=str(scan_raw.get("hidden_prefix", defaults.hidden_prefix)),
        skip_dirs=_str_list(scan_raw.get("skip_dirs"), defaults.skip_dirs),
        entrypoint_marker=str(scan_raw.get("entrypoint_marker", defaults.entrypoint_marker)),
        entrypoint_package=str(scan_raw.get("entrypoint_package", defaults.entrypoint_package)),
        entrypoint_detection=str(
            scan_raw.get(
                "entrypoint_detection",
                os.environ.get("COVTAB_ENTRYPOINT_DETECTION", defaults.entrypoint_detection),
            )
        ),
    )


def _parse_report_config(raw: dict[str, Any]) -> ReportConfig:
    """Parse report configuration from raw YAML."""
    report_raw = _section(raw, "report")
    defaults = ReportConfig()

    return ReportConfig(
        excluded_segments=_str_list(
            report_raw.get("excluded_segments"), defaults.excluded_segments
        ),
        format=str(report_raw.get("format", defaults.format)),
        fail_under=float(
            report_raw.get("fail_under", os.environ.get("COVTAB_FAIL_UNDER", defaults.fail_under))
        ),
    )


def _parse_runner_config(raw: dict[str, Any]) -> RunnerConfig:
    """Parse runner configuration from raw YAML."""
    runner_raw = _section(raw, "runner")
    defaults = RunnerConfig()

    env_raw = runner_raw.get("env", {})
    env = {str(k): str(v) for k, v in env_raw.items()} if isinstance(env_raw, dict) else {}

    return RunnerConfig(
        command=_str_list(runner_raw.get("command"), defaults.command),
        packages=_str_list(runner_raw.get("packages"), defaults.packages),
        extra_args=_str_list(runner_raw.get("extra_args"), defaults.extra_args),
        timeout=float(
            runner_raw.get("timeout", os.environ.get("COVTAB_RUNNER_TIMEOUT", defaults.timeout))
        ),
        env=env,
    )


def load_config(root: str | Path) -> CovtabConfig:
    """Load and parse the complete ``.covtab.yml`` configuration.

    Falls back to defaults and environment variables when the YAML file
    is missing or incomplete.

    Raises:
        ConfigurationError: If the YAML is malformed or holds invalid values.
    """
    root_path = Path(root).resolve()
    config_file = root_path / CONFIG_FILE_NAME

    raw: dict[str, Any] = {}
    if config_file.is_file():
        try:
            parsed = yaml.safe_load(config_file.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"Unable to read {config_file}: {exc}") from exc
        if isinstance(parsed, dict):
            raw = _resolve_dict(parsed)
        elif parsed is not None:
            raise ConfigurationError(f"{config_file} must contain a mapping at the top level")

    try:
        return CovtabConfig(
            root=str(root_path),
            module_file=str(raw.get("module_file", "go.mod")),
            scan=_parse_scan_config(raw),
            report=_parse_report_config(raw),
            runner=_parse_runner_config(raw),
            raw=raw,
        )
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid value in {config_file}: {exc}") from exc


def _validate_scan_config(scan: ScanConfig) -> list[str]:
    """Validate scan rules."""
    errors: list[str] = []

    if not scan.source_suffix:
        errors.append("scan.source_suffix must not be empty")

    if scan.entrypoint_detection not in ENTRYPOINT_STRATEGIES:
        errors.append(
            f"scan.entrypoint_detection must be one of {sorted(ENTRYPOINT_STRATEGIES)} "
            f"(got: {scan.entrypoint_detection})"
        )

    return errors


def _validate_report_config(report: ReportConfig) -> list[str]:
    """Validate report settings."""
    max_percentage = 100.0
    errors: list[str] = []

    if report.format not in OUTPUT_FORMATS:
        errors.append(
            f"report.format must be one of {sorted(OUTPUT_FORMATS)} (got: {report.format})"
        )

    if not 0.0 <= report.fail_under <= max_percentage:
        errors.append(f"report.fail_under must be between 0 and 100 (got: {report.fail_under})")

    return errors


def _validate_runner_config(runner: RunnerConfig) -> list[str]:
    """Validate test runner settings."""
    errors: list[str] = []

    if not runner.command:
        errors.append("runner.command must not be empty")

    if runner.timeout < 0:
        errors.append(f"runner.timeout must be non-negative (got: {runner.timeout})")

    return errors


def validate_config(config: CovtabConfig) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    errors: list[str] = []

    if not config.module_file:
        errors.append("module_file is required")

    errors.extend(_validate_scan_config(config.scan))
    errors.extend(_validate_report_config(config.report))
    errors.extend(_validate_runner_config(config.runner))

    return errors
