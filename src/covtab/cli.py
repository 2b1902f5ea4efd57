"""covtab CLI — top-level command group."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any

import click
import yaml

from covtab import __version__
from covtab.analyzers.reconciler import is_excluded
from covtab.analyzers.universe import scan_universe
from covtab.config import CovtabConfig, load_config, validate_config
from covtab.errors import CoverageRunError, CovtabError, ReconciliationError
from covtab.pipeline import build_coverage_table
from covtab.reporters.json_reporter import JSONReporter
from covtab.reporters.terminal import reporter

logger = logging.getLogger(__name__)

_PATH_ARGUMENT = click.argument(
    "path",
    default=".",
    type=click.Path(file_okay=False, resolve_path=True),
)


def _config_to_dict(config: CovtabConfig) -> dict[str, Any]:
    """Convert CovtabConfig to a dictionary for display."""
    result = asdict(config)
    result.pop("raw", None)
    return result


def _load_checked_config(path: str) -> CovtabConfig:
    """Load configuration and exit with status 1 if it is unusable."""
    try:
        config = load_config(path)
    except CovtabError as exc:
        reporter.print_error(str(exc))
        raise SystemExit(1) from exc

    errors = validate_config(config)
    if errors:
        reporter.print_error(f"Found {len(errors)} configuration error(s):")
        for error in errors:
            reporter.print_error(f"  {error}")
        raise SystemExit(1)
    return config


def _report_failure(exc: CovtabError) -> None:
    reporter.print_error(f"Unable to generate coverage table: {exc}")
    if isinstance(exc, ReconciliationError):
        reporter.print_diagnostic_paths("Files in the scanned universe:", exc.known_paths)
    elif isinstance(exc, CoverageRunError) and exc.stderr:
        reporter.print_diagnostic_paths("Test output:", exc.stderr.splitlines())


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.version_option(version=__version__, prog_name="covtab")
@click.pass_context
def cli(ctx: click.Context, *, verbose: bool) -> None:
    """covtab — per-file Go coverage, including files no test touches."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@cli.command()
@_PATH_ARGUMENT
@click.option("--json-output", "as_json", is_flag=True, help="Output JSON instead of a table.")
@click.option(
    "--output",
    "output_file",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write the JSON report to this file.",
)
@click.option(
    "--fail-under",
    type=click.FloatRange(0.0, 100.0),
    default=None,
    help="Exit with status 1 when the total is below this percentage.",
)
@click.option("--show-excluded", is_flag=True, help="List files left out of the total.")
def report(
    path: str,
    *,
    as_json: bool,
    output_file: Path | None,
    fail_under: float | None,
    show_excluded: bool,
) -> None:
    """Run the module's tests and print per-file coverage.

    Every eligible file is listed, including files no test touches (0%).
    Files under a mocks/ directory are left out of the table and the total.

    Example:
      covtab report
      covtab report ./service --fail-under 80
    """
    config = _load_checked_config(path)

    try:
        run = asyncio.run(build_coverage_table(config))
    except CovtabError as exc:
        _report_failure(exc)
        raise SystemExit(1) from exc

    json_reporter = JSONReporter()
    if as_json or config.report.format == "json":
        click.echo(json_reporter.generate_string(run))
    else:
        reporter.print_coverage_table(run.table, show_excluded=show_excluded)

    if output_file is not None:
        json_reporter.generate(output_file, run)

    threshold = fail_under if fail_under is not None else config.report.fail_under
    if threshold and run.table.aggregate < threshold:
        logger.warning("Fail-under check failed: %.2f < %.2f", run.table.aggregate, threshold)
        reporter.print_error(
            f"Total coverage {run.table.aggregate:.2f}% is below the required {threshold:.2f}%"
        )
        raise SystemExit(1)


@cli.command()
@_PATH_ARGUMENT
@click.option("--counted-only", is_flag=True, help="Hide files excluded from the total.")
def files(path: str, *, counted_only: bool) -> None:
    """List the coverage-eligible files under PATH.

    Test files, entry-point files, and hidden or testdata directories are
    left out.
    """
    config = _load_checked_config(path)

    try:
        universe = scan_universe(config.root_path, config.scan)
    except CovtabError as exc:
        reporter.print_error(str(exc))
        raise SystemExit(1) from exc

    paths = sorted(universe)
    if counted_only:
        paths = [p for p in paths if not is_excluded(p, config.report.excluded_segments)]
    reporter.print_file_list(paths)


@cli.group("config")
def config_group() -> None:
    """Inspect `.covtab.yml` configuration."""


@config_group.command("show")
@_PATH_ARGUMENT
@click.option("--json-output", "as_json", is_flag=True, help="Output as JSON instead of YAML.")
def config_show(path: str, *, as_json: bool) -> None:
    """Display the resolved configuration."""
    try:
        config = load_config(path)
    except CovtabError as exc:
        reporter.print_error(str(exc))
        raise SystemExit(1) from exc

    config_dict = _config_to_dict(config)
    if as_json:
        click.echo(json.dumps(config_dict, indent=2))
    else:
        click.echo(yaml.safe_dump(config_dict, sort_keys=False, default_flow_style=False))


@config_group.command("validate")
@_PATH_ARGUMENT
def config_validate(path: str) -> None:
    """Validate `.covtab.yml` and the module file."""
    config = _load_checked_config(path)
    if not config.module_file_path.is_file():
        reporter.print_error(f"Module file not found: {config.module_file_path}")
        raise SystemExit(1)
    reporter.print_success("Configuration is valid!")
