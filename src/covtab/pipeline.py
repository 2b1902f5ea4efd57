"""End-to-end coverage run: scan, test, parse, reconcile."""

from __future__ import annotations

import contextlib
import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from covtab.adapters.go_cover_adapter import GoCoverAdapter
from covtab.analyzers.reconciler import reconcile
from covtab.analyzers.universe import scan_universe
from covtab.utils.gomod import read_module_path

if TYPE_CHECKING:
    from covtab.adapters.base import CoverageRunner
    from covtab.config import CovtabConfig
    from covtab.models.coverage import CoverageTable

logger = logging.getLogger(__name__)


@dataclass
class CoverageRun:
    """Everything a finished coverage run produced."""

    module_path: str
    table: CoverageTable


def _module_basename(module_path: str) -> str:
    return module_path.rstrip("/").rsplit("/", 1)[-1] or "covtab"


async def build_coverage_table(
    config: CovtabConfig,
    runner: CoverageRunner | None = None,
) -> CoverageRun:
    """Run the tests for the module at ``config.root`` and reconcile the result.

    Args:
        config: Loaded configuration; its ``root`` is the module root.
        runner: Writes a cover profile for a root to an output path.
            Defaults to ``go test -coverprofile``.

    Raises:
        CovtabError: On any scan, configuration, test run, profile, or
            reconciliation failure.
    """
    root = config.root_path
    adapter = GoCoverAdapter(config.runner)
    run = runner or adapter.run_coverage

    universe = scan_universe(root, config.scan)
    module_path = read_module_path(config.module_file_path)

    with tempfile.NamedTemporaryFile(
        prefix=f"{_module_basename(module_path)}-", suffix=".out", delete=False
    ) as handle:
        profile_path = Path(handle.name)
    try:
        await run(root, profile_path)
        profile = adapter.parse_coverage_file(profile_path)
    finally:
        with contextlib.suppress(OSError):
            profile_path.unlink()

    table = reconcile(
        universe,
        profile,
        module_path,
        excluded_segments=config.report.excluded_segments,
    )
    logger.info(
        "Coverage for %s: %.2f%% across %d files", module_path, table.aggregate, len(table.rows)
    )
    return CoverageRun(module_path=module_path, table=table)
