"""JSON reporter — machine-readable coverage tables."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path

    from covtab.pipeline import CoverageRun

logger = logging.getLogger(__name__)


class JSONReporter:
    """Serialize a coverage run into a JSON document."""

    def generate(self, output_path: Path, run: CoverageRun) -> Path:
        """Write the JSON report to *output_path* and return it."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.generate_string(run), encoding="utf-8")
        logger.info("JSON report written to %s", output_path)
        return output_path

    def generate_string(self, run: CoverageRun) -> str:
        """Return the JSON report as a string."""
        return json.dumps(_build_report(run), indent=2, ensure_ascii=False)


def _build_report(run: CoverageRun) -> dict[str, Any]:
    """Build the JSON report structure."""
    return {
        "timestamp": datetime.now(UTC).isoformat(),
        "module": run.module_path,
        **run.table.to_dict(),
    }
