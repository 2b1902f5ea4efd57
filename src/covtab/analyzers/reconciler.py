"""Coverage reconciler — merge a cover profile into the scanned file universe."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from covtab.errors import EmptyAggregateError, ReconciliationError
from covtab.models.coverage import CoverageRow, CoverageTable

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from covtab.models.coverage import CoverageProfile, ProfileEntry

logger = logging.getLogger(__name__)


def normalize_profile_path(file_name: str, module_path: str) -> str:
    """Strip the module path prefix from a profile file name."""
    return file_name.removeprefix(module_path + "/") if module_path else file_name


def file_percentage(entry: ProfileEntry) -> float:
    """Return the statement coverage of a profile entry (0.0 for no statements)."""
    return entry.percentage


def is_excluded(path: str, segments: Iterable[str]) -> bool:
    """Return True if a directory component of *path* is a non-counting segment."""
    directories = path.split("/")[:-1]
    return any(segment in directories for segment in segments)


def reconcile(
    universe: Mapping[str, float],
    profile: CoverageProfile,
    module_path: str,
    *,
    excluded_segments: Iterable[str] = ("mocks",),
) -> CoverageTable:
    """Build the coverage table for *universe* from *profile*.

    Files the profile never mentions keep 0%. Files under an excluded
    segment are left out of the rows and the total. The total is the plain
    mean of per-file percentages, not weighted by statement count.

    Raises:
        ReconciliationError: If a profile entry names a file not in *universe*.
        EmptyAggregateError: If no counted files remain.
    """
    coverage = dict(universe)

    for entry in profile.entries:
        name = normalize_profile_path(entry.file_name, module_path)
        if name not in coverage:
            raise ReconciliationError(name, coverage)
        coverage[name] = file_percentage(entry)

    segments = tuple(excluded_segments)
    counted: list[CoverageRow] = []
    excluded: list[CoverageRow] = []
    for path in sorted(coverage):
        row = CoverageRow(path=path, percentage=coverage[path])
        if is_excluded(path, segments):
            logger.debug("Excluding %s from the total", path)
            excluded.append(row)
        else:
            counted.append(row)

    if not counted:
        raise EmptyAggregateError(excluded=len(excluded))

    aggregate = sum(row.percentage for row in counted) / len(counted)

    logger.debug(
        "Reconciled %d profile entries into %d counted and %d excluded files",
        len(profile.entries),
        len(counted),
        len(excluded),
    )
    return CoverageTable(rows=counted, aggregate=aggregate, excluded=excluded)
