"""Data models for covtab."""

from covtab.models.coverage import (
    CoverageProfile,
    CoverageRow,
    CoverageTable,
    ProfileBlock,
    ProfileEntry,
    Severity,
)

__all__ = [
    "CoverageProfile",
    "CoverageRow",
    "CoverageTable",
    "ProfileBlock",
    "ProfileEntry",
    "Severity",
]
