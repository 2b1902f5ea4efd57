"""Coverage profile and coverage table models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# Severity thresholds (lower bound of each tier, exclusive of the tier below)
_VERY_LOW_BELOW = 40.0
_LOW_BELOW = 60.0
_MEDIUM_BELOW = 80.0
_GOOD_BELOW = 90.0


@dataclass(frozen=True)
class ProfileBlock:
    """A single basic block from a Go cover profile."""

    start_line: int
    start_col: int
    end_line: int
    end_col: int
    num_stmt: int
    """Number of statements in the block."""

    count: int
    """Execution count (0/1 in ``set`` mode)."""

    @property
    def position(self) -> tuple[int, int, int, int]:
        """Return the block's source span, used to merge duplicate blocks."""
        return (self.start_line, self.start_col, self.end_line, self.end_col)

    @property
    def is_covered(self) -> bool:
        """Return True if the block was executed at least once."""
        return self.count > 0


@dataclass
class ProfileEntry:
    """All blocks recorded for one file in a cover profile."""

    file_name: str
    """File path as written by the cover tool (module-path-prefixed)."""

    blocks: list[ProfileBlock] = field(default_factory=list)

    @property
    def total_statements(self) -> int:
        """Return the number of statements across all blocks."""
        return sum(block.num_stmt for block in self.blocks)

    @property
    def covered_statements(self) -> int:
        """Return the number of statements in executed blocks."""
        return sum(block.num_stmt for block in self.blocks if block.is_covered)

    @property
    def percentage(self) -> float:
        """Return statement coverage as a percentage (0.0-100.0).

        A file without statements reports 0.0 rather than dividing by zero.
        """
        total = self.total_statements
        if total == 0:
            return 0.0
        return self.covered_statements / total * 100.0


@dataclass
class CoverageProfile:
    """A parsed cover profile: counting mode plus per-file entries."""

    mode: str
    entries: list[ProfileEntry] = field(default_factory=list)


class Severity(Enum):
    """Display tier for a coverage percentage."""

    UNCOVERED = "uncovered"
    VERY_LOW = "very low"
    LOW = "low"
    MEDIUM = "medium"
    GOOD = "good"
    EXCELLENT = "excellent"

    @classmethod
    def for_percentage(cls, percentage: float) -> Severity:
        """Classify *percentage* into a display tier."""
        if percentage == 0:
            return cls.UNCOVERED
        if percentage < _VERY_LOW_BELOW:
            return cls.VERY_LOW
        if percentage < _LOW_BELOW:
            return cls.LOW
        if percentage < _MEDIUM_BELOW:
            return cls.MEDIUM
        if percentage < _GOOD_BELOW:
            return cls.GOOD
        return cls.EXCELLENT


@dataclass(frozen=True)
class CoverageRow:
    """One rendered line of the coverage table."""

    path: str
    percentage: float

    @property
    def severity(self) -> Severity:
        return Severity.for_percentage(self.percentage)


@dataclass
class CoverageTable:
    """Reconciled coverage for every eligible file of a module."""

    rows: list[CoverageRow]
    """Counted files, sorted by path."""

    aggregate: float
    """Unweighted mean of the counted files' percentages."""

    excluded: list[CoverageRow] = field(default_factory=list)
    """Files under a non-counting path segment, sorted by path."""

    @property
    def severity(self) -> Severity:
        return Severity.for_percentage(self.aggregate)

    def to_dict(self) -> dict[str, object]:
        """Serialize the table for JSON output."""
        return {
            "files": [
                {
                    "path": row.path,
                    "coverage": round(row.percentage, 2),
                    "severity": row.severity.value,
                }
                for row in self.rows
            ],
            "excluded": [row.path for row in self.excluded],
            "total": round(self.aggregate, 2),
            "severity": self.severity.value,
        }
