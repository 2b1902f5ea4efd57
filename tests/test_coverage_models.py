"""Tests for coverage models (models/coverage.py)."""

from __future__ import annotations

import pytest

from covtab.models.coverage import CoverageRow, CoverageTable, ProfileBlock, Severity


class TestSeverity:
    @pytest.mark.parametrize(
        ("percentage", "expected"),
        [
            (0.0, Severity.UNCOVERED),
            (39.999, Severity.VERY_LOW),
            (40.0, Severity.LOW),
            (59.999, Severity.LOW),
            (60.0, Severity.MEDIUM),
            (79.999, Severity.MEDIUM),
            (80.0, Severity.GOOD),
            (89.999, Severity.GOOD),
            (90.0, Severity.EXCELLENT),
            (100.0, Severity.EXCELLENT),
        ],
    )
    def test_boundaries(self, percentage: float, expected: Severity) -> None:
        assert Severity.for_percentage(percentage) is expected

    def test_small_nonzero_is_very_low(self) -> None:
        assert Severity.for_percentage(0.01) is Severity.VERY_LOW

    def test_values(self) -> None:
        assert Severity.VERY_LOW.value == "very low"
        assert Severity.UNCOVERED.value == "uncovered"


class TestProfileBlock:
    def test_is_covered(self) -> None:
        assert ProfileBlock(1, 1, 2, 2, num_stmt=1, count=3).is_covered is True
        assert ProfileBlock(1, 1, 2, 2, num_stmt=1, count=0).is_covered is False

    def test_position(self) -> None:
        assert ProfileBlock(3, 4, 5, 6, num_stmt=1, count=0).position == (3, 4, 5, 6)


class TestCoverageTable:
    def test_row_severity(self) -> None:
        assert CoverageRow(path="a.go", percentage=85.0).severity is Severity.GOOD

    def test_to_dict(self) -> None:
        table = CoverageTable(
            rows=[
                CoverageRow(path="a.go", percentage=80.0),
                CoverageRow(path="b.go", percentage=100.0 / 3),
            ],
            aggregate=(80.0 + 100.0 / 3) / 2,
            excluded=[CoverageRow(path="mocks/c.go", percentage=0.0)],
        )

        data = table.to_dict()

        assert data["files"] == [
            {"path": "a.go", "coverage": 80.0, "severity": "good"},
            {"path": "b.go", "coverage": 33.33, "severity": "very low"},
        ]
        assert data["excluded"] == ["mocks/c.go"]
        assert data["total"] == 56.67
        assert data["severity"] == "low"
