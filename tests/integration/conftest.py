"""Shared fixtures for integration tests."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

# ── Marker registration ──────────────────────────────────────────


def pytest_configure(config: pytest.Config) -> None:
    """Register the ``integration`` marker."""
    config.addinivalue_line("markers", "integration: integration tests")


# ── File creation helpers ────────────────────────────────────────


def write_file(root: Path, rel: str, content: str) -> None:
    """Write *content* to a file under *root*."""
    f = root / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(content, encoding="utf-8")


# ── Project scaffolding fixtures ─────────────────────────────────


@pytest.fixture()
def go_project(tmp_path: Path) -> Path:
    """Create a Go module with a tested, an untested and a mock package.

    Recent go releases also profile packages without tests, so the module
    has no main package (it would be missing from the universe).
    """
    if shutil.which("go") is None:
        pytest.skip("go toolchain not installed")

    write_file(tmp_path, "go.mod", "module example.com/calc\n\ngo 1.21\n")
    write_file(
        tmp_path,
        "calc.go",
        "package calc\n\n"
        "func Add(a, b int) int {\n\treturn a + b\n}\n\n"
        "func Sub(a, b int) int {\n\treturn a - b\n}\n",
    )
    write_file(
        tmp_path,
        "calc_test.go",
        'package calc\n\nimport "testing"\n\n'
        "func TestAdd(t *testing.T) {\n"
        "\tif Add(1, 2) != 3 {\n\t\tt.Fatal(\"bad sum\")\n\t}\n}\n",
    )
    write_file(
        tmp_path,
        "format/format.go",
        'package format\n\nimport "strconv"\n\n'
        "func Int(v int) string {\n\treturn strconv.Itoa(v)\n}\n",
    )
    write_file(
        tmp_path,
        "mocks/calc.go",
        "package mocks\n\ntype Calc struct{}\n\nfunc (Calc) Add(a, b int) int {\n\treturn 0\n}\n",
    )
    write_file(tmp_path, "testdata/ignored.go", "package ignored\n")
    return tmp_path
