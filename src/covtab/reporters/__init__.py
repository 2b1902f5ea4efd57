"""Output reporters for coverage tables."""

from covtab.reporters.json_reporter import JSONReporter
from covtab.reporters.terminal import CLIReporter, reporter, severity_style

__all__ = [
    "CLIReporter",
    "JSONReporter",
    "reporter",
    "severity_style",
]
