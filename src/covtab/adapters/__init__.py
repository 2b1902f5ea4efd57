"""Adapters for external coverage tools."""

from covtab.adapters.base import CoverageAdapter, CoverageRunner
from covtab.adapters.go_cover_adapter import GoCoverAdapter, parse_profile

__all__ = [
    "CoverageAdapter",
    "CoverageRunner",
    "GoCoverAdapter",
    "parse_profile",
]
