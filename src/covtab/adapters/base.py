"""Base class for coverage tool adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from covtab.models.coverage import CoverageProfile

# Runs the tests under a root directory and writes a cover profile to the output path.
CoverageRunner = Callable[[Path, Path], Awaitable[None]]


class CoverageAdapter(ABC):
    """Abstract base class for coverage tool adapters.

    An adapter knows how to run a coverage tool for a project and how to
    parse the profile the tool writes.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Coverage tool identifier (e.g. 'go_cover')."""

    @abstractmethod
    async def run_coverage(self, project_path: Path, output_path: Path) -> None:
        """Run the tests under *project_path* and write the profile to *output_path*.

        Raises:
            CoverageRunError: If the run fails or leaves no profile behind.
        """

    @abstractmethod
    def parse_coverage_file(self, coverage_file: Path) -> CoverageProfile:
        """Parse a native coverage profile file.

        Raises:
            ProfileError: If the file cannot be read or is malformed.
        """
