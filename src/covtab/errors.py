"""Exception types shared across covtab.

Every failure in a coverage run is fatal. The CLI catches ``CovtabError``
once, prints the message and exits with status 1.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class CovtabError(Exception):
    """Base class for all covtab failures."""


class ConfigurationError(CovtabError):
    """Raised when ``go.mod`` or ``.covtab.yml`` is missing or unusable."""


class ScanError(CovtabError):
    """Raised when the source tree cannot be fully traversed."""

    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(f"Unable to scan {path}: {cause}")
        self.path = path
        self.cause = cause


class CoverageRunError(CovtabError):
    """Raised when the external test run does not produce a cover profile."""

    def __init__(self, message: str, *, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr


class ProfileError(CovtabError):
    """Raised when a cover profile does not follow the expected format."""


class ReconciliationError(CovtabError):
    """Raised when a profile entry names a file outside the scanned universe."""

    def __init__(self, path: str, known_paths: Iterable[str] = ()) -> None:
        super().__init__(f"Unknown file in coverage profile: {path}")
        self.path = path
        self.known_paths = sorted(known_paths)


class EmptyAggregateError(CovtabError):
    """Raised when no counted files remain to average."""

    def __init__(self, excluded: int = 0) -> None:
        super().__init__(
            f"No counted files to aggregate ({excluded} file(s) excluded from the total)"
        )
        self.excluded = excluded


__all__ = [
    "ConfigurationError",
    "CovtabError",
    "EmptyAggregateError",
    "ProfileError",
    "ReconciliationError",
    "ScanError",
    "CoverageRunError",
]
