"""Coverage universe scanning and reconciliation."""

from covtab.analyzers.reconciler import (
    file_percentage,
    is_excluded,
    normalize_profile_path,
    reconcile,
)
from covtab.analyzers.universe import is_entrypoint_file, normalize_path, scan_universe

__all__ = [
    "file_percentage",
    "is_entrypoint_file",
    "is_excluded",
    "normalize_path",
    "normalize_profile_path",
    "reconcile",
    "scan_universe",
]
