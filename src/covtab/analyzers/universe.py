"""File universe scanner — find every source file that coverage should report.

The cover profile only lists files touched by some test. Scanning the tree
independently is what lets untested files show up with 0% instead of
disappearing from the report.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from covtab.errors import ScanError
from covtab.parsing.treesitter import go_package_name

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from covtab.config import ScanConfig

logger = logging.getLogger(__name__)


def normalize_path(path: Path, root: Path) -> str:
    """Return *path* relative to *root* with ``/`` separators and no leading slash."""
    relative = str(path).removeprefix(str(root))
    relative = relative.replace(os.sep, "/").replace("\\", "/")
    return relative.removeprefix("/")


def is_entrypoint_file(path: Path, scan: ScanConfig) -> bool:
    """Return True if *path* belongs to the entry-point package.

    The ``line`` strategy matches the marker against whole lines, so a
    marker inside a comment or raw string also counts. The ``parse``
    strategy reads the real package clause.

    Raises:
        OSError: If the file cannot be read.
    """
    source = path.read_bytes()

    if scan.entrypoint_detection == "parse":
        return go_package_name(source) == scan.entrypoint_package

    text = source.decode("utf-8", errors="replace")
    return any(line.rstrip("\r") == scan.entrypoint_marker for line in text.split("\n"))


def _is_pruned_dir(name: str, scan: ScanConfig) -> bool:
    if scan.hidden_prefix and name.startswith(scan.hidden_prefix):
        return True
    return name in scan.skip_dirs


def _iter_candidates(directory: Path, scan: ScanConfig) -> Iterator[Path]:
    """Yield source files under *directory*, pruning hidden and fixture dirs."""
    try:
        children = sorted(directory.iterdir())
    except OSError as exc:
        raise ScanError(str(directory), exc) from exc

    for child in children:
        if child.is_dir() and not child.is_symlink():
            if _is_pruned_dir(child.name, scan):
                logger.debug("Skipping directory %s", child)
                continue
            yield from _iter_candidates(child, scan)
        elif child.name.endswith(scan.source_suffix):
            yield child


def scan_universe(root: Path, scan: ScanConfig) -> dict[str, float]:
    """Map every coverage-eligible file under *root* to an initial 0.0.

    Keys are normalized relative paths (see ``normalize_path``). Test files
    and entry-point files are left out.

    Raises:
        ScanError: If any directory or candidate file cannot be read. A
            partial universe is never returned.
    """
    universe: dict[str, float] = {}

    for path in _iter_candidates(root, scan):
        if scan.test_suffix and path.name.endswith(scan.test_suffix):
            continue

        try:
            entrypoint = is_entrypoint_file(path, scan)
        except OSError as exc:
            raise ScanError(str(path), exc) from exc

        if entrypoint:
            logger.debug("Skipping entry-point file %s", path)
            continue

        universe[normalize_path(path, root)] = 0.0

    logger.debug("Scanned %d coverage-eligible files under %s", len(universe), root)
    return universe
