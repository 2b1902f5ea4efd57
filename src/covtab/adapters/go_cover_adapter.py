"""Go coverage adapter — run ``go test -coverprofile`` and parse the profile.

The cover profile format is a ``mode:`` line followed by one line per block:
``file:startLine.startCol,endLine.endCol numStmts count``.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from covtab.adapters.base import CoverageAdapter
from covtab.config import RunnerConfig
from covtab.errors import CoverageRunError, ProfileError
from covtab.models.coverage import CoverageProfile, ProfileBlock, ProfileEntry
from covtab.utils.subprocess_runner import SubprocessError, run_subprocess

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────

_MODE_PREFIX = "mode:"
_SET_MODE = "set"
_MAX_STDERR_CHARS = 2000

# Cover profile: "file:startLine.startCol,endLine.endCol numStmts count"
_COVER_LINE_REGEX = re.compile(r"^(.+):(\d+)\.(\d+),(\d+)\.(\d+) (\d+) (\d+)$")


# ── Parsing ──────────────────────────────────────────────────────


def _merge_blocks(file_name: str, blocks: list[ProfileBlock], mode: str) -> list[ProfileBlock]:
    """Sort *blocks* by position and fold blocks reported more than once.

    The same block shows up once per test binary that links its package.
    In ``set`` mode the merged block is covered if any copy is; in
    ``count``/``atomic`` mode the counts add up.
    """
    merged: list[ProfileBlock] = []
    for block in sorted(blocks, key=lambda b: b.position):
        if merged and merged[-1].position == block.position:
            last = merged[-1]
            if last.num_stmt != block.num_stmt:
                raise ProfileError(
                    f"Inconsistent statement count for {file_name} at "
                    f"{block.start_line}.{block.start_col}: {last.num_stmt} vs {block.num_stmt}"
                )
            if mode == _SET_MODE:
                count = max(last.count, block.count)
            else:
                count = last.count + block.count
            merged[-1] = ProfileBlock(
                start_line=last.start_line,
                start_col=last.start_col,
                end_line=last.end_line,
                end_col=last.end_col,
                num_stmt=last.num_stmt,
                count=count,
            )
        else:
            merged.append(block)
    return merged


def parse_profile(text: str, *, source: str = "<profile>") -> CoverageProfile:
    """Parse cover profile *text* into a CoverageProfile.

    Entries come back sorted by file name with their blocks sorted by
    position.

    Raises:
        ProfileError: If the mode line is missing or any block line is
            malformed.
    """
    mode: str | None = None
    blocks_by_file: dict[str, list[ProfileBlock]] = {}

    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.rstrip("\r")
        if not line.strip():
            continue

        if mode is None:
            if not line.startswith(_MODE_PREFIX):
                raise ProfileError(f"{source}:{line_no}: bad mode line: {line!r}")
            mode = line[len(_MODE_PREFIX) :].strip()
            if not mode:
                raise ProfileError(f"{source}:{line_no}: empty counting mode")
            continue

        match = _COVER_LINE_REGEX.match(line)
        if not match:
            raise ProfileError(f"{source}:{line_no}: line does not match cover format: {line!r}")

        file_name = match.group(1)
        start_line, start_col, end_line, end_col, num_stmt, count = (
            int(value) for value in match.groups()[1:]
        )
        blocks_by_file.setdefault(file_name, []).append(
            ProfileBlock(
                start_line=start_line,
                start_col=start_col,
                end_line=end_line,
                end_col=end_col,
                num_stmt=num_stmt,
                count=count,
            )
        )

    if mode is None:
        raise ProfileError(f"{source}: profile is empty (no mode line)")

    entries = [
        ProfileEntry(file_name=file_name, blocks=_merge_blocks(file_name, blocks, mode))
        for file_name, blocks in sorted(blocks_by_file.items())
    ]
    logger.debug("Parsed %d profile entries (mode=%s) from %s", len(entries), mode, source)
    return CoverageProfile(mode=mode, entries=entries)


# ── Adapter ──────────────────────────────────────────────────────


class GoCoverAdapter(CoverageAdapter):
    """Go coverage adapter using ``go test -coverprofile``."""

    def __init__(self, runner_config: RunnerConfig | None = None) -> None:
        self._config = runner_config or RunnerConfig()

    @property
    def name(self) -> str:
        return "go_cover"

    def build_command(self, output_path: Path) -> list[str]:
        """Return the test command that writes its profile to *output_path*."""
        return [
            *self._config.command,
            "-coverprofile",
            str(output_path),
            *self._config.extra_args,
            *self._config.packages,
        ]

    async def run_coverage(self, project_path: Path, output_path: Path) -> None:
        """Run the configured test command in *project_path*.

        Raises:
            CoverageRunError: If the command is missing, fails, times out, or
                does not write a profile.
        """
        cmd = self.build_command(output_path)
        timeout = self._config.timeout or None

        try:
            result = await run_subprocess(
                cmd,
                cwd=project_path,
                timeout=timeout,
                env=self._config.env or None,
            )
        except (SubprocessError, ValueError) as exc:
            raise CoverageRunError(f"Unable to run '{' '.join(cmd)}': {exc}") from exc

        if result.timed_out:
            raise CoverageRunError(
                f"'{' '.join(cmd)}' timed out after {timeout:.0f}s", stderr=result.stderr
            )

        if not result.success:
            detail = (result.stderr or result.stdout).strip()[-_MAX_STDERR_CHARS:]
            raise CoverageRunError(
                f"'{' '.join(cmd)}' exited with code {result.returncode}",
                stderr=detail,
            )

        if not output_path.is_file() or output_path.stat().st_size == 0:
            raise CoverageRunError(f"'{' '.join(cmd)}' did not write a cover profile to {output_path}")

        logger.info("Cover profile written to %s in %.0fms", output_path, result.duration_ms)

    def parse_coverage_file(self, coverage_file: Path) -> CoverageProfile:
        """Parse a Go cover profile file.

        Raises:
            ProfileError: If the file cannot be read or is malformed.
        """
        try:
            text = coverage_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise ProfileError(f"Unable to read cover profile {coverage_file}: {exc}") from exc

        return parse_profile(text, source=str(coverage_file))
