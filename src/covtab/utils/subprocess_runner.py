"""Subprocess runner used to invoke the external test tool.

Runs a command to completion, captures its output and reports failures as
structured results. A timeout is optional: without one the call waits for
the process however long it takes.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

logger = logging.getLogger(__name__)


@dataclass
class SubprocessResult:
    """Result of subprocess execution."""

    returncode: int
    """Exit code of the process."""

    stdout: str
    """Standard output captured from the process."""

    stderr: str
    """Standard error captured from the process."""

    timed_out: bool = False
    """True if the process was killed because the timeout expired."""

    duration_ms: float = 0.0
    """Wall-clock duration in milliseconds."""

    @property
    def success(self) -> bool:
        """True if the process exited with code 0 before any timeout."""
        return self.returncode == 0 and not self.timed_out


class SubprocessError(Exception):
    """Exception raised when a command cannot be started."""

    def __init__(self, message: str, result: SubprocessResult) -> None:
        """Initialize with error message and result.

        Args:
            message: Error description.
            result: The SubprocessResult from the failed execution.
        """
        super().__init__(message)
        self.result = result


async def run_subprocess(
    command: Sequence[str],
    *,
    cwd: Path | None = None,
    timeout: float | None = None,
    env: Mapping[str, str] | None = None,
) -> SubprocessResult:
    """Execute *command* and wait for it to finish.

    Args:
        command: Command and arguments (e.g. ``['go', 'test', './...']``).
        cwd: Working directory. Defaults to the current directory.
        timeout: Seconds to wait before killing the process. ``None`` waits
            indefinitely.
        env: Variables added on top of the current environment.

    Returns:
        SubprocessResult with exit code, output, and timing.

    Raises:
        SubprocessError: If the command cannot be found or is not executable.
        ValueError: If the command is empty, the timeout is not positive,
            or the working directory does not exist.
    """
    if not command:
        raise ValueError("Command cannot be empty")

    if timeout is not None and timeout <= 0:
        raise ValueError(f"Timeout must be positive, got {timeout}")

    work_dir = cwd.resolve() if cwd else Path.cwd()
    if not work_dir.is_dir():
        raise ValueError(f"Working directory does not exist: {work_dir}")

    full_env = {**os.environ, **env} if env else None
    printable = " ".join(str(c) for c in command)

    logger.debug("Running subprocess: %s (cwd=%s, timeout=%s)", printable, work_dir, timeout)

    start_time = time.perf_counter()
    timed_out = False

    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=work_dir,
            env=full_env,
        )
    except FileNotFoundError as exc:
        logger.error("Command not found: %s", command[0])
        raise SubprocessError(
            f"Command not found: {command[0]}",
            result=SubprocessResult(returncode=-1, stdout="", stderr=str(exc)),
        ) from exc
    except PermissionError as exc:
        raise SubprocessError(
            f"Command is not executable: {command[0]}",
            result=SubprocessResult(returncode=-1, stdout="", stderr=str(exc)),
        ) from exc

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except TimeoutError:
        logger.warning("Subprocess timed out after %s seconds", timeout)
        timed_out = True
        try:
            process.kill()
            await process.wait()
        except ProcessLookupError:
            pass  # already exited
        stdout_bytes = b""
        stderr_bytes = b"Process timed out and was killed"

    duration_ms = (time.perf_counter() - start_time) * 1000
    returncode = process.returncode if process.returncode is not None else -1
    if timed_out and returncode == 0:
        returncode = -1

    result = SubprocessResult(
        returncode=returncode,
        stdout=stdout_bytes.decode("utf-8", errors="replace"),
        stderr=stderr_bytes.decode("utf-8", errors="replace"),
        timed_out=timed_out,
        duration_ms=duration_ms,
    )

    logger.debug(
        "Subprocess completed: returncode=%d, duration=%.2fms, success=%s",
        result.returncode,
        duration_ms,
        result.success,
    )

    return result
