"""Subprocess wrapper shared by the git/helm adapters and the doctor.

Normalises the three failure modes (missing executable, timeout, nonzero
exit) so adapters only have to map them onto their own error types.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from core.errors import ToolNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    command: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stderr when present (git/helm report there), else stdout."""

        return (self.stderr or self.stdout).strip()


def which(executable: str) -> str | None:
    return shutil.which(executable)


def run_command(
    command: Sequence[str],
    *,
    cwd: Path | None = None,
    timeout: float | None = None,
) -> CommandResult:
    """Run `command` and capture its output.

    Never raises on a nonzero exit; a timeout yields returncode -1. A missing
    executable raises `ToolNotFoundError`.
    """

    cmd = [str(part) for part in command]
    logger.debug(f"Running {' '.join(cmd)} (cwd={cwd})")
    try:
        completed = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd is not None else None,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as exc:
        raise ToolNotFoundError(cmd[0]) from exc
    except subprocess.TimeoutExpired:
        logger.error(f"Command timed out after {timeout}s: {' '.join(cmd)}")
        return CommandResult(command=cmd, returncode=-1, stderr=f"timed out after {timeout}s")

    result = CommandResult(
        command=cmd,
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )
    if not result.ok:
        logger.debug(f"{cmd[0]} exited with {result.returncode}: {result.output}")
    return result
