"""`helm lint` adapter."""

from __future__ import annotations

import logging
from pathlib import Path

from adapters.process import run_command
from core.config import AppSettings
from core.errors import HelmLintError
from core.interfaces.linter import ChartLinter

logger = logging.getLogger(__name__)


class HelmLinter(ChartLinter):
    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    def lint(self, chart_dir: Path) -> str:
        result = run_command(
            [self._settings.helm_executable, "lint", str(chart_dir)],
            timeout=self._settings.command_timeout_seconds,
        )
        if not result.ok:
            # helm prints the findings on stdout and only a summary on stderr
            output = "\n".join(part for part in (result.stdout.strip(), result.stderr.strip()) if part)
            raise HelmLintError(result.command, result.returncode, output)
        logger.info(f"helm lint passed for {chart_dir}")
        return result.stdout.strip()
