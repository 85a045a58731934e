"""Chart lint contract."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class ChartLinter(Protocol):
    def lint(self, chart_dir: Path) -> str:
        """Lint the chart at `chart_dir` and return the tool output.

        Raises `HelmLintError` when the chart has errors.
        """

        ...
