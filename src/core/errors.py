"""Domain errors.

Every failure the tool can report derives from `ChartSeedError`, so the CLI
has a single place to catch, print and exit.
"""

from __future__ import annotations

from typing import Sequence


class ChartSeedError(Exception):
    """Base error for chartseed."""


class WorkspaceError(ChartSeedError):
    """The target workspace cannot be cleaned or written."""


class TemplateRenderError(ChartSeedError):
    """An embedded template is missing or references an undefined value."""


class ProfileError(ChartSeedError):
    """A chart profile file could not be read or validated."""


class ScaffoldError(ChartSeedError):
    """Generated files failed validation."""

    def __init__(self, message: str, issues: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.issues = list(issues)


class ToolNotFoundError(ChartSeedError):
    """An external executable (git, helm, kubectl) is not on PATH."""

    def __init__(self, tool: str) -> None:
        super().__init__(f"Executable not found: {tool}")
        self.tool = tool


class ExternalCommandError(ChartSeedError):
    """An external command exited with a nonzero status."""

    def __init__(self, command: Sequence[str], returncode: int, output: str = "") -> None:
        self.command = list(command)
        self.returncode = returncode
        self.output = output.strip()
        detail = f": {self.output}" if self.output else ""
        super().__init__(f"`{' '.join(self.command)}` failed with exit code {returncode}{detail}")


class GitCommandError(ExternalCommandError):
    """A git invocation failed."""


class HelmLintError(ExternalCommandError):
    """`helm lint` reported errors."""
