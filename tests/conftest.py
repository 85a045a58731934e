"""Pytest configuration.

`src/` is put on the path by `[tool.pytest.ini_options] pythonpath`; this
module only provides shared fixtures.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence

import pytest

from adapters.process import CommandResult



@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep user config, `.env` files and CHARTSEED_* variables out of tests."""

    for key in list(os.environ):
        if key.startswith("CHARTSEED_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    cwd = tmp_path / "cwd"
    cwd.mkdir()
    monkeypatch.chdir(cwd)
    return cwd


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    ws = tmp_path / "workspace"
    ws.mkdir()
    return ws


class FakeRunner:
    """Stand-in for `adapters.process.run_command`.

    `responses` maps a tuple of leading arguments (after the executable) to
    `(returncode, stdout, stderr)`; unmatched commands succeed silently.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.timeouts: list[float | None] = []
        self.responses: dict[tuple[str, ...], tuple[int, str, str]] = {}

    def __call__(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        cmd = [str(c) for c in command]
        self.calls.append(cmd)
        self.timeouts.append(timeout)
        args = cmd[1:]
        best: tuple[str, ...] | None = None
        for prefix in self.responses:
            if tuple(args[: len(prefix)]) == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        if best is None:
            return CommandResult(command=cmd, returncode=0)
        returncode, stdout, stderr = self.responses[best]
        return CommandResult(command=cmd, returncode=returncode, stdout=stdout, stderr=stderr)

    def subcommands(self) -> list[list[str]]:
        return [c[1:] for c in self.calls]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()
