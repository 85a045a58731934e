"""Publish contract.

`Protocol` keeps the pipeline independent of git: tests pass a fake, the CLI
passes `adapters.git_client.GitPublisher`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from core.domain.models import PublishRequest, PublishResult


@runtime_checkable
class RepositoryPublisher(Protocol):
    """Turns a workspace into a fresh repository and pushes it."""

    def publish(self, workspace: Path, request: PublishRequest) -> PublishResult:
        """Publish `workspace` to `request.remote_url`, raising on the first failure."""

        ...
