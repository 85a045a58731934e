"""Git publish adapter.

Replays the publish sequence of a fresh reset:

    git init
    git branch -M <branch>
    git add .
    git commit -m <message>
    git remote add <name> <url>        (set-url when it already exists)
    git push -u <name> <branch> --force

Every step is fail-fast: the first nonzero exit raises `GitCommandError`.
"""

from __future__ import annotations

import logging
from pathlib import Path

from adapters.process import CommandResult, run_command
from core.config import AppSettings
from core.domain.models import PublishRequest, PublishResult
from core.errors import GitCommandError
from core.interfaces.publisher import RepositoryPublisher

logger = logging.getLogger(__name__)


class GitPublisher(RepositoryPublisher):
    """Publishes a workspace with the `git` CLI."""

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()
        self._commands: list[list[str]] = []

    def _run(
        self,
        workspace: Path,
        *args: str,
        timeout: float | None = None,
        check: bool = True,
    ) -> CommandResult:
        result = run_command(
            [self._settings.git_executable, *args],
            cwd=workspace,
            timeout=timeout or self._settings.command_timeout_seconds,
        )
        self._commands.append(result.command)
        if check and not result.ok:
            logger.error(f"git {args[0]} failed: {result.output}")
            raise GitCommandError(result.command, result.returncode, result.output)
        return result

    def _has_head(self, workspace: Path) -> bool:
        return self._run(workspace, "rev-parse", "--verify", "--quiet", "HEAD", check=False).ok

    def publish(self, workspace: Path, request: PublishRequest) -> PublishResult:
        self._commands = []

        self._run(workspace, "init")
        self._run(workspace, "branch", "-M", request.branch)
        self._run(workspace, "add", ".")

        dirty = self._run(workspace, "status", "--porcelain").stdout.strip()
        if dirty or not self._has_head(workspace):
            self._run(workspace, "commit", "-m", request.commit_message)
        else:
            logger.info("Working tree clean; pushing the existing HEAD")

        commit_sha = self._run(workspace, "rev-parse", "HEAD").stdout.strip() or None

        remotes = self._run(workspace, "remote").stdout.split()
        if request.remote_name in remotes:
            self._run(workspace, "remote", "set-url", request.remote_name, request.remote_url)
        else:
            self._run(workspace, "remote", "add", request.remote_name, request.remote_url)

        push_args = ["push", "-u", request.remote_name, request.branch]
        if request.force:
            push_args.append("--force")
        self._run(workspace, *push_args, timeout=self._settings.push_timeout_seconds)

        logger.info(f"Pushed {commit_sha} to {request.remote_url} ({request.branch})")
        return PublishResult(
            remote_url=request.remote_url,
            branch=request.branch,
            commit_sha=commit_sha,
            commands=list(self._commands),
        )
