from __future__ import annotations

from pathlib import Path

import pytest

from adapters import git_client
from adapters.git_client import GitPublisher
from core.config import AppSettings
from core.domain.models import PublishRequest
from core.errors import GitCommandError
from core.interfaces.publisher import RepositoryPublisher

REMOTE = "https://github.com/example/helm-keycloak.git"


@pytest.fixture
def publisher(fake_runner, monkeypatch: pytest.MonkeyPatch) -> GitPublisher:
    monkeypatch.setattr(git_client, "run_command", fake_runner)
    fake_runner.responses[("status", "--porcelain")] = (0, "A  charts/keycloak/Chart.yaml\n", "")
    fake_runner.responses[("rev-parse", "HEAD")] = (0, "abc123\n", "")
    return GitPublisher(AppSettings(push_timeout_seconds=42.0))


def test_is_a_repository_publisher():
    assert isinstance(GitPublisher(AppSettings()), RepositoryPublisher)


def test_fresh_publish_sequence(publisher: GitPublisher, fake_runner, workspace: Path):
    result = publisher.publish(workspace, PublishRequest(remote_url=REMOTE))

    assert fake_runner.subcommands() == [
        ["init"],
        ["branch", "-M", "main"],
        ["add", "."],
        ["status", "--porcelain"],
        ["commit", "-m", "Fresh Start: Keycloak + Postgres (Official Images)"],
        ["rev-parse", "HEAD"],
        ["remote"],
        ["remote", "add", "origin", REMOTE],
        ["push", "-u", "origin", "main", "--force"],
    ]
    assert all(call[0] == "git" for call in fake_runner.calls)
    assert fake_runner.timeouts[-1] == 42.0
    assert result.commit_sha == "abc123"
    assert result.remote_url == REMOTE
    assert result.branch == "main"
    assert result.commands == fake_runner.calls


def test_existing_remote_is_repointed(publisher: GitPublisher, fake_runner, workspace: Path):
    fake_runner.responses[("remote",)] = (0, "origin\nupstream\n", "")

    publisher.publish(workspace, PublishRequest(remote_url=REMOTE))

    assert ["remote", "set-url", "origin", REMOTE] in fake_runner.subcommands()
    assert ["remote", "add", "origin", REMOTE] not in fake_runner.subcommands()


def test_push_without_force(publisher: GitPublisher, fake_runner, workspace: Path):
    publisher.publish(
        workspace,
        PublishRequest(remote_url=REMOTE, branch="deploy", remote_name="gh", force=False),
    )

    assert fake_runner.subcommands()[-1] == ["push", "-u", "gh", "deploy"]
    assert ["branch", "-M", "deploy"] in fake_runner.subcommands()


def test_clean_tree_with_history_skips_commit(publisher: GitPublisher, fake_runner, workspace: Path):
    fake_runner.responses[("status", "--porcelain")] = (0, "", "")

    publisher.publish(workspace, PublishRequest(remote_url=REMOTE))

    subcommands = fake_runner.subcommands()
    assert ["rev-parse", "--verify", "--quiet", "HEAD"] in subcommands
    assert not any(c[0] == "commit" for c in subcommands)


def test_clean_tree_without_history_still_commits(publisher: GitPublisher, fake_runner, workspace: Path):
    fake_runner.responses[("status", "--porcelain")] = (0, "", "")
    fake_runner.responses[("rev-parse", "--verify")] = (1, "", "")

    publisher.publish(workspace, PublishRequest(remote_url=REMOTE))

    assert any(c[0] == "commit" for c in fake_runner.subcommands())


def test_first_failure_stops_the_sequence(publisher: GitPublisher, fake_runner, workspace: Path):
    fake_runner.responses[("push",)] = (128, "", "fatal: Authentication failed\n")

    with pytest.raises(GitCommandError) as excinfo:
        publisher.publish(workspace, PublishRequest(remote_url=REMOTE))

    assert excinfo.value.returncode == 128
    assert excinfo.value.output == "fatal: Authentication failed"
    assert excinfo.value.command[:2] == ["git", "push"]
    assert "Authentication failed" in str(excinfo.value)


def test_commit_failure_prevents_push(publisher: GitPublisher, fake_runner, workspace: Path):
    fake_runner.responses[("commit",)] = (1, "", "Please tell me who you are.")

    with pytest.raises(GitCommandError):
        publisher.publish(workspace, PublishRequest(remote_url=REMOTE))

    assert not any(c[0] == "push" for c in fake_runner.subcommands())


def test_custom_git_executable(fake_runner, monkeypatch: pytest.MonkeyPatch, workspace: Path):
    monkeypatch.setattr(git_client, "run_command", fake_runner)
    fake_runner.responses[("status", "--porcelain")] = (0, "A  x\n", "")

    GitPublisher(AppSettings(git_executable="/opt/git/bin/git")).publish(
        workspace, PublishRequest(remote_url=REMOTE)
    )

    assert {call[0] for call in fake_runner.calls} == {"/opt/git/bin/git"}
