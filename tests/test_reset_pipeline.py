from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from core.domain.models import ChartSpec, PublishRequest, PublishResult
from core.errors import GitCommandError, ScaffoldError
from core.services import reset_pipeline
from core.services.reset_pipeline import PipelineHooks, ResetRequest, lint_plan, reset_project
from core.services.scaffold import build_plan, write_plan

REMOTE = "https://github.com/example/helm-keycloak.git"


class FakePublisher:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[tuple[Path, PublishRequest, list[str]]] = []
        self.error = error

    def publish(self, workspace: Path, request: PublishRequest) -> PublishResult:
        # Snapshot what is on disk at publish time.
        files = sorted(p.relative_to(workspace).as_posix() for p in workspace.rglob("*") if p.is_file())
        self.calls.append((workspace, request, files))
        if self.error is not None:
            raise self.error
        return PublishResult(remote_url=request.remote_url, branch=request.branch, commit_sha="abc123")


class FakeLinter:
    def __init__(self) -> None:
        self.calls: list[Path] = []

    def lint(self, chart_dir: Path) -> str:
        self.calls.append(chart_dir)
        return "1 chart(s) linted, 0 chart(s) failed"


def _stale(ws: Path) -> None:
    (ws / ".git").mkdir()
    (ws / ".git" / "config").write_text("[core]\n")
    (ws / "values.yaml").write_text("old: true\n")


def test_full_reset(workspace: Path):
    _stale(workspace)
    publisher = FakePublisher()
    linter = FakeLinter()
    steps: list[str] = []
    written: list[Path] = []
    removed: list[Path] = []

    result = reset_project(
        request=ResetRequest(
            workspace=workspace,
            publish=PublishRequest(remote_url=REMOTE),
            lint=True,
        ),
        publisher=publisher,
        linter=linter,
        hooks=PipelineHooks(step=steps.append, file_written=written.append, path_removed=removed.append),
    )

    assert not (workspace / "values.yaml").exists()
    assert not (workspace / ".git").exists()
    assert {p.name for p in removed} == {".git", "values.yaml"}
    assert written == result.written
    assert len(result.written) == 8

    assert linter.calls == [workspace / "charts" / "keycloak"]
    assert result.lint is not None and result.lint.ok

    [(ws, request, files)] = publisher.calls
    assert ws == workspace
    assert request.remote_url == REMOTE
    assert ".github/workflows/deploy.yml" in files
    assert "charts/keycloak/templates/_helpers.tpl" in files
    assert result.published.commit_sha == "abc123"

    assert len(steps) == 4
    assert steps[0].startswith("Cleaning")
    assert REMOTE in steps[-1]


def test_generate_only(workspace: Path):
    result = reset_project(request=ResetRequest(workspace=workspace, clean=False))

    assert result.published is None
    assert result.lint is None
    assert result.removed == []
    assert (workspace / "charts" / "keycloak" / "Chart.yaml").is_file()


def test_no_clean_keeps_existing_history(workspace: Path):
    _stale(workspace)

    reset_project(request=ResetRequest(workspace=workspace, clean=False))

    assert (workspace / ".git" / "config").exists()


def test_dry_run_has_no_side_effects(workspace: Path):
    _stale(workspace)
    publisher = FakePublisher()

    result = reset_project(
        request=ResetRequest(workspace=workspace, publish=PublishRequest(remote_url=REMOTE), dry_run=True),
        publisher=publisher,
    )

    assert result.dry_run
    assert {p.name for p in result.removed} == {".git", "values.yaml"}
    assert (workspace / ".git").exists()
    assert (workspace / "values.yaml").read_text() == "old: true\n"
    assert not (workspace / "charts").exists()
    assert result.written == []
    assert publisher.calls == []
    assert len(result.plan.files) == 8


def test_custom_spec_is_used(workspace: Path):
    reset_project(request=ResetRequest(workspace=workspace, spec=ChartSpec(directory="sso")))

    assert (workspace / "charts" / "sso" / "values.yaml").is_file()


def test_validation_failure_stops_before_publish(workspace: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(reset_pipeline, "validate_plan", lambda plan: ["Chart.yaml: broken"])
    publisher = FakePublisher()

    with pytest.raises(ScaffoldError) as excinfo:
        reset_project(
            request=ResetRequest(workspace=workspace, publish=PublishRequest(remote_url=REMOTE)),
            publisher=publisher,
        )

    assert excinfo.value.issues == ["Chart.yaml: broken"]
    assert publisher.calls == []


def test_publish_errors_propagate(workspace: Path):
    error = GitCommandError(["git", "push"], 128, "denied")

    with pytest.raises(GitCommandError):
        reset_project(
            request=ResetRequest(workspace=workspace, publish=PublishRequest(remote_url=REMOTE)),
            publisher=FakePublisher(error=error),
        )

    # files are left in place for inspection
    assert (workspace / "charts" / "keycloak" / "Chart.yaml").exists()


def test_missing_collaborators_are_programming_errors(workspace: Path):
    with pytest.raises(ValueError, match="publisher"):
        reset_project(request=ResetRequest(workspace=workspace, publish=PublishRequest(remote_url=REMOTE)))
    with pytest.raises(ValueError, match="linter"):
        reset_project(request=ResetRequest(workspace=workspace, lint=True))


def test_lint_plan_skips_helm_when_yaml_is_broken(workspace: Path, monkeypatch: pytest.MonkeyPatch):
    plan = build_plan(ChartSpec())
    write_plan(plan, workspace)
    monkeypatch.setattr(reset_pipeline, "validate_plan", lambda p: ["values.yaml: invalid YAML"])
    linter = FakeLinter()

    report = lint_plan(plan, workspace, linter=linter)

    assert not report.ok
    assert report.helm_output is None
    assert linter.calls == []


def test_dry_run_needs_no_collaborators(workspace: Path):
    result = reset_project(
        request=ResetRequest(
            workspace=workspace,
            publish=PublishRequest(remote_url=REMOTE),
            lint=True,
            dry_run=True,
        ),
    )

    assert result.dry_run
    assert result.published is None
    assert not (workspace / "charts").exists()


def test_validation_failure_leaves_workspace_untouched(workspace: Path, monkeypatch: pytest.MonkeyPatch):
    _stale(workspace)
    monkeypatch.setattr(reset_pipeline, "validate_plan", lambda plan: ["charts/keycloak/Chart.yaml: invalid YAML"])
    steps: list[str] = []

    with pytest.raises(ScaffoldError):
        reset_project(
            request=ResetRequest(workspace=workspace, publish=PublishRequest(remote_url=REMOTE)),
            publisher=FakePublisher(),
            hooks=PipelineHooks(step=steps.append),
        )

    assert (workspace / ".git" / "config").read_text() == "[core]\n"
    assert (workspace / "values.yaml").read_text() == "old: true\n"
    assert not (workspace / "charts").exists()
    assert steps == []


def test_profile_text_with_yaml_indicators_is_written_intact(workspace: Path):
    spec = ChartSpec(metadata={"description": "Keycloak: SSO with Postgres"})

    reset_project(request=ResetRequest(workspace=workspace, spec=spec, clean=False))

    chart = yaml.safe_load((workspace / "charts" / "keycloak" / "Chart.yaml").read_text(encoding="utf-8"))
    assert chart["description"] == "Keycloak: SSO with Postgres"
