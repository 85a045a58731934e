"""Reset orchestration.

Runs the whole reset as one sequential, fail-fast pipeline:

1. render the chart and workflow and validate the plain-YAML outputs
2. clean stale chart files and git history
3. write the rendered files
4. optionally `helm lint` the chart
5. optionally publish (init, commit, force-push)

The CLI only supplies the request and the progress hooks, so the same
pipeline is usable from tests or other entry points.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from core.domain.models import ChartSpec, LintReport, PublishRequest, PublishResult, ScaffoldPlan
from core.errors import ScaffoldError
from core.interfaces.linter import ChartLinter
from core.interfaces.publisher import RepositoryPublisher
from core.services.scaffold import (
    build_plan,
    clean_workspace,
    stale_paths,
    validate_plan,
    write_plan,
)

logger = logging.getLogger(__name__)


@dataclass
class ResetRequest:
    """Parameters that control a reset."""

    workspace: Path
    spec: ChartSpec = field(default_factory=ChartSpec)
    publish: PublishRequest | None = None
    clean: bool = True
    lint: bool = False
    dry_run: bool = False


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers."""

    step: Callable[[str], None] | None = None
    file_written: Callable[[Path], None] | None = None
    path_removed: Callable[[Path], None] | None = None


@dataclass
class PipelineResult:
    plan: ScaffoldPlan
    written: list[Path] = field(default_factory=list)
    removed: list[Path] = field(default_factory=list)
    lint: LintReport | None = None
    published: PublishResult | None = None
    dry_run: bool = False


def _notify(callback: Callable[..., None] | None, *args: object) -> None:
    if callback is not None:
        callback(*args)


def lint_plan(
    plan: ScaffoldPlan,
    workspace: Path,
    *,
    linter: ChartLinter | None = None,
) -> LintReport:
    """Validate the plan's YAML and, with a linter, run it on the written chart."""

    issues = validate_plan(plan)
    helm_output = None
    if linter is not None and not issues:
        helm_output = linter.lint(workspace / plan.chart_root)
    return LintReport(chart_dir=plan.chart_root, issues=issues, helm_output=helm_output)


def reset_project(
    *,
    request: ResetRequest,
    publisher: RepositoryPublisher | None = None,
    linter: ChartLinter | None = None,
    hooks: PipelineHooks | None = None,
) -> PipelineResult:
    hooks = hooks or PipelineHooks()
    workspace = request.workspace

    plan = build_plan(request.spec)
    result = PipelineResult(plan=plan, dry_run=request.dry_run)

    # Nothing on disk is touched until the rendered YAML is known to parse.
    issues = validate_plan(plan)
    if issues:
        raise ScaffoldError("Generated files failed validation", issues)

    if request.dry_run:
        if request.clean:
            result.removed = stale_paths(workspace)
        logger.info(f"Dry run: {len(plan.files)} files planned, {len(result.removed)} paths to remove")
        return result

    if request.publish is not None and publisher is None:
        raise ValueError("a publisher is required when request.publish is set")
    if request.lint and linter is None:
        raise ValueError("a linter is required when request.lint is set")

    if request.clean:
        _notify(hooks.step, "Cleaning up old files and git history...")
        result.removed = clean_workspace(workspace)
        for p in result.removed:
            _notify(hooks.path_removed, p)

    _notify(hooks.step, "Creating chart and workflow files...")
    result.written = write_plan(plan, workspace)
    for p in result.written:
        _notify(hooks.file_written, p)

    if request.lint:
        _notify(hooks.step, f"Linting {plan.chart_root}...")
        result.lint = lint_plan(plan, workspace, linter=linter)

    if request.publish is not None:
        _notify(hooks.step, f"Initializing git and pushing to {request.publish.remote_url}...")
        result.published = publisher.publish(workspace, request.publish)  # type: ignore[union-attr]

    return result
