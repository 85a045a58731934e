"""Scaffold utilities: plan, clean, write and validate the generated chart.

These are the pure(ish) building blocks of a reset; orchestration and user
feedback live in `core.services.reset_pipeline`.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path, PurePosixPath

import yaml

from adapters.template_renderer import render_template
from core.domain.models import ChartSpec, GeneratedFile, ScaffoldPlan
from core.errors import WorkspaceError

logger = logging.getLogger(__name__)

WORKFLOW_PATH = ".github/workflows/deploy.yml"

# chart file -> embedded template, in write order
_CHART_FILES: tuple[tuple[str, str], ...] = (
    ("Chart.yaml", "Chart.yaml"),
    ("values.yaml", "values.yaml"),
    ("templates/deployment.yaml", "deployment.yaml"),
    ("templates/service.yaml", "service.yaml"),
    ("templates/postgres-deployment.yaml", "postgres-deployment.yaml"),
    ("templates/postgres-service.yaml", "postgres-service.yaml"),
    ("templates/_helpers.tpl", "_helpers.tpl"),
)

# Left behind by earlier layouts that kept the chart at the repository root.
STALE_DIRS: tuple[str, ...] = ("charts", ".github", ".git")
STALE_FILES: tuple[str, ...] = (
    "Chart.yaml",
    "values.yaml",
    "deployment.yaml",
    "service.yaml",
    "_helpers.tpl",
)


def build_plan(spec: ChartSpec) -> ScaffoldPlan:
    """Render every file for `spec`, workflow first, then the chart."""

    files = [GeneratedFile(path=WORKFLOW_PATH, content=render_template("deploy.yml", chart=spec))]
    for rel, template in _CHART_FILES:
        files.append(
            GeneratedFile(
                path=f"{spec.chart_root}/{rel}",
                content=render_template(template, chart=spec),
            )
        )
    return ScaffoldPlan(chart_root=spec.chart_root, files=files)


def _check_workspace(root: Path) -> Path:
    resolved = root.resolve()
    if resolved == Path(resolved.anchor):
        raise WorkspaceError(f"Refusing to use the filesystem root as workspace: {resolved}")
    if resolved.exists() and not resolved.is_dir():
        raise WorkspaceError(f"Workspace is not a directory: {resolved}")
    return resolved


def stale_paths(root: Path) -> list[Path]:
    """Paths that `clean_workspace` would remove (existing ones only)."""

    root = _check_workspace(root)
    found: list[Path] = []
    for name in (*STALE_DIRS, *STALE_FILES):
        p = root / name
        if p.exists() or p.is_symlink():
            found.append(p)
    return found


def clean_workspace(root: Path) -> list[Path]:
    """Remove old chart files and git history from `root`."""

    removed: list[Path] = []
    for p in stale_paths(root):
        try:
            if p.is_dir() and not p.is_symlink():
                shutil.rmtree(p)
            else:
                p.unlink()
        except OSError as exc:
            raise WorkspaceError(f"Cannot remove {p}: {exc}") from exc
        logger.debug(f"Removed {p}")
        removed.append(p)
    return removed


def write_plan(plan: ScaffoldPlan, root: Path) -> list[Path]:
    """Write every planned file under `root`, creating directories as needed."""

    root = _check_workspace(root)
    written: list[Path] = []
    for f in plan.files:
        target = root.joinpath(*PurePosixPath(f.path).parts)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(f.content, encoding="utf-8", newline="\n")
        except OSError as exc:
            raise WorkspaceError(f"Cannot write {target}: {exc}") from exc
        logger.debug(f"Wrote {target} ({len(f.content)} bytes)")
        written.append(target)
    return written


def read_plan(plan: ScaffoldPlan, root: Path) -> ScaffoldPlan:
    """Re-read the planned files from disk (for linting an existing workspace)."""

    root = _check_workspace(root)
    files: list[GeneratedFile] = []
    for f in plan.files:
        target = root.joinpath(*PurePosixPath(f.path).parts)
        if not target.is_file():
            raise WorkspaceError(f"Missing generated file: {target}")
        files.append(GeneratedFile(path=f.path, content=target.read_text(encoding="utf-8")))
    return ScaffoldPlan(chart_root=plan.chart_root, files=files)


def find_drift(expected: ScaffoldPlan, actual: ScaffoldPlan) -> list[str]:
    """Paths whose on-disk content no longer matches the rendered template."""

    drifted: list[str] = []
    for f in expected.files:
        other = actual.get(f.path)
        if other is None or other.content != f.content:
            drifted.append(f.path)
    return drifted


def _expect_keys(name: str, doc: object, keys: tuple[str, ...]) -> list[str]:
    if not isinstance(doc, dict):
        return [f"{name}: expected a mapping at the top level"]
    return [f"{name}: missing required key '{k}'" for k in keys if k not in doc]


def validate_plan(plan: ScaffoldPlan) -> list[str]:
    """Parse the plain-YAML outputs and check their required keys.

    Helm templates are skipped: they only become YAML once Helm renders them.
    """

    issues: list[str] = []
    checks: dict[str, tuple[str, ...]] = {
        WORKFLOW_PATH: ("name", "jobs"),
        f"{plan.chart_root}/Chart.yaml": ("apiVersion", "name", "version"),
        f"{plan.chart_root}/values.yaml": ("image", "service", "env"),
    }
    for path, keys in checks.items():
        f = plan.get(path)
        if f is None:
            issues.append(f"{path}: not generated")
            continue
        try:
            doc = yaml.safe_load(f.content)
        except yaml.YAMLError as exc:
            issues.append(f"{path}: invalid YAML ({exc})")
            continue
        issues.extend(_expect_keys(path, doc, keys))
    return issues
