"""chartseed CLI (Typer + Rich).

Commands:
- reset     clean, regenerate the chart and workflow, force-push (the full flow)
- generate  write the files only
- render    print one rendered file to stdout
- templates list the embedded templates
- publish   git init/commit/push an existing workspace
- lint      validate the generated YAML and run `helm lint`
- doctor    environment diagnostics
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from adapters.git_client import GitPublisher
from adapters.helm_client import HelmLinter
from adapters.template_renderer import list_templates
from cli import doctor
from cli.ui_components import (
    build_lint_panel,
    build_plan_table,
    build_publish_panel,
    build_removed_table,
    print_banner,
)
from core.config import AppSettings
from core.domain.models import PublishRequest
from core.errors import ChartSeedError, ScaffoldError, WorkspaceError
from core.resources_loader import resolve_chart_spec
from core.services.reset_pipeline import (
    PipelineHooks,
    ResetRequest,
    lint_plan,
    reset_project,
)
from core.services.scaffold import build_plan, find_drift, read_plan, stale_paths

app = typer.Typer(
    no_args_is_help=True,
    help="Generate a Keycloak + Postgres Helm chart with its deploy workflow and publish it.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
) -> None:
    configure_logging(verbose)


@contextmanager
def _handle_errors() -> Iterator[None]:
    try:
        yield
    except ScaffoldError as exc:
        _err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        for issue in exc.issues:
            _err_console.print(f"  - {escape(issue)}")
        raise typer.Exit(code=1) from exc
    except ChartSeedError as exc:
        _err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _publish_request(
    settings: AppSettings,
    *,
    remote: str | None,
    branch: str | None,
    message: str | None,
    force: bool | None,
) -> PublishRequest:
    return PublishRequest(
        remote_url=remote or settings.remote_url,
        remote_name=settings.remote_name,
        branch=branch or settings.branch,
        commit_message=message or settings.commit_message,
        force=settings.force_push if force is None else force,
    )


def _ui_hooks() -> PipelineHooks:
    return PipelineHooks(
        step=lambda msg: _console.print(f"[bold cyan]>[/bold cyan] {msg}"),
        file_written=lambda p: _console.print(f"  [green]wrote[/green] {p}"),
        path_removed=lambda p: _console.print(f"  [red]removed[/red] {p}"),
    )


@app.command()
def reset(
    workspace: Path = typer.Option(Path("."), "--dir", "-d", help="Workspace to reset."),
    profile: Path | None = typer.Option(None, "--profile", "-p", help="YAML chart profile."),
    remote: str | None = typer.Option(None, "--remote", help="Git remote URL."),
    branch: str | None = typer.Option(None, "--branch", help="Branch to push."),
    message: str | None = typer.Option(None, "--message", "-m", help="Commit message."),
    force: bool | None = typer.Option(None, "--force/--no-force", help="Force-push (default from settings)."),
    clean: bool = typer.Option(True, "--clean/--no-clean", help="Remove old chart files and .git first."),
    lint: bool = typer.Option(False, "--lint", help="Run `helm lint` before publishing."),
    push: bool = typer.Option(True, "--push/--no-push", help="Publish after generating."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would happen and exit."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Wipe the workspace, regenerate the chart and workflow, and force-push them."""

    settings = AppSettings()
    print_banner(_console)

    with _handle_errors():
        spec = resolve_chart_spec(profile, settings=settings)
        publish = (
            _publish_request(settings, remote=remote, branch=branch, message=message, force=force)
            if push
            else None
        )
        request = ResetRequest(
            workspace=workspace,
            spec=spec,
            publish=publish,
            clean=clean,
            lint=lint,
            dry_run=dry_run,
        )

        if dry_run:
            result = reset_project(request=request)
            if result.removed:
                _console.print(build_removed_table(result.removed))
            _console.print(build_plan_table(result.plan, workspace, title="Would write"))
            if publish is not None:
                flag = " --force" if publish.force else ""
                _console.print(
                    f"Would push to [bold]{publish.remote_url}[/bold] "
                    f"({publish.remote_name}/{publish.branch}){flag}"
                )
            return

        removing = stale_paths(workspace) if clean else []
        if not yes and (removing or (publish is not None and publish.force)):
            if removing:
                _console.print(build_removed_table(removing))
            if publish is not None and publish.force:
                _console.print(
                    f"[yellow]{publish.remote_url} ({publish.branch}) will be overwritten.[/yellow]"
                )
            typer.confirm("Continue?", abort=True)

        result = reset_project(
            request=request,
            publisher=GitPublisher(settings) if publish is not None else None,
            linter=HelmLinter(settings) if lint else None,
            hooks=_ui_hooks(),
        )

    if result.lint is not None:
        _console.print(build_lint_panel(result.lint))
    if result.published is not None:
        _console.print(build_publish_panel(result.published))
    _console.print("[green]Done![/green]")


@app.command()
def generate(
    workspace: Path = typer.Option(Path("."), "--dir", "-d", help="Workspace to write into."),
    profile: Path | None = typer.Option(None, "--profile", "-p", help="YAML chart profile."),
    clean: bool = typer.Option(False, "--clean/--no-clean", help="Remove old chart files and .git first."),
    lint: bool = typer.Option(False, "--lint", help="Run `helm lint` on the result."),
) -> None:
    """Write the chart and workflow files without touching git."""

    settings = AppSettings()
    with _handle_errors():
        spec = resolve_chart_spec(profile, settings=settings)
        result = reset_project(
            request=ResetRequest(workspace=workspace, spec=spec, clean=clean, lint=lint),
            linter=HelmLinter(settings) if lint else None,
            hooks=PipelineHooks(path_removed=lambda p: _console.print(f"[red]removed[/red] {p}")),
        )

    _console.print(build_plan_table(result.plan, workspace))
    if result.lint is not None:
        _console.print(build_lint_panel(result.lint))


@app.command()
def render(
    name: str = typer.Argument(..., help="File to render, e.g. values.yaml or .github/workflows/deploy.yml."),
    profile: Path | None = typer.Option(None, "--profile", "-p", help="YAML chart profile."),
) -> None:
    """Print one rendered file to stdout."""

    settings = AppSettings()
    with _handle_errors():
        plan = build_plan(resolve_chart_spec(profile, settings=settings))

    f = plan.get(name)
    if f is None:
        available = ", ".join(p.path for p in plan.files)
        _err_console.print(f"[red]Unknown file:[/red] {name}\nAvailable: {available}")
        raise typer.Exit(code=2)
    typer.echo(f.content, nl=False)


@app.command()
def templates() -> None:
    """List the embedded templates."""

    for name in list_templates():
        typer.echo(name)


@app.command()
def publish(
    workspace: Path = typer.Option(Path("."), "--dir", "-d", help="Workspace to publish."),
    remote: str | None = typer.Option(None, "--remote", help="Git remote URL."),
    branch: str | None = typer.Option(None, "--branch", help="Branch to push."),
    message: str | None = typer.Option(None, "--message", "-m", help="Commit message."),
    force: bool | None = typer.Option(None, "--force/--no-force", help="Force-push (default from settings)."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Commit the workspace and push it to the remote."""

    settings = AppSettings()
    with _handle_errors():
        if not workspace.is_dir():
            raise WorkspaceError(f"Workspace does not exist: {workspace}")
        request = _publish_request(settings, remote=remote, branch=branch, message=message, force=force)
        if request.force and not yes:
            typer.confirm(
                f"Force-push to {request.remote_url} ({request.branch})? Remote history will be replaced.",
                abort=True,
            )
        result = GitPublisher(settings).publish(workspace, request)

    _console.print(build_publish_panel(result))


@app.command(name="lint")
def lint_command(
    workspace: Path = typer.Option(Path("."), "--dir", "-d", help="Workspace holding the generated files."),
    profile: Path | None = typer.Option(None, "--profile", "-p", help="YAML chart profile."),
    helm: bool = typer.Option(True, "--helm/--no-helm", help="Also run `helm lint`."),
) -> None:
    """Validate generated files on disk and lint the chart."""

    settings = AppSettings()
    with _handle_errors():
        expected = build_plan(resolve_chart_spec(profile, settings=settings))
        actual = read_plan(expected, workspace)
        report = lint_plan(actual, workspace, linter=HelmLinter(settings) if helm else None)
        report.issues.extend(
            f"{path}: differs from the rendered template" for path in find_drift(expected, actual)
        )

    _console.print(build_lint_panel(report))
    if not report.ok:
        raise typer.Exit(code=1)


def run() -> None:
    app()
