"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import probe_remote
from adapters.process import run_command, which
from core.config import AppSettings, write_user_env_vars
from core.errors import ToolNotFoundError
from core.resources_loader import get_default_profile_path

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()

# tool -> version arguments
_VERSION_ARGS: dict[str, list[str]] = {
    "git": ["--version"],
    "helm": ["version", "--short"],
    "kubectl": ["version", "--client"],
}


def check_tool(executable: str, version_args: list[str], *, timeout: float) -> tuple[bool, str]:
    """Return (found, version line or reason) for an external tool."""

    if which(executable) is None:
        return False, "not found on PATH"
    try:
        result = run_command([executable, *version_args], timeout=timeout)
    except ToolNotFoundError:
        return False, "not found on PATH"
    if not result.ok:
        return False, result.output or f"exit code {result.returncode}"
    lines = result.stdout.strip().splitlines()
    return True, lines[0] if lines else "OK"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="chartseed Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    tools = {
        "git": settings.git_executable,
        "helm": settings.helm_executable,
        "kubectl": settings.kubectl_executable,
    }
    missing_git = False
    for name, executable in tools.items():
        ok, detail = check_tool(
            executable,
            _VERSION_ARGS[name],
            timeout=settings.command_timeout_seconds,
        )
        if ok:
            status = "OK"
        elif name == "git":
            status = "FAIL"
            missing_git = True
        else:
            status = "OPTIONAL"
        table.add_row(name, status, detail)

    # Config
    table.add_row("Remote", "OK", f"{settings.remote_name} -> {settings.remote_url}")
    table.add_row("Branch", "OK", settings.branch)
    table.add_row("Force push", "ON" if settings.force_push else "OFF", "")
    profile = get_default_profile_path(settings)
    table.add_row("Chart profile", "OK", str(profile) if profile else "built-in defaults")

    # Connectivity (best-effort)
    reachable, detail = asyncio.run(probe_remote(settings.remote_url, settings=settings))
    if reachable is None:
        status = "SKIPPED"
    else:
        status = "OK" if reachable else "FAIL"
    table.add_row("Remote reachability", status, detail)

    _console.print(table)

    if missing_git:
        _console.print("\n[red]git is required for `chartseed reset` and `chartseed publish`.[/red]")
    if settings.force_push:
        _console.print(
            "\n[yellow]Note:[/yellow] pushes use --force and replace the remote branch history."
        )


@app.command(name="setup-remote")
def setup_remote() -> None:
    """Interactive remote setup (stores config in the user config .env)."""

    settings = AppSettings()

    remote_url = typer.prompt("Git remote URL", default=settings.remote_url, show_default=True).strip()
    branch = typer.prompt("Branch", default=settings.branch, show_default=True).strip()
    force = typer.confirm("Force-push (replace remote history)?", default=settings.force_push)

    if not remote_url or not branch:
        raise typer.BadParameter("remote URL and branch are required")

    env_path = write_user_env_vars(
        {
            "CHARTSEED_REMOTE_URL": remote_url,
            "CHARTSEED_BRANCH": branch,
            "CHARTSEED_FORCE_PUSH": "true" if force else "false",
        }
    )

    _console.print(f"[green]Saved remote config to:[/green] {env_path}")
