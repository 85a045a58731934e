"""CLI UI components (Rich).

Keeps tables and panels out of the command functions so several commands can
share them.
"""

from __future__ import annotations

from pathlib import Path

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import LintReport, PublishResult, ScaffoldPlan


def print_banner(console: Console) -> None:
    """Print the welcome banner (skipped by commands that write to stdout)."""

    title = Text("chartseed", style="bold cyan")
    subtitle = Text("Helm chart scaffold • GitHub Actions deploy • fresh push", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_plan_table(plan: ScaffoldPlan, workspace: Path, *, title: str = "Generated files") -> Table:
    table = Table(title=title)
    table.add_column("Path", style="cyan", no_wrap=True)
    table.add_column("Lines", style="white", justify="right")
    table.add_column("Bytes", style="dim", justify="right")
    for f in plan.files:
        table.add_row(
            str(workspace / f.path),
            str(f.content.count("\n")),
            str(len(f.content.encode("utf-8"))),
        )
    return table


def build_removed_table(paths: list[Path]) -> Table:
    table = Table(title="Will be removed")
    table.add_column("Path", style="red")
    for p in paths:
        table.add_row(f"{p}/" if p.is_dir() else str(p))
    return table


def build_lint_panel(report: LintReport) -> Panel:
    body = Text()
    if report.ok:
        body.append("No issues found in the generated YAML.\n", style="green")
    else:
        for issue in report.issues:
            body.append(f"- {issue}\n", style="red")
    if report.helm_output:
        body.append("\n")
        body.append(report.helm_output, style="dim")
    return Panel(
        body,
        title=Text(f"Lint: {report.chart_dir}", style="bold"),
        border_style="green" if report.ok else "red",
    )


def build_publish_panel(result: PublishResult) -> Panel:
    body = Text()
    body.append("Remote: ", style="bold")
    body.append(f"{result.remote_url}\n")
    body.append("Branch: ", style="bold")
    body.append(f"{result.branch}\n")
    if result.commit_sha:
        body.append("Commit: ", style="bold")
        body.append(f"{result.commit_sha}\n")
    body.append("\nCheck GitHub Actions now.", style="dim")
    return Panel(body, title=Text("Published", style="bold green"), border_style="green")
