"""
dbrefresh CLI entry point.

Commands:
    run          Dump the cluster database and swap it into the local server
    show-config  Display the loaded configuration without secrets
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from dbrefresh.application.refresh_service import RefreshService
from dbrefresh.domain.models import RefreshReport, StepStatus
from dbrefresh.infrastructure.config import ConfigRepository
from dbrefresh.infrastructure.logging_config import setup_logging
from dbrefresh.infrastructure.shell import ShellRunner

logger = logging.getLogger(__name__)

console = Console()

app = typer.Typer(
    name="dbrefresh",
    help="🗄️  Refresh a local Postgres database from a Kubernetes pod",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

STATUS_STYLES = {
    StepStatus.SUCCESS: "[green]✅ success[/green]",
    StepStatus.WARNING: "[yellow]⚠️  warning[/yellow]",
    StepStatus.FAILED: "[red]❌ failed[/red]",
    StepStatus.SKIPPED: "[dim]⏭️  skipped[/dim]",
}


def _load_config(config_dir: Optional[Path], keep_previous: bool = False):
    config = ConfigRepository(config_dir).load_config()
    if keep_previous:
        config = config.model_copy(update={"keep_previous": True})
    return config


def render_report(report: RefreshReport) -> Table:
    """Build the step summary table for a finished run."""
    table = Table(
        title=f"Refresh of {report.plan.database} from {report.pod}",
        show_header=True,
        header_style="bold",
        box=box.ROUNDED,
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Phase")
    table.add_column("Step")
    table.add_column("Status")

    for index, step in enumerate(report.steps, start=1):
        table.add_row(str(index), step.kind.value, step.name, STATUS_STYLES[step.status])
    return table


@app.command("run")
def run_command(
    config_dir: Optional[Path] = typer.Option(
        None,
        "--config-dir",
        "-c",
        help="Directory containing config.yaml (defaults to the current directory)",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Resolve credentials and pod, log every other command without running it",
    ),
    keep_previous: bool = typer.Option(
        False,
        "--keep-previous",
        help="Keep the replaced local database as <db>_<timestamp>",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Write logs to file"),
):
    """
    Dump the remote database from its pod and swap it into the local server.

    The previous local database is renamed aside before the restored copy
    takes its name, and dropped during cleanup unless --keep-previous is set.
    """
    setup_logging(logging.DEBUG if verbose else logging.INFO, log_file)

    service = None
    try:
        config = _load_config(config_dir, keep_previous)
        service = RefreshService(config, ShellRunner(dry_run=dry_run))
        service.prepare()
        report = service.run()
    except Exception as e:  # pylint: disable=broad-except
        logger.error("Refresh failed: %s", e)
        partial = getattr(service, "report", None)
        if isinstance(partial, RefreshReport):
            console.print(render_report(partial))
        console.print(f"[red]❌ Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(render_report(report))
    if report.warnings:
        console.print(f"[yellow]⚠️  Finished with {len(report.warnings)} warning(s)[/yellow]")
    else:
        console.print("[green]✅ Refresh complete[/green]")


@app.command("show-config")
def show_config_command(
    config_dir: Optional[Path] = typer.Option(
        None,
        "--config-dir",
        "-c",
        help="Directory containing config.yaml (defaults to the current directory)",
    ),
):
    """Display the loaded configuration with secrets left out."""
    try:
        config = _load_config(config_dir)
    except Exception as e:  # pylint: disable=broad-except
        logger.error("Config load failed: %s", e)
        console.print(f"[red]❌ Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title="⚙️  Configuration", show_header=True, header_style="bold", box=box.ROUNDED)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in config.summary().items():
        table.add_row(key, str(value))
    console.print(table)


def main() -> int:
    """
    Main entry point for the dbrefresh CLI.

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    app()
    return 0
