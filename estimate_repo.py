#!/usr/bin/env python3
"""
Commit Work Hour Estimation CLI

Analyzes the git history of a repository and writes a JSON effort estimate
for every developer plus a repository-wide summary.

Usage:
    python estimate_repo.py REPO_PATH [OPTIONS]

Examples:
    python estimate_repo.py /path/to/repo                      # Estimate all developers
    python estimate_repo.py /path/to/repo --output-dir reports # Custom output directory
    python estimate_repo.py /path/to/repo --verbose            # Debug logging
"""

import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.text import Text

from config.settings import settings
from shared.git_repository import GitRepository, RepositoryError
from shared.models import RepositorySummary
from shared.report_writer import ReportWriter
from services.effort_estimator.main import EffortEstimationService

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.monitoring.log_level),
    format=settings.monitoring.log_format
)
logger = logging.getLogger(__name__)


class EstimationCLI:
    """Console presentation for the estimation run."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def display_header(self, repo_path: str, output_dir: str):
        self.console.print("[bold cyan]Commit Work Hour Estimation - All Developers[/bold cyan]")
        self.console.print("=" * 60)
        self.console.print(f"Repository: [green]{repo_path}[/green]")
        self.console.print(f"Output directory: [green]{output_dir}[/green]")

    def display_summary(self, summary: RepositorySummary):
        """Display per-developer totals and grand totals."""
        table = Table(title="Estimated Effort", show_header=True, header_style="bold magenta")
        table.add_column("Developer", style="cyan")
        table.add_column("Email", style="white")
        table.add_column("Commits", justify="right", style="yellow")
        table.add_column("Hours", justify="right", style="green")

        for row in summary.developers:
            table.add_row(row.developer, row.email, str(row.commits), f"{row.hours:.2f}")

        self.console.print(table)
        self.console.print("=" * 60)
        self.console.print(f"[green]✓[/green] Processed {summary.total_developers} developers")
        self.console.print(f"[green]✓[/green] Grand Total Hours: {summary.grand_total_hours:.2f}h")
        self.console.print(f"[green]✓[/green] Grand Total Days: {summary.grand_total_days:.2f} days")
        self.console.print(f"[green]✓[/green] Grand Total Weeks: {summary.grand_total_weeks:.2f} weeks")
        self.console.print(
            f"[green]✓[/green] Summary saved to: {settings.output.summary_filename}"
        )

    def display_error_message(self, error: str, suggestion: str = ""):
        """Display error message with helpful suggestions."""
        error_text = Text()
        error_text.append("❌ ", style="bold red")
        error_text.append("Error occurred\n\n", style="bold white")
        error_text.append("Error: ", style="red")
        error_text.append(f"{error}\n", style="white")

        if suggestion:
            error_text.append("Suggestion: ", style="yellow")
            error_text.append(f"{suggestion}", style="white")

        panel = Panel(error_text, title="Error", border_style="red")
        self.console.print(panel)


def run_estimation(service: EffortEstimationService, cli: EstimationCLI) -> RepositorySummary:
    """Process every developer with progress output."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=cli.console,
        transient=True
    ) as progress:
        task = progress.add_task("Finding all developers...", total=None)
        developers = service.discover_developers()
        filename_bases = service.assign_filename_bases(developers)
        progress.update(task, description=f"Found {len(developers)} developers")

        totals = []
        for index, developer in enumerate(developers, start=1):
            progress.update(
                task,
                description=f"[{index}/{len(developers)}] Processing: {developer.name}"
            )
            result = service.process_developer(developer, filename_bases[developer])
            if result is None:
                cli.console.print(f"  [yellow]⚠ No commits found for {developer.name}[/yellow]")
                continue
            cli.console.print(
                f"[{index}/{len(developers)}] {developer.name}: "
                f"{result.commits} commits, {result.hours:.2f}h -> {result.filename}"
            )
            totals.append(result)

    return service.finalize(totals)


@click.command()
@click.argument('repo_path', type=click.Path(file_okay=False, dir_okay=True))
@click.option(
    '--output-dir',
    default=None,
    help=f'Directory for JSON reports (default: {settings.output.output_dir})'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default=None,
    help='Set the logging level'
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose output'
)
def estimate_repo(repo_path: str, output_dir: Optional[str], log_level: Optional[str], verbose: bool):
    """Estimate work hours per developer from the git history in REPO_PATH."""
    if log_level:
        logging.getLogger().setLevel(getattr(logging, log_level.upper()))
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    cli = EstimationCLI()
    repository = GitRepository(repo_path)

    try:
        repository.validate_repo()
        writer = ReportWriter(output_dir)
        cli.display_header(repository.path, writer.output_dir_path)

        service = EffortEstimationService(repository, writer)
        summary = run_estimation(service, cli)
    except RepositoryError as e:
        cli.display_error_message(
            str(e),
            "Make sure the path points to the root of a git repository"
        )
        sys.exit(1)
    except OSError as e:
        logger.error(f"Failed to write reports: {e}")
        cli.display_error_message(str(e), "Check that the output directory is writable")
        sys.exit(1)

    cli.display_summary(summary)


def main():
    """Console script entry point."""
    estimate_repo()


if __name__ == "__main__":
    main()
