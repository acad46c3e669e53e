"""Rich output rendering for flakewatch reports."""

import json
import logging
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..models.flakiness_models import (
    HealthStatus,
    ProjectFlakinessReport,
    TestIdentity,
)

logger = logging.getLogger(__name__)

HEALTH_STYLES = {
    HealthStatus.HEALTHY: "bold green",
    HealthStatus.DEGRADED: "bold yellow",
    HealthStatus.CRITICAL: "bold red",
}


class ReportRenderer:
    """
    Render flakiness reports and test state to the console.

    Handles tables, panels and plain JSON output.
    """

    def __init__(self, console: Optional[Console] = None):
        """
        Initialize report renderer.

        Args:
            console: Rich console (creates new if not provided)
        """
        self.console = console or Console()

    def render_json(self, report: ProjectFlakinessReport) -> None:
        """Print the report as JSON."""
        self.console.print(
            json.dumps(report.model_dump(mode="json"), indent=2),
            soft_wrap=True,
            markup=False,
            highlight=False,
            emoji=False,
        )

    def render_report(self, report: ProjectFlakinessReport) -> None:
        """Print a summary panel, a table of flaky tests and recommendations."""
        style = HEALTH_STYLES[report.overall_health]
        summary = (
            f"Project: {escape(report.project_id)}\n"
            f"Analyzed at: {report.analyzed_at.isoformat()}\n"
            f"Tests analyzed: {report.total_tests}\n"
            f"Flaky tests: {report.flaky_count}\n"
            f"Health: [{style}]{report.overall_health.value}[/{style}]"
        )
        self.console.print(Panel(summary, title="Flakiness Report"))

        if report.flaky_tests:
            table = Table(title="Flaky Tests")
            table.add_column("Score", justify="right")
            table.add_column("Test")
            table.add_column("Pass rate", justify="right")
            table.add_column("Runs", justify="right")
            table.add_column("Category")
            table.add_column("Quarantine?")

            for result in report.flaky_tests:
                table.add_row(
                    str(result.flakiness_score),
                    escape(result.test_name),
                    f"{result.pass_rate:.1f}%",
                    str(result.total_runs),
                    result.category.value,
                    "yes" if result.should_quarantine else "no",
                )
            self.console.print(table)

        self.console.print("[bold]Recommendations[/bold]")
        for recommendation in report.recommendations:
            self.console.print(f"  - {recommendation}")

    def render_test(self, test: TestIdentity) -> None:
        """Print the quarantine state of one test."""
        state = "QUARANTINED" if test.is_quarantined else "ACTIVE"
        lines = [
            f"Test: {escape(test.name)} ({escape(test.id)})",
            f"State: {state}",
            f"Enabled: {test.enabled}",
        ]
        if test.is_quarantined and "quarantinedAt" in test.config:
            lines.append(f"Quarantined at: {test.config['quarantinedAt']}")
        self.console.print(Panel("\n".join(lines), title="Test Status"))

    def render_error(self, message: str) -> None:
        self.console.print(f"[bold red]Error:[/bold red] {escape(message)}")
