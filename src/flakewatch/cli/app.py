"""Main CLI application entry point."""

import asyncio
import logging
import sys
from typing import Optional

import click
from dotenv import load_dotenv
from pydantic import ValidationError

from ..config.flakiness_config import FlakinessConfig
from ..detection.base import FlakewatchError
from ..services.flakiness_service import FlakinessService
from .renderer import ReportRenderer

load_dotenv()

logger = logging.getLogger(__name__)


def _build_service(store_path: Optional[str]) -> FlakinessService:
    config = FlakinessConfig()
    if store_path:
        config.storage_backend = "file"
        config.store_path = store_path
    return FlakinessService(config=config)


def _run(ctx: click.Context, coro):
    """Run a coroutine, mapping flakewatch errors to exit code 1."""
    try:
        return asyncio.run(coro)
    except (FlakewatchError, ValidationError, ValueError) as e:
        if ctx.obj.get("verbose"):
            logger.exception("CLI error")
        ctx.obj["renderer"].render_error(str(e))
        sys.exit(1)


@click.group()
@click.option(
    "--store", "store_path",
    type=click.Path(dir_okay=False),
    envvar="FLAKEWATCH_STORE_PATH",
    help="JSON store with tests and execution records",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose logging",
)
@click.pass_context
def main(ctx: click.Context, store_path: Optional[str], verbose: bool) -> None:
    """
    flakewatch - flaky test detection and quarantine.

    Analyze a project:
        flakewatch --store results.json analyze my-project

    Quarantine a test:
        flakewatch --store results.json quarantine test-123
    """
    log_level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["store_path"] = store_path
    ctx.obj.setdefault("renderer", ReportRenderer())


@main.command()
@click.argument("project_id")
@click.option("--min-runs", type=click.IntRange(min=1), help="Minimum runs per test")
@click.option("--days", type=click.IntRange(min=1), help="History window in days")
@click.option(
    "--threshold",
    type=click.FloatRange(0, 100),
    help="Minimum flakiness score to report",
)
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
@click.pass_context
def analyze(
    ctx: click.Context,
    project_id: str,
    min_runs: Optional[int],
    days: Optional[int],
    threshold: Optional[float],
    as_json: bool,
) -> None:
    """Analyze PROJECT_ID for flaky tests."""
    overrides = {
        key: value
        for key, value in (
            ("min_runs", min_runs),
            ("time_range_days", days),
            ("flakiness_threshold", threshold),
        )
        if value is not None
    }

    async def _analyze():
        service = _build_service(ctx.obj["store_path"])
        return await service.analyze_project(project_id, **overrides)

    report = _run(ctx, _analyze())
    renderer: ReportRenderer = ctx.obj["renderer"]
    if as_json:
        renderer.render_json(report)
    else:
        renderer.render_report(report)


@main.command()
@click.argument("test_id")
@click.pass_context
def quarantine(ctx: click.Context, test_id: str) -> None:
    """Quarantine TEST_ID."""

    async def _quarantine():
        service = _build_service(ctx.obj["store_path"])
        return await service.quarantine_test(test_id)

    test = _run(ctx, _quarantine())
    click.echo(f"Test {test.id} quarantined successfully")


@main.command()
@click.argument("test_id")
@click.pass_context
def unquarantine(ctx: click.Context, test_id: str) -> None:
    """Release TEST_ID from quarantine."""

    async def _unquarantine():
        service = _build_service(ctx.obj["store_path"])
        return await service.unquarantine_test(test_id)

    test = _run(ctx, _unquarantine())
    click.echo(f"Test {test.id} unquarantined successfully")


@main.command()
@click.argument("test_id")
@click.pass_context
def status(ctx: click.Context, test_id: str) -> None:
    """Show the quarantine state of TEST_ID."""

    async def _status():
        service = _build_service(ctx.obj["store_path"])
        return await service.get_test(test_id)

    test = _run(ctx, _status())
    if test is None:
        ctx.obj["renderer"].render_error(f"Test not found: {test_id}")
        sys.exit(1)
    ctx.obj["renderer"].render_test(test)


if __name__ == "__main__":
    main()
