"""Project-wide flaky test analysis.

PATTERN: Load once, then a pure batch computation over the snapshot
CRITICAL: A report is either complete or not produced at all
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..models.flakiness_models import (
    AnalysisOptions,
    ExecutionRecord,
    FlakyTestResult,
    HealthStatus,
    ProjectFlakinessReport,
    TestStatus,
)
from ..storage.base import ExecutionHistoryLoader
from .aggregator import aggregate_records
from .base import QUARANTINE_SCORE_THRESHOLD
from .categorizer import FlakinessCategorizer
from .recommendations import describe_pattern, recommend_for_project, recommend_for_test
from .scorer import FlakinessScorer

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def round_one_decimal(value: float) -> float:
    """Round half-up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def find_last_flake(records: Sequence[ExecutionRecord]) -> Optional[datetime]:
    """
    Timestamp of the most recent failure immediately followed by a pass.

    Args:
        records: Executions of one test, oldest first

    Returns:
        Creation time of that failing run, None if the test never recovered
    """
    for i in range(len(records) - 2, -1, -1):
        if (
            records[i].status == TestStatus.FAILED
            and records[i + 1].status == TestStatus.PASSED
        ):
            return records[i].created_at
    return None


def determine_health(flaky_count: int, analyzed_count: int) -> HealthStatus:
    """
    Health tier from the share of analyzed tests that are flaky.

    Args:
        flaky_count: Tests reported as flaky
        analyzed_count: Tests meeting the minimum run count

    Returns:
        HEALTHY below 5%, DEGRADED below 15%, CRITICAL otherwise
    """
    if analyzed_count == 0:
        return HealthStatus.HEALTHY

    flaky_percentage = flaky_count / analyzed_count * 100
    if flaky_percentage < 5:
        return HealthStatus.HEALTHY
    if flaky_percentage < 15:
        return HealthStatus.DEGRADED
    return HealthStatus.CRITICAL


class ProjectAnalyzer:
    """
    Analyze a project's execution history for flaky tests.

    PATTERN: Loader -> aggregator -> scorer/categorizer/recommendations
    GOTCHA: should_quarantine is advisory; nothing here changes test state
    """

    def __init__(
        self,
        loader: ExecutionHistoryLoader,
        scorer: Optional[FlakinessScorer] = None,
        categorizer: Optional[FlakinessCategorizer] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize project analyzer.

        Args:
            loader: Source of execution history
            scorer: Flakiness scorer (default: built-in heuristics)
            categorizer: Root-cause categorizer (default: built-in rules)
            clock: Returns the current time (default: UTC now)
        """
        self.loader = loader
        self.scorer = scorer or FlakinessScorer()
        self.categorizer = categorizer or FlakinessCategorizer()
        self.clock = clock or _utcnow
        self.logger = logger

    async def analyze_project(
        self,
        project_id: str,
        options: Optional[AnalysisOptions] = None,
        **overrides: Any,
    ) -> ProjectFlakinessReport:
        """
        Analyze every test of a project with enough history.

        Args:
            project_id: Project to analyze
            options: Analysis options (default: AnalysisOptions())
            **overrides: Individual option overrides (min_runs, ...)

        Returns:
            Project flakiness report

        Raises:
            DataUnavailableError: If the execution history cannot be loaded
            pydantic.ValidationError: If an override is out of range
        """
        options = options or AnalysisOptions()
        if overrides:
            options = AnalysisOptions.model_validate(
                {**options.model_dump(), **overrides}
            )

        now = self.clock()
        since = now - timedelta(days=options.time_range_days)

        self.logger.info(
            f"Analyzing project {project_id} since {since.isoformat()} "
            f"(min_runs={options.min_runs}, threshold={options.flakiness_threshold})"
        )

        records = await self.loader.fetch_execution_records(project_id, since)
        report = self.build_report(project_id, records, options, analyzed_at=now)

        self.logger.info(
            f"Project {project_id}: {report.flaky_count}/{report.total_tests} "
            f"tests flaky, health {report.overall_health.value}"
        )
        return report

    def build_report(
        self,
        project_id: str,
        records: Sequence[ExecutionRecord],
        options: AnalysisOptions,
        analyzed_at: Optional[datetime] = None,
    ) -> ProjectFlakinessReport:
        """
        Build a report from an already loaded record snapshot.

        Args:
            project_id: Project identifier
            records: Execution records in any order
            options: Analysis options
            analyzed_at: Report timestamp (default: clock())

        Returns:
            Project flakiness report
        """
        grouped: Dict[str, List[ExecutionRecord]] = aggregate_records(
            records, options.min_runs
        )

        flaky_tests: List[FlakyTestResult] = []
        for test_id, runs in grouped.items():
            result = self.analyze_test(test_id, runs)
            if result.flakiness_score >= options.flakiness_threshold:
                flaky_tests.append(result)

        # list.sort is stable: ties keep aggregation order
        flaky_tests.sort(key=lambda r: r.flakiness_score, reverse=True)

        health = determine_health(len(flaky_tests), len(grouped))

        return ProjectFlakinessReport(
            project_id=project_id,
            analyzed_at=analyzed_at or self.clock(),
            total_tests=len(grouped),
            flaky_tests=flaky_tests,
            overall_health=health,
            recommendations=recommend_for_project(flaky_tests, health),
        )

    def analyze_test(
        self, test_id: str, records: Sequence[ExecutionRecord]
    ) -> FlakyTestResult:
        """
        Score, categorize and build recommendations for one test.

        Args:
            test_id: Test identifier
            records: Executions of this test, oldest first

        Returns:
            Flaky test result
        """
        score = self.scorer.score(records)
        category = self.categorizer.categorize(records, score.criteria)
        flakiness_score = score.score

        self.logger.debug(
            f"Test {test_id}: score={flakiness_score} category={category.value}"
        )

        return FlakyTestResult(
            test_id=test_id,
            test_name=records[-1].test_name,
            flakiness_score=flakiness_score,
            pass_rate=round_one_decimal(score.pass_rate),
            total_runs=len(records),
            flaky_criteria=score.criteria,
            category=category,
            recommendations=recommend_for_test(category, score.criteria),
            should_quarantine=flakiness_score > QUARANTINE_SCORE_THRESHOLD,
            last_flake=find_last_flake(records),
            pattern=describe_pattern(category, records, score.criteria),
        )
