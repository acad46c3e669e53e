"""Data models for flaky test detection and quarantine.

This module contains all Pydantic models for execution history, test
identities, per-test flakiness results and project-level reports.
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Any, Optional
from enum import Enum
from datetime import datetime


class TestStatus(str, Enum):
    """Outcome of a single test execution."""

    __test__ = False

    PASSED = "PASSED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"
    ERROR = "ERROR"
    TIMEOUT = "TIMEOUT"
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    CANCELLED = "CANCELLED"
    FLAKY = "FLAKY"


class FlakinessCategory(str, Enum):
    """Likely root cause of a flaky test."""

    TIMING = "TIMING"
    NETWORK = "NETWORK"
    STATE = "STATE"
    EXTERNAL = "EXTERNAL"
    RACE_CONDITION = "RACE_CONDITION"
    UNKNOWN = "UNKNOWN"


class HealthStatus(str, Enum):
    """Overall test-suite health of a project."""

    HEALTHY = "HEALTHY"
    DEGRADED = "DEGRADED"
    CRITICAL = "CRITICAL"


class ExecutionRecord(BaseModel):
    """A single execution of one test, produced by the execution engine."""

    model_config = {"frozen": True}

    test_id: str = Field(description="Stable test identifier")
    test_name: str = Field(description="Display name of the test")
    test_type: str = Field(default="unit", description="Test type (e2e, api, unit, ...)")
    status: TestStatus = Field(description="Execution outcome")
    duration: Optional[float] = Field(
        default=None, description="Execution time in milliseconds"
    )
    error_message: Optional[str] = Field(
        default=None, description="Error text reported by the runner"
    )
    created_at: datetime = Field(description="When the execution was recorded")


class TestIdentity(BaseModel):
    """Persisted identity of a test, including its quarantine state."""

    __test__ = False

    id: str = Field(description="Stable test identifier")
    name: str = Field(description="Display name of the test")
    type: str = Field(default="unit", description="Test type")
    enabled: bool = Field(default=True, description="Whether the test gates builds")
    config: Dict[str, Any] = Field(
        default_factory=dict, description="Open-ended test configuration"
    )

    @property
    def is_quarantined(self) -> bool:
        return self.config.get("quarantined") is True


class FlakinessScore(BaseModel):
    """Raw output of the flakiness scorer for one test."""

    raw_score: float = Field(description="Sum of heuristic contributions")
    criteria: List[str] = Field(
        default_factory=list, description="Labels of matched heuristics, in order"
    )
    alternation_rate: float = Field(default=0.0, description="Transitions / (n - 1)")
    pass_rate: float = Field(default=0.0, description="Unrounded pass percentage")
    duration_cv: Optional[float] = Field(
        default=None, description="Coefficient of variation of durations"
    )

    @property
    def score(self) -> int:
        """Score clamped to [0, 100] and rounded half-up."""
        clamped = min(100.0, max(0.0, self.raw_score))
        return int(clamped + 0.5)


class FlakyPattern(BaseModel):
    """Human-readable description of how a test flakes."""

    description: str = Field(description="What the flakiness looks like")
    frequency: str = Field(description="How often the test fails")
    triggers: List[str] = Field(
        default_factory=list, description="Signals that flagged the test"
    )


class FlakyTestResult(BaseModel):
    """Flakiness analysis of a single test."""

    test_id: str = Field(description="Test identifier")
    test_name: str = Field(description="Test name")
    flakiness_score: int = Field(ge=0, le=100, description="0-100, higher = more flaky")
    pass_rate: float = Field(ge=0, le=100, description="Pass percentage, one decimal")
    total_runs: int = Field(description="Number of executions analyzed")
    flaky_criteria: List[str] = Field(
        default_factory=list, description="Matched flakiness criteria"
    )
    category: FlakinessCategory = Field(
        default=FlakinessCategory.UNKNOWN, description="Likely root cause"
    )
    recommendations: List[str] = Field(
        default_factory=list, description="Remediation steps"
    )
    should_quarantine: bool = Field(
        default=False, description="Advisory only, never actuated automatically"
    )
    last_flake: Optional[datetime] = Field(
        default=None, description="Most recent failure followed by a pass"
    )
    pattern: Optional[FlakyPattern] = Field(default=None)


class ProjectFlakinessReport(BaseModel):
    """Flakiness report for a whole project."""

    project_id: str = Field(description="Project identifier")
    analyzed_at: datetime = Field(description="Analysis timestamp")
    total_tests: int = Field(description="Tests meeting the minimum run count")
    flaky_tests: List[FlakyTestResult] = Field(
        default_factory=list, description="Flaky tests, most flaky first"
    )
    overall_health: HealthStatus = Field(description="Project health tier")
    recommendations: List[str] = Field(
        default_factory=list, description="Project-level guidance"
    )

    @property
    def flaky_count(self) -> int:
        return len(self.flaky_tests)


class AnalysisOptions(BaseModel):
    """Tunable parameters of a project analysis."""

    min_runs: int = Field(default=5, ge=1, description="Minimum runs per test")
    time_range_days: int = Field(default=30, ge=1, description="History window in days")
    flakiness_threshold: float = Field(
        default=10, ge=0, le=100, description="Minimum score to report a test"
    )
