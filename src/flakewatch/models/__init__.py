"""Data models for flakewatch."""

from .flakiness_models import (
    TestStatus,
    FlakinessCategory,
    HealthStatus,
    ExecutionRecord,
    TestIdentity,
    FlakinessScore,
    FlakyPattern,
    FlakyTestResult,
    ProjectFlakinessReport,
    AnalysisOptions,
)

__all__ = [
    "TestStatus",
    "FlakinessCategory",
    "HealthStatus",
    "ExecutionRecord",
    "TestIdentity",
    "FlakinessScore",
    "FlakyPattern",
    "FlakyTestResult",
    "ProjectFlakinessReport",
    "AnalysisOptions",
]
