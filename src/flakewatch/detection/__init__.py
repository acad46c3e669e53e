"""Flaky test detection, categorization and quarantine."""

from .base import (
    FlakewatchError,
    DataUnavailableError,
    TestNotFoundError,
    HIGH_ALTERNATION,
    INCONSISTENT_PASS_RATE,
    HIGH_DURATION_VARIANCE,
    INCONSISTENT_ERRORS,
)
from .aggregator import aggregate_records, group_by_test
from .scorer import FlakinessScorer, Heuristic
from .categorizer import FlakinessCategorizer, CategoryRule
from .recommendations import recommend_for_test, recommend_for_project
from .analyzer import ProjectAnalyzer, determine_health
from .quarantine import QuarantineManager

__all__ = [
    "FlakewatchError",
    "DataUnavailableError",
    "TestNotFoundError",
    "HIGH_ALTERNATION",
    "INCONSISTENT_PASS_RATE",
    "HIGH_DURATION_VARIANCE",
    "INCONSISTENT_ERRORS",
    "aggregate_records",
    "group_by_test",
    "FlakinessScorer",
    "Heuristic",
    "FlakinessCategorizer",
    "CategoryRule",
    "recommend_for_test",
    "recommend_for_project",
    "ProjectAnalyzer",
    "determine_health",
    "QuarantineManager",
]
