"""Remediation guidance for flaky tests and projects."""

from collections import Counter
from typing import Dict, List, Sequence

from ..models.flakiness_models import (
    FlakinessCategory,
    FlakyPattern,
    FlakyTestResult,
    HealthStatus,
    ExecutionRecord,
    TestStatus,
)
from .base import HIGH_ALTERNATION

CATEGORY_RECOMMENDATIONS: Dict[FlakinessCategory, List[str]] = {
    FlakinessCategory.TIMING: [
        "Increase test timeouts",
        "Add explicit waits for async operations",
        "Use polling instead of fixed delays",
    ],
    FlakinessCategory.NETWORK: [
        "Add retry logic for network calls",
        "Mock external network dependencies",
        "Implement circuit breaker pattern",
    ],
    FlakinessCategory.STATE: [
        "Ensure proper test isolation",
        "Reset database state before each test",
        "Avoid shared mutable state between tests",
    ],
    FlakinessCategory.EXTERNAL: [
        "Mock external service calls",
        "Use service virtualization",
        "Implement fallback test data",
    ],
    FlakinessCategory.RACE_CONDITION: [
        "Add synchronization primitives",
        "Use atomic operations",
        "Review concurrent code paths",
    ],
    FlakinessCategory.UNKNOWN: [
        "Review test implementation for non-deterministic behavior",
        "Add more specific assertions",
        "Increase test logging for debugging",
    ],
}

QUARANTINE_RECOMMENDATION = "Consider test quarantine until fixed"

HEALTH_RECOMMENDATIONS: Dict[HealthStatus, List[str]] = {
    HealthStatus.CRITICAL: [
        "Consider implementing a flaky test quarantine strategy",
        "Set up automated flaky test detection in CI/CD",
        "Prioritize fixing tests with highest flakiness scores",
    ],
    HealthStatus.DEGRADED: [
        "Schedule regular flaky test triage sessions",
        "Add test stability metrics to team dashboards",
    ],
    HealthStatus.HEALTHY: [],
}

GENERAL_RECOMMENDATIONS = [
    "Enable automatic retries for known flaky tests",
    "Consider parallel test execution with proper isolation",
]

CATEGORY_DESCRIPTIONS: Dict[FlakinessCategory, str] = {
    FlakinessCategory.TIMING: "Fails on slow or variable execution timing",
    FlakinessCategory.NETWORK: "Fails on unreliable network connections",
    FlakinessCategory.STATE: "Fails depending on leftover or shared state",
    FlakinessCategory.EXTERNAL: "Fails when an external service misbehaves",
    FlakinessCategory.RACE_CONDITION: "Outcome depends on execution interleaving",
    FlakinessCategory.UNKNOWN: "Non-deterministic outcome with no clear cause",
}


def recommend_for_test(
    category: FlakinessCategory, criteria: Sequence[str]
) -> List[str]:
    """
    Remediation steps for a single flaky test.

    Args:
        category: Root-cause category
        criteria: Matched scorer criteria

    Returns:
        Ordered remediation steps
    """
    recommendations = list(CATEGORY_RECOMMENDATIONS[category])
    if HIGH_ALTERNATION in criteria:
        recommendations.append(QUARANTINE_RECOMMENDATION)
    return recommendations


def describe_pattern(
    category: FlakinessCategory,
    records: Sequence[ExecutionRecord],
    criteria: Sequence[str],
) -> FlakyPattern:
    """Summarize how a test flakes: description, failure frequency, triggers."""
    failed = sum(1 for r in records if r.status == TestStatus.FAILED)
    return FlakyPattern(
        description=CATEGORY_DESCRIPTIONS[category],
        frequency=f"failed {failed} of {len(records)} runs",
        triggers=list(criteria),
    )


def most_common_category(flaky_tests: Sequence[FlakyTestResult]) -> tuple:
    """
    Most frequent category among results.

    Ties go to the category encountered first, scanning in the given order.

    Returns:
        (category, count), or (None, 0) when there are no results
    """
    if not flaky_tests:
        return None, 0
    counts = Counter(t.category for t in flaky_tests)
    # Counter preserves insertion order; max() keeps the first maximum.
    category = max(counts, key=lambda c: counts[c])
    return category, counts[category]


def recommend_for_project(
    flaky_tests: Sequence[FlakyTestResult], health: HealthStatus
) -> List[str]:
    """
    Project-level guidance.

    Args:
        flaky_tests: Flaky results, most flaky first
        health: Project health tier

    Returns:
        Ordered project recommendations
    """
    recommendations: List[str] = []

    category, count = most_common_category(flaky_tests)
    if category is not None:
        recommendations.append(
            f"Most common flakiness cause: {category.value} ({count} tests). "
            "Focus remediation efforts here."
        )

    recommendations.extend(HEALTH_RECOMMENDATIONS[health])
    recommendations.extend(GENERAL_RECOMMENDATIONS)
    return recommendations
