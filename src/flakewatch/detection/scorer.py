"""Flakiness scoring through independent statistical heuristics.

PATTERN: Ordered list of (label, contribution) heuristics, all evaluated
CRITICAL: Records must be sorted by creation time before scoring
"""

import logging
import statistics
from typing import Callable, List, NamedTuple, Optional, Sequence

from ..models.flakiness_models import ExecutionRecord, FlakinessScore, TestStatus
from .base import (
    HIGH_ALTERNATION,
    INCONSISTENT_PASS_RATE,
    HIGH_DURATION_VARIANCE,
    INCONSISTENT_ERRORS,
)

logger = logging.getLogger(__name__)


def alternation_rate(records: Sequence[ExecutionRecord]) -> float:
    """Fraction of adjacent record pairs whose statuses differ."""
    if len(records) < 2:
        return 0.0
    transitions = sum(
        1 for prev, curr in zip(records, records[1:]) if prev.status != curr.status
    )
    return transitions / (len(records) - 1)


def pass_rate(records: Sequence[ExecutionRecord]) -> float:
    """Percentage of PASSED records, unrounded."""
    if not records:
        return 0.0
    passed = sum(1 for r in records if r.status == TestStatus.PASSED)
    return passed / len(records) * 100


def duration_cv(records: Sequence[ExecutionRecord]) -> Optional[float]:
    """
    Coefficient of variation of recorded durations.

    Returns None with two or fewer durations, or when the mean is zero.
    """
    durations = [r.duration for r in records if r.duration is not None]
    if len(durations) <= 2:
        return None

    mean = statistics.mean(durations)
    if mean == 0:
        return None

    std_dev = statistics.pstdev(durations, mu=mean)
    return std_dev / mean


def error_messages(records: Sequence[ExecutionRecord]) -> List[str]:
    """Non-null error messages in record order."""
    return [r.error_message for r in records if r.error_message is not None]


class Heuristic(NamedTuple):
    """A single scoring rule: label plus a contribution function.

    The function returns None when the rule does not match.
    """

    label: str
    evaluate: Callable[[Sequence[ExecutionRecord]], Optional[float]]


def _alternation_contribution(records: Sequence[ExecutionRecord]) -> Optional[float]:
    rate = alternation_rate(records)
    if rate > 0.3:
        return rate * 40
    return None


def _pass_rate_contribution(records: Sequence[ExecutionRecord]) -> Optional[float]:
    # Peaks at 30 for a 50% pass rate. Constants are tuned, keep them literal.
    rate = pass_rate(records)
    if 5 < rate < 95:
        return 30 - abs(rate - 50) * 0.4
    return None


def _duration_contribution(records: Sequence[ExecutionRecord]) -> Optional[float]:
    cv = duration_cv(records)
    if cv is not None and cv > 0.5:
        return cv * 20
    return None


def _error_contribution(records: Sequence[ExecutionRecord]) -> Optional[float]:
    # Few distinct messages repeated across many failures.
    messages = error_messages(records)
    unique = len(set(messages))
    if unique > 1 and unique < len(messages) * 0.5:
        return 15.0
    return None


DEFAULT_HEURISTICS: List[Heuristic] = [
    Heuristic(HIGH_ALTERNATION, _alternation_contribution),
    Heuristic(INCONSISTENT_PASS_RATE, _pass_rate_contribution),
    Heuristic(HIGH_DURATION_VARIANCE, _duration_contribution),
    Heuristic(INCONSISTENT_ERRORS, _error_contribution),
]


class FlakinessScorer:
    """
    Score one test's execution history for flakiness.

    PATTERN: Multiple independent signals summed into one score
    GOTCHA: Every heuristic runs; a match never short-circuits the others

    A test that fails consistently, with stable durations and one error
    message, scores close to zero. Flakiness requires inconsistency.
    """

    def __init__(self, heuristics: Optional[List[Heuristic]] = None):
        """
        Initialize scorer.

        Args:
            heuristics: Ordered scoring rules (default: the four built-in rules)
        """
        self.heuristics = heuristics if heuristics is not None else DEFAULT_HEURISTICS
        self.logger = logger

    def score(self, records: Sequence[ExecutionRecord]) -> FlakinessScore:
        """
        Evaluate all heuristics against a time-ordered record sequence.

        Args:
            records: Executions of a single test, oldest first

        Returns:
            Raw score with the labels of every matched heuristic
        """
        raw_score = 0.0
        criteria: List[str] = []

        for heuristic in self.heuristics:
            contribution = heuristic.evaluate(records)
            if contribution is None:
                continue
            criteria.append(heuristic.label)
            raw_score += contribution

        result = FlakinessScore(
            raw_score=raw_score,
            criteria=criteria,
            alternation_rate=alternation_rate(records),
            pass_rate=pass_rate(records),
            duration_cv=duration_cv(records),
        )

        self.logger.debug(
            f"Scored {len(records)} runs: raw={raw_score:.2f} criteria={criteria}"
        )
        return result
