"""Root-cause categorization of flaky tests.

PATTERN: Ordered (predicate, category) chain, first match wins
GOTCHA: Categories overlap by content, so rule order decides the outcome
"""

import logging
from typing import Callable, List, NamedTuple, Optional, Sequence

from ..models.flakiness_models import ExecutionRecord, FlakinessCategory
from .base import HIGH_ALTERNATION, HIGH_DURATION_VARIANCE

logger = logging.getLogger(__name__)


class CategoryRule(NamedTuple):
    """Predicate over (lower-cased error text, criteria) mapped to a category."""

    category: FlakinessCategory
    matches: Callable[[str, Sequence[str]], bool]


def _contains_any(text: str, *keywords: str) -> bool:
    return any(keyword in text for keyword in keywords)


DEFAULT_RULES: List[CategoryRule] = [
    CategoryRule(
        FlakinessCategory.TIMING,
        lambda text, criteria: _contains_any(text, "timeout", "timed out")
        or HIGH_DURATION_VARIANCE in criteria,
    ),
    CategoryRule(
        FlakinessCategory.NETWORK,
        lambda text, criteria: _contains_any(
            text, "network", "connection", "econnrefused", "socket"
        ),
    ),
    CategoryRule(
        FlakinessCategory.STATE,
        lambda text, criteria: _contains_any(text, "state", "expected", "not found"),
    ),
    CategoryRule(
        FlakinessCategory.EXTERNAL,
        lambda text, criteria: _contains_any(text, "external", "api", "service"),
    ),
    CategoryRule(
        FlakinessCategory.RACE_CONDITION,
        lambda text, criteria: _contains_any(text, "race", "concurrent")
        or HIGH_ALTERNATION in criteria,
    ),
]


def error_text(records: Sequence[ExecutionRecord]) -> str:
    """Lower-cased, space-joined error messages of all records."""
    return " ".join(
        r.error_message for r in records if r.error_message is not None
    ).lower()


class FlakinessCategorizer:
    """Map a test's error text and matched criteria to one root-cause category."""

    def __init__(self, rules: Optional[List[CategoryRule]] = None):
        self.rules = rules if rules is not None else DEFAULT_RULES

    def categorize_text(self, text: str, criteria: Sequence[str]) -> FlakinessCategory:
        """
        Walk the rule chain and return the first matching category.

        Args:
            text: Lower-cased error text
            criteria: Matched scorer criteria

        Returns:
            Matching category, UNKNOWN if no rule matches
        """
        for rule in self.rules:
            if rule.matches(text, criteria):
                return rule.category
        return FlakinessCategory.UNKNOWN

    def categorize(
        self, records: Sequence[ExecutionRecord], criteria: Sequence[str]
    ) -> FlakinessCategory:
        category = self.categorize_text(error_text(records), criteria)
        logger.debug(f"Categorized as {category.value}")
        return category
