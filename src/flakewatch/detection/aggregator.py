"""Grouping of raw execution history into per-test sequences."""

import logging
from typing import Dict, Iterable, List

from ..models.flakiness_models import ExecutionRecord
from ..storage.base import ensure_utc

logger = logging.getLogger(__name__)


def group_by_test(records: Iterable[ExecutionRecord]) -> Dict[str, List[ExecutionRecord]]:
    """
    Group records by test id, each group sorted by creation time.

    Test ids keep the order in which they were first encountered. Sorting is
    stable, so records with equal timestamps keep their input order. Naive
    timestamps are treated as UTC.

    Args:
        records: Execution records in any order

    Returns:
        Mapping of test id to its time-ordered records
    """
    grouped: Dict[str, List[ExecutionRecord]] = {}
    for record in records:
        grouped.setdefault(record.test_id, []).append(record)

    for test_id in grouped:
        grouped[test_id].sort(key=lambda r: ensure_utc(r.created_at))

    return grouped


def aggregate_records(
    records: Iterable[ExecutionRecord], min_runs: int
) -> Dict[str, List[ExecutionRecord]]:
    """
    Group records by test and drop tests with too few executions.

    Args:
        records: Execution records in any order
        min_runs: Minimum executions a test needs to be kept

    Returns:
        Mapping of qualifying test ids to their time-ordered records
    """
    grouped = group_by_test(records)
    qualifying = {
        test_id: runs for test_id, runs in grouped.items() if len(runs) >= min_runs
    }

    dropped = len(grouped) - len(qualifying)
    if dropped:
        logger.debug(f"Dropped {dropped} tests with fewer than {min_runs} runs")

    return qualifying
