"""Shared fixtures for flakewatch tests."""

import pytest
from datetime import datetime, timedelta, timezone

from flakewatch.models.flakiness_models import ExecutionRecord, TestStatus


BASE_TIME = datetime(2026, 1, 10, 12, 0, tzinfo=timezone.utc)
NOW = datetime(2026, 1, 31, 12, 0, tzinfo=timezone.utc)

P = TestStatus.PASSED
F = TestStatus.FAILED


def build_records(
    statuses,
    test_id="test-1",
    test_name=None,
    durations=None,
    errors=None,
    start=BASE_TIME,
    step=timedelta(hours=1),
):
    """Build one record per status, spaced `step` apart starting at `start`."""
    records = []
    for i, status in enumerate(statuses):
        records.append(
            ExecutionRecord(
                test_id=test_id,
                test_name=test_name or f"{test_id} name",
                test_type="e2e",
                status=status,
                duration=durations[i] if durations else None,
                error_message=errors[i] if errors else None,
                created_at=start + step * i,
            )
        )
    return records


@pytest.fixture
def make_records():
    """Factory fixture for execution record sequences."""
    return build_records


@pytest.fixture
def fixed_clock():
    """Clock returning a fixed 'now'."""
    return lambda: NOW
