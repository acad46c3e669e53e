"""In-process storage backends, used for tests and embedding."""

import copy
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from ..detection.base import TestNotFoundError
from ..models.flakiness_models import ExecutionRecord, TestIdentity
from .base import ExecutionHistoryLoader, TestConfigStore, ensure_utc

logger = logging.getLogger(__name__)


class InMemoryExecutionHistory(ExecutionHistoryLoader):
    """Execution history held in a dict of project id to records."""

    def __init__(self, records: Optional[Dict[str, List[ExecutionRecord]]] = None):
        self._records: Dict[str, List[ExecutionRecord]] = {
            project_id: list(items) for project_id, items in (records or {}).items()
        }

    def add_records(self, project_id: str, records: Iterable[ExecutionRecord]) -> None:
        """Append records to a project's history."""
        self._records.setdefault(project_id, []).extend(records)

    async def fetch_execution_records(
        self, project_id: str, since: datetime
    ) -> List[ExecutionRecord]:
        since = ensure_utc(since)
        return [
            record
            for record in self._records.get(project_id, [])
            if ensure_utc(record.created_at) >= since
        ]


class InMemoryTestConfigStore(TestConfigStore):
    """Test identities held in a dict keyed by test id."""

    def __init__(self, tests: Optional[Iterable[TestIdentity]] = None):
        self._tests: Dict[str, TestIdentity] = {}
        for test in tests or []:
            self.add_test(test)

    def add_test(self, test: TestIdentity) -> None:
        """Register a test identity."""
        self._tests[test.id] = test.model_copy(deep=True)

    async def read_test_config(self, test_id: str) -> Optional[TestIdentity]:
        test = self._tests.get(test_id)
        return test.model_copy(deep=True) if test else None

    async def write_test_config(
        self, test_id: str, config: Dict[str, Any], enabled: bool
    ) -> TestIdentity:
        test = self._tests.get(test_id)
        if test is None:
            raise TestNotFoundError(test_id)

        updated = test.model_copy(
            update={"config": copy.deepcopy(config), "enabled": enabled}
        )
        self._tests[test_id] = updated
        logger.debug(f"Wrote config for test {test_id} (enabled={enabled})")
        return updated.model_copy(deep=True)
