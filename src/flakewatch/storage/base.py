"""Abstract interfaces for execution history and test configuration storage."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..models.flakiness_models import ExecutionRecord, TestIdentity


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ExecutionHistoryLoader(ABC):
    """Supplies execution history for a project."""

    @abstractmethod
    async def fetch_execution_records(
        self, project_id: str, since: datetime
    ) -> List[ExecutionRecord]:
        """
        Fetch every execution record of a project created at or after `since`.

        Implementations must return the complete, unpaginated set. Ordering
        is not guaranteed.

        Args:
            project_id: Project identifier
            since: Start of the history window

        Returns:
            Execution records in any order

        Raises:
            DataUnavailableError: If the backing store cannot be read
        """
        pass


class TestConfigStore(ABC):
    """Reads and writes persisted test identities."""

    @abstractmethod
    async def read_test_config(self, test_id: str) -> Optional[TestIdentity]:
        """
        Read a test identity.

        Args:
            test_id: Test identifier

        Returns:
            Test identity if it exists, None otherwise

        Raises:
            DataUnavailableError: If the backing store cannot be read
        """
        pass

    @abstractmethod
    async def write_test_config(
        self, test_id: str, config: Dict[str, Any], enabled: bool
    ) -> TestIdentity:
        """
        Replace a test's config map and enabled flag.

        Args:
            test_id: Test identifier
            config: Complete config map to persist
            enabled: Enabled flag to persist

        Returns:
            Updated test identity

        Raises:
            TestNotFoundError: If the test does not exist
            DataUnavailableError: If the backing store cannot be written
        """
        pass
