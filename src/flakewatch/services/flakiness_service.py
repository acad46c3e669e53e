"""High-level flaky test service.

This service provides a facade for coordinating flakiness components:
- Loading execution history from the configured backend
- Project analysis with scoring, categorization and recommendations
- Explicit quarantine and unquarantine of tests

PATTERN: Service facade over storage and detection components
CRITICAL: Analysis never quarantines; quarantine is a separate explicit call
"""

import logging
from pathlib import Path
from typing import Any, List, Optional, Tuple

from ..config.flakiness_config import FlakinessConfig
from ..detection.analyzer import ProjectAnalyzer
from ..detection.quarantine import QuarantineManager
from ..models.flakiness_models import (
    AnalysisOptions,
    ProjectFlakinessReport,
    TestIdentity,
)
from ..storage.base import ExecutionHistoryLoader, TestConfigStore
from ..storage.json_store import JsonFileStore
from ..storage.memory import InMemoryExecutionHistory, InMemoryTestConfigStore
from ..storage.redis_store import RedisExecutionHistory, RedisTestConfigStore

logger = logging.getLogger(__name__)


def create_storage(
    config: FlakinessConfig,
) -> Tuple[ExecutionHistoryLoader, TestConfigStore]:
    """
    Build loader and config store for the configured backend.

    Args:
        config: Flakewatch configuration

    Returns:
        (history loader, test config store)

    Raises:
        ValueError: If the backend is unknown or the file backend has no path
    """
    backend = config.storage_backend.lower()

    if backend == "memory":
        return InMemoryExecutionHistory(), InMemoryTestConfigStore()

    if backend == "redis":
        return RedisExecutionHistory(config), RedisTestConfigStore(config)

    if backend == "file":
        if not config.store_path:
            raise ValueError("FLAKEWATCH_STORE_PATH is required for the file backend")
        store = JsonFileStore(Path(config.store_path))
        return store, store

    raise ValueError(f"Unknown storage backend: {config.storage_backend}")


class FlakinessService:
    """
    High-level flaky test service.

    PATTERN: Service facade for analysis and quarantine operations
    GOTCHA: Concurrent quarantine calls on the same test id are not serialized
    """

    def __init__(
        self,
        config: Optional[FlakinessConfig] = None,
        loader: Optional[ExecutionHistoryLoader] = None,
        store: Optional[TestConfigStore] = None,
        analyzer: Optional[ProjectAnalyzer] = None,
        quarantine_manager: Optional[QuarantineManager] = None,
    ):
        """
        Initialize flakiness service.

        Args:
            config: Configuration (loaded from environment if not provided)
            loader: Execution history loader (built from config if not provided)
            store: Test config store (built from config if not provided)
            analyzer: Project analyzer (built around loader if not provided)
            quarantine_manager: Quarantine manager (built around store if not provided)
        """
        self.config = config or FlakinessConfig()
        self.logger = logger

        if loader is None or store is None:
            default_loader, default_store = create_storage(self.config)
            loader = loader or default_loader
            store = store or default_store

        self.loader = loader
        self.store = store
        self.analyzer = analyzer or ProjectAnalyzer(loader=self.loader)
        self.quarantine_manager = quarantine_manager or QuarantineManager(
            store=self.store
        )

        self.logger.info(
            f"FlakinessService initialized (storage={self.config.storage_backend})"
        )

    async def analyze_project(
        self,
        project_id: str,
        options: Optional[AnalysisOptions] = None,
        **overrides: Any,
    ) -> ProjectFlakinessReport:
        """
        Analyze a project for flaky tests.

        Args:
            project_id: Project to analyze
            options: Analysis options (default: from configuration)
            **overrides: Individual option overrides

        Returns:
            Project flakiness report
        """
        options = options or self.config.default_options()
        return await self.analyzer.analyze_project(project_id, options, **overrides)

    async def quarantine_test(self, test_id: str) -> TestIdentity:
        """Quarantine a test. Raises TestNotFoundError for unknown ids."""
        return await self.quarantine_manager.quarantine_test(test_id)

    async def unquarantine_test(self, test_id: str) -> TestIdentity:
        """Release a test from quarantine. Raises TestNotFoundError for unknown ids."""
        return await self.quarantine_manager.unquarantine_test(test_id)

    async def get_test(self, test_id: str) -> Optional[TestIdentity]:
        """Read a test identity, None if it does not exist."""
        return await self.store.read_test_config(test_id)

    async def quarantine_candidates(
        self, report: ProjectFlakinessReport
    ) -> List[str]:
        """
        Test ids the report advises quarantining that are not yet quarantined.

        Purely a query; nothing is quarantined.
        """
        advised = [r.test_id for r in report.flaky_tests if r.should_quarantine]
        already = {
            t.id for t in await self.quarantine_manager.list_quarantined(advised)
        }
        return [test_id for test_id in advised if test_id not in already]
