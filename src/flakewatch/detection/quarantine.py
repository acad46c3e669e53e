"""Quarantine lifecycle of test identities.

PATTERN: Read full config map, change only quarantine keys, write back
GOTCHA: Read-then-write is not atomic; concurrent calls on one test race.
Callers needing strict ordering must serialize per test id.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from ..models.flakiness_models import TestIdentity
from ..storage.base import TestConfigStore
from .base import TestNotFoundError

logger = logging.getLogger(__name__)

QUARANTINED_KEY = "quarantined"
QUARANTINED_AT_KEY = "quarantinedAt"


class QuarantineManager:
    """
    Apply and revert quarantine on persisted test identities.

    Quarantine never expires on its own and is never triggered by analysis;
    both transitions happen only through explicit calls.
    """

    def __init__(
        self,
        store: TestConfigStore,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize quarantine manager.

        Args:
            store: Test config storage
            clock: Returns the current time (default: UTC now)
        """
        self.store = store
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.logger = logger

    async def _require(self, test_id: str) -> TestIdentity:
        test = await self.store.read_test_config(test_id)
        if test is None:
            raise TestNotFoundError(test_id)
        return test

    async def quarantine_test(self, test_id: str) -> TestIdentity:
        """
        Disable a test and mark it quarantined.

        Existing config keys are preserved. Calling again refreshes the
        quarantine timestamp and is otherwise a no-op.

        Args:
            test_id: Test to quarantine

        Returns:
            Updated test identity

        Raises:
            TestNotFoundError: If the test does not exist
        """
        test = await self._require(test_id)

        config = dict(test.config)
        config[QUARANTINED_KEY] = True
        config[QUARANTINED_AT_KEY] = self.clock().isoformat()

        updated = await self.store.write_test_config(test_id, config, enabled=False)
        self.logger.info(f"Quarantined test {test_id}")
        return updated

    async def unquarantine_test(self, test_id: str) -> TestIdentity:
        """
        Re-enable a test and drop its quarantine markers.

        Only the quarantine keys are removed; other config keys are untouched.

        Args:
            test_id: Test to release

        Returns:
            Updated test identity

        Raises:
            TestNotFoundError: If the test does not exist
        """
        test = await self._require(test_id)

        config = dict(test.config)
        config.pop(QUARANTINED_KEY, None)
        config.pop(QUARANTINED_AT_KEY, None)

        updated = await self.store.write_test_config(test_id, config, enabled=True)
        self.logger.info(f"Unquarantined test {test_id}")
        return updated

    async def is_quarantined(self, test_id: str) -> bool:
        """
        Check whether a test is currently quarantined.

        Raises:
            TestNotFoundError: If the test does not exist
        """
        test = await self._require(test_id)
        return test.is_quarantined

    async def list_quarantined(self, test_ids: Iterable[str]) -> List[TestIdentity]:
        """Return the quarantined tests among the given ids, skipping unknown ids."""
        quarantined = []
        for test_id in test_ids:
            test = await self.store.read_test_config(test_id)
            if test is not None and test.is_quarantined:
                quarantined.append(test)
        return quarantined
