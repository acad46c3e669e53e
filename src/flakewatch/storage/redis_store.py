"""Redis-backed execution history and test config storage."""

import json
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError
from redis.asyncio import Redis, ConnectionPool
from redis.exceptions import RedisError

from ..config.flakiness_config import FlakinessConfig
from ..detection.base import DataUnavailableError, TestNotFoundError
from ..models.flakiness_models import ExecutionRecord, TestIdentity
from .base import ExecutionHistoryLoader, TestConfigStore, ensure_utc

logger = logging.getLogger(__name__)


class RedisConnectionMixin:
    """Lazily created Redis client with connection pooling."""

    config: FlakinessConfig

    _pool: Optional[ConnectionPool] = None
    _redis: Optional[Redis] = None

    async def _get_redis(self) -> Redis:
        """
        Get Redis client, creating the pool on first use.

        Returns:
            Redis async client
        """
        if self._redis is None:
            self._pool = ConnectionPool.from_url(
                self.config.redis_url,
                max_connections=self.config.connection_pool_size,
                decode_responses=True,
            )
            self._redis = Redis(connection_pool=self._pool)
            logger.info("Redis connection pool created")
        return self._redis

    async def close(self) -> None:
        """Close the Redis client and its pool."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            self._pool = None


class RedisExecutionHistory(RedisConnectionMixin, ExecutionHistoryLoader):
    """
    Execution history stored in one sorted set per project.

    PATTERN: Time-series data in a sorted set scored by epoch seconds
    Key: {prefix}:records:{project_id}
    """

    def __init__(self, config: FlakinessConfig, redis_client: Optional[Redis] = None):
        """
        Initialize Redis execution history.

        Args:
            config: Flakewatch configuration
            redis_client: Existing client (creates a pooled one if not provided)
        """
        self.config = config
        self._redis = redis_client

    def _key(self, project_id: str) -> str:
        return f"{self.config.redis_prefix}:records:{project_id}"

    async def add_records(self, project_id: str, records: Iterable[ExecutionRecord]) -> int:
        """
        Store execution records for a project.

        Each member carries a generated id so identical executions stay distinct.

        Returns:
            Number of records stored
        """
        mapping: Dict[str, float] = {}
        for record in records:
            member = {"id": uuid.uuid4().hex, **record.model_dump(mode="json")}
            mapping[json.dumps(member)] = ensure_utc(record.created_at).timestamp()

        if not mapping:
            return 0

        try:
            redis = await self._get_redis()
            await redis.zadd(self._key(project_id), mapping)
        except RedisError as e:
            logger.error(f"Failed to store records for project {project_id}: {e}")
            raise DataUnavailableError(f"Could not store records: {e}") from e
        return len(mapping)

    async def fetch_execution_records(
        self, project_id: str, since: datetime
    ) -> List[ExecutionRecord]:
        try:
            redis = await self._get_redis()
            members = await redis.zrangebyscore(
                self._key(project_id), ensure_utc(since).timestamp(), "+inf"
            )
        except RedisError as e:
            logger.error(f"Failed to load records for project {project_id}: {e}")
            raise DataUnavailableError(
                f"Could not load execution history for project {project_id}: {e}"
            ) from e

        try:
            records = [ExecutionRecord.model_validate_json(member) for member in members]
        except ValidationError as e:
            logger.error(f"Corrupt record in history of project {project_id}: {e}")
            raise DataUnavailableError(
                f"Invalid record in history of project {project_id}: {e}"
            ) from e

        logger.debug(f"Loaded {len(records)} records for project {project_id}")
        return records


class RedisTestConfigStore(RedisConnectionMixin, TestConfigStore):
    """
    Test identities stored as JSON documents.

    Key: {prefix}:test:{test_id}
    GOTCHA: Writes are plain GET/SET, not a transaction
    """

    def __init__(self, config: FlakinessConfig, redis_client: Optional[Redis] = None):
        self.config = config
        self._redis = redis_client

    def _key(self, test_id: str) -> str:
        return f"{self.config.redis_prefix}:test:{test_id}"

    async def add_test(self, test: TestIdentity) -> None:
        """Register a test identity."""
        try:
            redis = await self._get_redis()
            await redis.set(self._key(test.id), test.model_dump_json())
        except RedisError as e:
            raise DataUnavailableError(f"Could not store test {test.id}: {e}") from e

    async def read_test_config(self, test_id: str) -> Optional[TestIdentity]:
        try:
            redis = await self._get_redis()
            data = await redis.get(self._key(test_id))
        except RedisError as e:
            logger.error(f"Failed to read test {test_id}: {e}")
            raise DataUnavailableError(f"Could not read test {test_id}: {e}") from e

        if data is None:
            return None
        try:
            return TestIdentity.model_validate_json(data)
        except ValidationError as e:
            logger.error(f"Corrupt document for test {test_id}: {e}")
            raise DataUnavailableError(f"Invalid document for test {test_id}: {e}") from e

    async def write_test_config(
        self, test_id: str, config: Dict[str, Any], enabled: bool
    ) -> TestIdentity:
        test = await self.read_test_config(test_id)
        if test is None:
            raise TestNotFoundError(test_id)

        updated = test.model_copy(update={"config": config, "enabled": enabled})
        try:
            redis = await self._get_redis()
            await redis.set(self._key(test_id), updated.model_dump_json())
        except RedisError as e:
            logger.error(f"Failed to write test {test_id}: {e}")
            raise DataUnavailableError(f"Could not write test {test_id}: {e}") from e
        return updated
