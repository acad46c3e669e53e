"""Tests for Redis storage backends."""

import json

import pytest
from unittest.mock import AsyncMock
from redis.exceptions import RedisError

from conftest import BASE_TIME, build_records
from flakewatch.config.flakiness_config import FlakinessConfig
from flakewatch.detection.base import DataUnavailableError, TestNotFoundError
from flakewatch.models.flakiness_models import TestIdentity, TestStatus
from flakewatch.storage.redis_store import RedisExecutionHistory, RedisTestConfigStore


@pytest.fixture
def config():
    """Create test configuration."""
    return FlakinessConfig(redis_prefix="flakewatch")


@pytest.fixture
def redis_client():
    """Mock async Redis client."""
    return AsyncMock()


class TestRedisExecutionHistory:
    """Tests for RedisExecutionHistory."""

    @pytest.mark.asyncio
    async def test_add_records_scores_by_timestamp(self, config, redis_client):
        history = RedisExecutionHistory(config, redis_client=redis_client)
        records = build_records([TestStatus.PASSED, TestStatus.PASSED])

        stored = await history.add_records("p1", records)

        assert stored == 2
        key, mapping = redis_client.zadd.call_args.args
        assert key == "flakewatch:records:p1"
        assert sorted(mapping.values()) == [
            records[0].created_at.timestamp(),
            records[1].created_at.timestamp(),
        ]
        members = [json.loads(m) for m in mapping]
        assert len({m["id"] for m in members}) == 2

    @pytest.mark.asyncio
    async def test_identical_records_stay_distinct(self, config, redis_client):
        history = RedisExecutionHistory(config, redis_client=redis_client)
        record = build_records([TestStatus.FAILED])[0]

        assert await history.add_records("p1", [record, record]) == 2

    @pytest.mark.asyncio
    async def test_add_no_records(self, config, redis_client):
        history = RedisExecutionHistory(config, redis_client=redis_client)
        assert await history.add_records("p1", []) == 0
        redis_client.zadd.assert_not_called()

    @pytest.mark.asyncio
    async def test_fetch_queries_window(self, config, redis_client):
        record = build_records([TestStatus.FAILED], errors=["boom"])[0]
        member = json.dumps({"id": "abc", **record.model_dump(mode="json")})
        redis_client.zrangebyscore.return_value = [member]
        history = RedisExecutionHistory(config, redis_client=redis_client)

        records = await history.fetch_execution_records("p1", BASE_TIME)

        redis_client.zrangebyscore.assert_awaited_once_with(
            "flakewatch:records:p1", BASE_TIME.timestamp(), "+inf"
        )
        assert records == [record]

    @pytest.mark.asyncio
    async def test_fetch_wraps_corrupt_members(self, config, redis_client):
        redis_client.zrangebyscore.return_value = ['{"id": "abc", "status": "PASSED"}']
        history = RedisExecutionHistory(config, redis_client=redis_client)

        with pytest.raises(DataUnavailableError):
            await history.fetch_execution_records("p1", BASE_TIME)

    @pytest.mark.asyncio
    async def test_fetch_wraps_redis_errors(self, config, redis_client):
        redis_client.zrangebyscore.side_effect = RedisError("connection lost")
        history = RedisExecutionHistory(config, redis_client=redis_client)

        with pytest.raises(DataUnavailableError):
            await history.fetch_execution_records("p1", BASE_TIME)


class TestRedisTestConfigStore:
    """Tests for RedisTestConfigStore."""

    @pytest.mark.asyncio
    async def test_read_missing_returns_none(self, config, redis_client):
        redis_client.get.return_value = None
        store = RedisTestConfigStore(config, redis_client=redis_client)

        assert await store.read_test_config("t1") is None
        redis_client.get.assert_awaited_once_with("flakewatch:test:t1")

    @pytest.mark.asyncio
    async def test_write_updates_document(self, config, redis_client):
        existing = TestIdentity(id="t1", name="login", config={"retries": 1})
        redis_client.get.return_value = existing.model_dump_json()
        store = RedisTestConfigStore(config, redis_client=redis_client)

        updated = await store.write_test_config(
            "t1", {"retries": 1, "quarantined": True}, enabled=False
        )

        assert updated.enabled is False
        key, payload = redis_client.set.call_args.args
        assert key == "flakewatch:test:t1"
        assert json.loads(payload)["config"] == {"retries": 1, "quarantined": True}

    @pytest.mark.asyncio
    async def test_write_missing_raises(self, config, redis_client):
        redis_client.get.return_value = None
        store = RedisTestConfigStore(config, redis_client=redis_client)

        with pytest.raises(TestNotFoundError):
            await store.write_test_config("t1", {}, enabled=True)
        redis_client.set.assert_not_called()

    @pytest.mark.asyncio
    async def test_read_wraps_redis_errors(self, config, redis_client):
        redis_client.get.side_effect = RedisError("timeout")
        store = RedisTestConfigStore(config, redis_client=redis_client)

        with pytest.raises(DataUnavailableError):
            await store.read_test_config("t1")

    @pytest.mark.asyncio
    async def test_read_wraps_corrupt_document(self, config, redis_client):
        redis_client.get.return_value = "not json"
        store = RedisTestConfigStore(config, redis_client=redis_client)

        with pytest.raises(DataUnavailableError):
            await store.read_test_config("t1")

    @pytest.mark.asyncio
    async def test_close_releases_client(self, config, redis_client):
        store = RedisTestConfigStore(config, redis_client=redis_client)

        await store.close()

        redis_client.aclose.assert_awaited_once()
        assert store._redis is None
