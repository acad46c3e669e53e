"""Tests for FlakinessService facade."""

import pytest

from conftest import build_records
from flakewatch.config.flakiness_config import FlakinessConfig
from flakewatch.detection.analyzer import ProjectAnalyzer
from flakewatch.detection.base import TestNotFoundError
from flakewatch.models.flakiness_models import TestIdentity, TestStatus
from flakewatch.services.flakiness_service import FlakinessService, create_storage
from flakewatch.storage.json_store import JsonFileStore
from flakewatch.storage.memory import InMemoryExecutionHistory, InMemoryTestConfigStore
from flakewatch.storage.redis_store import RedisExecutionHistory, RedisTestConfigStore

P = TestStatus.PASSED
F = TestStatus.FAILED


@pytest.fixture
def history():
    """History with two flaky tests and one stable test."""
    records = (
        build_records([P] * 10, test_id="stable")
        + build_records([P, F] * 4, test_id="racy")
        + build_records([P, F, P, F, F], test_id="network", errors=[
            None, "ECONNREFUSED", None, "ECONNREFUSED", "ECONNREFUSED",
        ])
    )
    return InMemoryExecutionHistory({"proj-1": records})


@pytest.fixture
def store():
    """Config store knowing the racy and stable tests."""
    return InMemoryTestConfigStore(
        [TestIdentity(id="racy", name="racy name"), TestIdentity(id="stable", name="s")]
    )


@pytest.fixture
def service(history, store, fixed_clock):
    """Create service over in-memory storage with a fixed clock."""
    return FlakinessService(
        config=FlakinessConfig(
            storage_backend="memory",
            min_runs=5,
            time_range_days=30,
            flakiness_threshold=10,
        ),
        loader=history,
        store=store,
        analyzer=ProjectAnalyzer(history, clock=fixed_clock),
    )


class TestCreateStorage:
    """Tests for storage backend selection."""

    def test_memory_backend(self):
        loader, store = create_storage(FlakinessConfig(storage_backend="memory"))
        assert isinstance(loader, InMemoryExecutionHistory)
        assert isinstance(store, InMemoryTestConfigStore)

    def test_redis_backend(self):
        loader, store = create_storage(FlakinessConfig(storage_backend="redis"))
        assert isinstance(loader, RedisExecutionHistory)
        assert isinstance(store, RedisTestConfigStore)

    def test_file_backend_shares_one_store(self, tmp_path):
        config = FlakinessConfig(
            storage_backend="FILE", store_path=str(tmp_path / "s.json")
        )
        loader, store = create_storage(config)
        assert isinstance(loader, JsonFileStore)
        assert loader is store

    def test_file_backend_requires_path(self):
        with pytest.raises(ValueError):
            create_storage(FlakinessConfig(storage_backend="file", store_path=None))

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown storage backend"):
            create_storage(FlakinessConfig(storage_backend="postgres"))


class TestFlakinessService:
    """Tests for FlakinessService."""

    @pytest.mark.asyncio
    async def test_analyze_project(self, service):
        report = await service.analyze_project("proj-1")

        assert [t.test_id for t in report.flaky_tests] == ["racy", "network"]
        assert report.total_tests == 3

    @pytest.mark.asyncio
    async def test_analyze_uses_configured_defaults(self, history, store, fixed_clock):
        service = FlakinessService(
            config=FlakinessConfig(storage_backend="memory", flakiness_threshold=60),
            loader=history,
            store=store,
            analyzer=ProjectAnalyzer(history, clock=fixed_clock),
        )

        report = await service.analyze_project("proj-1")

        assert [t.test_id for t in report.flaky_tests] == ["racy"]

    @pytest.mark.asyncio
    async def test_analyze_overrides(self, service):
        report = await service.analyze_project("proj-1", min_runs=9)

        assert report.total_tests == 1
        assert report.flaky_tests == []

    @pytest.mark.asyncio
    async def test_analysis_does_not_quarantine(self, service):
        await service.analyze_project("proj-1")

        racy = await service.get_test("racy")
        assert racy.enabled is True
        assert not racy.is_quarantined

    @pytest.mark.asyncio
    async def test_quarantine_round_trip(self, service):
        quarantined = await service.quarantine_test("racy")
        assert quarantined.is_quarantined

        released = await service.unquarantine_test("racy")
        assert released.enabled is True
        assert released.config == {}

    @pytest.mark.asyncio
    async def test_quarantine_unknown_test(self, service):
        with pytest.raises(TestNotFoundError):
            await service.quarantine_test("network")

    @pytest.mark.asyncio
    async def test_get_missing_test(self, service):
        assert await service.get_test("missing") is None

    @pytest.mark.asyncio
    async def test_quarantine_candidates(self, service):
        report = await service.analyze_project("proj-1")
        await service.quarantine_test("racy")

        candidates = await service.quarantine_candidates(report)

        assert candidates == ["network"]
