"""Storage backends for execution history and test identities."""

from .base import ExecutionHistoryLoader, TestConfigStore, ensure_utc
from .memory import InMemoryExecutionHistory, InMemoryTestConfigStore
from .json_store import JsonFileStore
from .redis_store import RedisExecutionHistory, RedisTestConfigStore

__all__ = [
    "ExecutionHistoryLoader",
    "TestConfigStore",
    "ensure_utc",
    "InMemoryExecutionHistory",
    "InMemoryTestConfigStore",
    "JsonFileStore",
    "RedisExecutionHistory",
    "RedisTestConfigStore",
]
