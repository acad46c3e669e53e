"""Flaky test detection configuration with environment variable loading."""

import os
from typing import Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from ..models.flakiness_models import AnalysisOptions

# Load environment variables from .env file
load_dotenv()


class FlakinessConfig(BaseModel):
    """Configuration for flaky test analysis and quarantine storage."""

    # Analysis defaults
    min_runs: int = Field(
        default_factory=lambda: int(os.getenv("FLAKEWATCH_MIN_RUNS", "5")),
        description="Minimum executions before a test is scored",
    )
    time_range_days: int = Field(
        default_factory=lambda: int(os.getenv("FLAKEWATCH_TIME_RANGE_DAYS", "30")),
        description="Days of history to analyze",
    )
    flakiness_threshold: float = Field(
        default_factory=lambda: float(
            os.getenv("FLAKEWATCH_FLAKINESS_THRESHOLD", "10")
        ),
        description="Minimum score for a test to be reported as flaky",
    )

    # Storage Configuration
    storage_backend: str = Field(
        default_factory=lambda: os.getenv("FLAKEWATCH_STORAGE", "memory"),
        description="memory|redis|file",
    )
    store_path: Optional[str] = Field(
        default_factory=lambda: os.getenv("FLAKEWATCH_STORE_PATH"),
        description="JSON store path for the file backend",
    )

    # Redis Configuration
    redis_url: str = Field(
        default_factory=lambda: os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        description="Redis connection URL",
    )
    redis_prefix: str = Field(
        default_factory=lambda: os.getenv("FLAKEWATCH_REDIS_PREFIX", "flakewatch"),
        description="Key prefix for all flakewatch Redis keys",
    )
    connection_pool_size: int = Field(
        default_factory=lambda: int(os.getenv("CONNECTION_POOL_SIZE", "10")),
        description="Connection pool size for Redis",
    )

    def default_options(self) -> AnalysisOptions:
        """Build analysis options from the configured defaults."""
        return AnalysisOptions(
            min_runs=self.min_runs,
            time_range_days=self.time_range_days,
            flakiness_threshold=self.flakiness_threshold,
        )
