"""flakewatch - flaky test detection, categorization and quarantine."""

from .models import (
    TestStatus,
    FlakinessCategory,
    HealthStatus,
    ExecutionRecord,
    TestIdentity,
    FlakyTestResult,
    ProjectFlakinessReport,
    AnalysisOptions,
)
from .detection import (
    FlakewatchError,
    DataUnavailableError,
    TestNotFoundError,
    ProjectAnalyzer,
    QuarantineManager,
)
from .services import FlakinessService

__version__ = "0.1.0"

__all__ = [
    "TestStatus",
    "FlakinessCategory",
    "HealthStatus",
    "ExecutionRecord",
    "TestIdentity",
    "FlakyTestResult",
    "ProjectFlakinessReport",
    "AnalysisOptions",
    "FlakewatchError",
    "DataUnavailableError",
    "TestNotFoundError",
    "ProjectAnalyzer",
    "QuarantineManager",
    "FlakinessService",
]
