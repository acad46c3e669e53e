"""Shared constants and exceptions for flaky test detection."""

# Criteria labels. Downstream consumers match on these strings.
HIGH_ALTERNATION = "High pass/fail alternation"
INCONSISTENT_PASS_RATE = "Inconsistent pass rate"
HIGH_DURATION_VARIANCE = "High duration variance"
INCONSISTENT_ERRORS = "Inconsistent error messages"

# Scores strictly above this value are advised for quarantine.
QUARANTINE_SCORE_THRESHOLD = 50


class FlakewatchError(Exception):
    """Base class for flakewatch errors."""

    pass


class DataUnavailableError(FlakewatchError):
    """Raised when execution history or test config cannot be read or written."""

    pass


class TestNotFoundError(FlakewatchError):
    """Raised when a referenced test identity does not exist."""

    __test__ = False

    def __init__(self, test_id: str):
        super().__init__(f"Test not found: {test_id}")
        self.test_id = test_id
