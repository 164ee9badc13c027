"""
Custom exception types for campaign-uplift.

Every exception carries a machine-readable code so callers can
handle specific failure modes programmatically.
"""


class UpliftError(Exception):
    """Base exception for all campaign-uplift errors."""

    def __init__(self, message: str, code: str = "UPLIFT_ERROR"):
        self.code = code
        super().__init__(message)


class ConfigError(UpliftError):
    """Raised when the attribution config is missing or invalid. Fatal for a run."""

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        super().__init__(message, code="CONFIG_ERROR")


class DataValidationError(UpliftError):
    """Raised when an input row or frame fails schema validation."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message, code="DATA_VALIDATION_ERROR")


class InsufficientBaselineData(UpliftError):
    """
    Raised when a baseline window has fewer days with data than required.

    Non-fatal: the activity still gets a report, graded LOW.
    """

    def __init__(self, activity_id: str, days_with_data: int, min_days: int):
        self.activity_id = activity_id
        self.days_with_data = days_with_data
        self.min_days = min_days
        msg = (
            f"only {days_with_data} baseline day(s) with data, "
            f"at least {min_days} required"
        )
        super().__init__(msg, code="INSUFFICIENT_BASELINE_DATA")


class MalformedMetadata(UpliftError):
    """Raised when activity metadata is not a string-keyed numeric mapping."""

    def __init__(self, message: str, activity_id: str = ""):
        self.activity_id = activity_id
        super().__init__(message, code="MALFORMED_METADATA")


class PersistenceError(UpliftError):
    """Raised when the uplift table cannot be read or replaced."""

    def __init__(self, message: str, table: str = ""):
        self.table = table
        super().__init__(message, code="PERSISTENCE_ERROR")
