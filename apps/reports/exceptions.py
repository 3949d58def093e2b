"""Domain-specific exceptions for reports."""


class ReportsServiceError(Exception):
    """Base exception for reports."""
    pass


class InvalidDateRangeError(ReportsServiceError):
    """Raised when a report range is reversed or too long."""
    pass
