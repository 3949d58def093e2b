"""
Domain exceptions for the sequence allocator.

Exception Hierarchy:
    SequenceServiceError (base)
    ├── InvalidCounterNameError
    └── StorageUnavailableError
"""


class SequenceServiceError(Exception):
    """Base exception for sequence allocation errors."""
    pass


class InvalidCounterNameError(SequenceServiceError):
    """Counter name is empty or too long."""
    pass


class StorageUnavailableError(SequenceServiceError):
    """
    The increment could not be durably performed.

    Whether the counter advanced is indeterminate. Callers abort the
    record they were creating; retrying simply consumes another slot.
    """
    pass
