"""
Sequences app services layer.

``allocate_next`` is the only code path that mutates a Counter.
"""

from .exceptions import (
    SequenceServiceError,
    InvalidCounterNameError,
    StorageUnavailableError,
)

from .allocation import (
    allocate_next,
    next_number,
    format_number,
    current_value,
    TICKET_NO,
    SALE_NO,
    EXPENSE_NO,
    NUMBER_FORMATS,
)


__all__ = [
    # Exceptions
    'SequenceServiceError',
    'InvalidCounterNameError',
    'StorageUnavailableError',

    # Allocation
    'allocate_next',
    'next_number',
    'format_number',
    'current_value',

    # Counter names
    'TICKET_NO',
    'SALE_NO',
    'EXPENSE_NO',
    'NUMBER_FORMATS',
]
