"""
Sequence allocation service.

Issues strictly increasing integers per counter name. The increment is a
single ``UPDATE ... SET value = value + 1`` executed by the database, so
callers in different threads or processes never observe the same value.
"""

import logging

from django.db import transaction, DatabaseError, IntegrityError
from django.db.models import F
from django.utils import timezone

from apps.sequences.models import Counter

from .exceptions import InvalidCounterNameError, StorageUnavailableError

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = Counter._meta.get_field('name').max_length

# Counter names used by the record-creating services
TICKET_NO = 'ticket_no'
SALE_NO = 'sale_no'
EXPENSE_NO = 'expense_no'

# name -> (prefix, zero-pad width)
NUMBER_FORMATS = {
    TICKET_NO: ('', 6),
    SALE_NO: ('', 3),
    EXPENSE_NO: ('EXP', 5),
}


def _validate_name(name: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidCounterNameError("Counter name must be a non-empty string")
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidCounterNameError(
            f"Counter name must be at most {MAX_NAME_LENGTH} characters"
        )
    return name


def _increment(name: str) -> int:
    return Counter.objects.filter(name=name).update(
        value=F('value') + 1,
        updated_at=timezone.now(),
    )


def allocate_next(name: str) -> int:
    """
    Atomically advance the named counter and return its new value.

    The first allocation for a name creates the counter and returns 1.
    When called inside an open transaction the increment commits or rolls
    back with it, so a rolled-back record does not consume a number.

    Args:
        name: Counter name, e.g. ``'ticket_no'``

    Returns:
        The post-increment value

    Raises:
        InvalidCounterNameError: If name is empty or too long
        StorageUnavailableError: If the database rejected or lost the write
    """
    _validate_name(name)

    try:
        with transaction.atomic():
            if not _increment(name):
                try:
                    with transaction.atomic():
                        Counter.objects.create(name=name, value=1)
                except IntegrityError:
                    # Another caller created the row first; its lock is
                    # released so the increment now applies to that row.
                    _increment(name)

            # The UPDATE/INSERT holds the row lock until commit, so this
            # read sees our own increment and nobody else's.
            return Counter.objects.filter(name=name).values_list('value', flat=True).get()

    except DatabaseError as e:
        logger.exception("Sequence allocation failed for counter %r", name)
        raise StorageUnavailableError(
            f"Could not allocate next value for '{name}'"
        ) from e


def format_number(value: int, *, prefix: str = '', width: int = 0) -> str:
    """Zero-pad ``value`` to ``width`` digits after ``prefix``."""
    return f"{prefix}{value:0{width}d}" if width else f"{prefix}{value}"


def next_number(name: str) -> str:
    """Allocate and format the next display number for ``name``."""
    prefix, width = NUMBER_FORMATS.get(name, ('', 0))
    return format_number(allocate_next(name), prefix=prefix, width=width)


def current_value(name: str) -> int:
    """Read a counter without advancing it. Unknown names read as 0."""
    _validate_name(name)
    value = Counter.objects.filter(name=name).values_list('value', flat=True).first()
    return value or 0
