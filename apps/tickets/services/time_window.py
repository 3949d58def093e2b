"""
Session Time Window
===================

Wall-clock arithmetic for play sessions at a fixed venue offset.

Every displayed time uses one named UTC offset
(``settings.VENUE_UTC_OFFSET_MINUTES``, UTC+5:45 by default) instead of
the host timezone. Instants are absolute; the offset is applied only when
turning them into time-of-day components.

A session lasts ``TICKET_BASE_DURATION_MINUTES`` plus any extra minutes.
Once a ticket is refunded the base duration no longer counts and only the
extra minutes already granted remain.

Missing input never raises: computations return ``None`` ("unknown") and
display helpers render it as :data:`PLACEHOLDER`.

Example::

    from apps.tickets.services.time_window import compute_end_time, compute_remaining

    compute_end_time(ticket.started_at, ticket.total_extra_minutes, ticket.is_refunded)
    # '11:15'
    compute_remaining(timezone.now(), ticket.started_at, 0, False)
    # -30  (expired half an hour ago)
"""

import math
import re
from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from typing import NamedTuple, Optional

from django.conf import settings

PLACEHOLDER = '—'

MINUTES_PER_DAY = 24 * 60

_TIME_JUNK = re.compile(r'[^0-9:]')


class LocalTime(NamedTuple):
    hours: int
    minutes: int
    seconds: int

    @property
    def minute_of_day(self) -> int:
        return self.hours * 60 + self.minutes

    def __str__(self):
        return f"{self.hours:02d}:{self.minutes:02d}"


def offset_minutes(value: Optional[int] = None) -> int:
    """The venue offset in minutes, or ``value`` when given."""
    if value is None:
        return settings.VENUE_UTC_OFFSET_MINUTES
    return value


def base_duration_minutes(value: Optional[int] = None) -> int:
    if value is None:
        return settings.TICKET_BASE_DURATION_MINUTES
    return value


def venue_timezone(offset: Optional[int] = None) -> dt_timezone:
    """A fixed-offset tzinfo for the venue, never DST-adjusted."""
    return dt_timezone(timedelta(minutes=offset_minutes(offset)))


def _as_utc(instant: datetime) -> datetime:
    # Naive values are treated as UTC, which is how the database stores them
    if instant.tzinfo is None:
        return instant.replace(tzinfo=dt_timezone.utc)
    return instant.astimezone(dt_timezone.utc)


def to_local_time(instant: Optional[datetime], *, offset: Optional[int] = None) -> Optional[LocalTime]:
    """
    Wall-clock time of day for ``instant`` at the venue offset.

    The offset is added to the UTC time of day and wrapped at 24h, so the
    result does not depend on ``TIME_ZONE`` or the server's locale.

    Returns:
        LocalTime(hours, minutes, seconds), or None if instant is None
    """
    if instant is None:
        return None

    utc = _as_utc(instant)
    minute_of_day = (utc.hour * 60 + utc.minute + offset_minutes(offset)) % MINUTES_PER_DAY
    return LocalTime(
        hours=minute_of_day // 60,
        minutes=minute_of_day % 60,
        seconds=utc.second,
    )


def local_date(instant: Optional[datetime], *, offset: Optional[int] = None) -> Optional[date]:
    """Calendar date of ``instant`` at the venue offset."""
    if instant is None:
        return None
    return _as_utc(instant).astimezone(venue_timezone(offset)).date()


def local_day_bounds(day: date, *, offset: Optional[int] = None) -> tuple[datetime, datetime]:
    """
    UTC instants bounding a venue calendar day as ``[start, end)``.

    Used to filter ``started_at`` / ``created_at`` columns by local day.
    """
    start = datetime.combine(day, time.min, tzinfo=venue_timezone(offset))
    return start.astimezone(dt_timezone.utc), (start + timedelta(days=1)).astimezone(dt_timezone.utc)


def minutes_to_add(extra_minutes: int = 0, is_refunded: bool = False, *, base_minutes: Optional[int] = None) -> int:
    """Session length: extra minutes only once refunded, else base plus extra."""
    if is_refunded:
        return extra_minutes
    return base_duration_minutes(base_minutes) + extra_minutes


def compute_end_time(
    start_instant: Optional[datetime],
    extra_minutes: int = 0,
    is_refunded: bool = False,
    *,
    offset: Optional[int] = None,
    base_minutes: Optional[int] = None,
) -> Optional[str]:
    """
    Local ``"HH:MM"`` at which the session ends.

    Sessions that run past midnight wrap to the early hours with no date
    change: a 23:50 start with 60 minutes ends at ``"00:50"``.

    Returns:
        "HH:MM", or None if start_instant is None
    """
    start = to_local_time(start_instant, offset=offset)
    if start is None:
        return None

    total = start.minute_of_day + minutes_to_add(extra_minutes, is_refunded, base_minutes=base_minutes)
    end_hours = (total // 60) % 24
    end_minutes = total % 60
    return f"{end_hours:02d}:{end_minutes:02d}"


def compute_remaining(
    now_instant: Optional[datetime],
    start_instant: Optional[datetime],
    extra_minutes: int = 0,
    is_refunded: bool = False,
    *,
    base_minutes: Optional[int] = None,
) -> Optional[int]:
    """
    Whole minutes left in the session, floored.

    Zero or negative means expired; the value is not clamped so callers
    can report how long ago a session ended.

    Returns:
        int minutes, or None if either instant is None
    """
    if now_instant is None or start_instant is None:
        return None

    end = _as_utc(start_instant) + timedelta(
        minutes=minutes_to_add(extra_minutes, is_refunded, base_minutes=base_minutes)
    )
    seconds_left = (end - _as_utc(now_instant)).total_seconds()
    return math.floor(seconds_left / 60)


def sanitize_time_string(value) -> str:
    """
    Strip everything except digits and ``:`` from a stored time string.

    Returns an empty string when nothing usable is left, e.g.
    ``"10:30$$"`` becomes ``"10:30"`` and ``None`` becomes ``""``.
    """
    if value is None:
        return ''
    return _TIME_JUNK.sub('', str(value))


def format_clock(value) -> Optional[str]:
    """The ``HH:MM`` part of a sanitized time string, or None if empty."""
    cleaned = sanitize_time_string(value)
    if not cleaned:
        return None
    return cleaned[:5]


def display(value) -> str:
    """Render an unknown value as the placeholder."""
    if value is None or value == '':
        return PLACEHOLDER
    return str(value)


def format_time_range(
    start_instant: Optional[datetime],
    extra_minutes: int = 0,
    is_refunded: bool = False,
    *,
    offset: Optional[int] = None,
) -> str:
    """Receipt-style ``"HH:MM - HH:MM"``; unknown parts use the placeholder."""
    start = to_local_time(start_instant, offset=offset)
    end = compute_end_time(start_instant, extra_minutes, is_refunded, offset=offset)
    start_text = format_clock(str(start)) if start else None
    return f"{display(start_text)} - {display(format_clock(end))}"


def describe_window(
    start_instant: Optional[datetime],
    extra_minutes: int = 0,
    is_refunded: bool = False,
    *,
    now: Optional[datetime] = None,
) -> dict:
    """
    Everything a scanner or receipt needs about a session window.

    ``remaining_minutes`` and ``is_expired`` are None when the start is unknown.
    """
    start = to_local_time(start_instant)
    remaining = compute_remaining(now, start_instant, extra_minutes, is_refunded) if now else None

    return {
        'start_time': str(start) if start else None,
        'end_time': compute_end_time(start_instant, extra_minutes, is_refunded),
        'duration_minutes': minutes_to_add(extra_minutes, is_refunded),
        'remaining_minutes': remaining,
        'is_expired': None if remaining is None else remaining <= 0,
        'time_range': format_time_range(start_instant, extra_minutes, is_refunded),
    }
