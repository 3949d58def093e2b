"""
Expired ticket sweep.

A ticket whose session window has run out (remaining minutes <= 0) is
moved from booked/playing to deactivated so it can no longer be scanned.

Candidates are picked without locks, then locked and checked again before
the update, so extra time added in between keeps the ticket active.
"""

import logging
from datetime import datetime
from typing import Optional

from django.db import transaction
from django.utils import timezone

from apps.tickets.models import Ticket, TicketStatus, ACTIVE_STATUSES

from .time_window import compute_remaining

logger = logging.getLogger(__name__)

WINDOW_FIELDS = ('id', 'started_at', 'total_extra_minutes', 'is_refunded')


def _expired_ids(rows, now: datetime) -> list:
    return [
        ticket_id
        for ticket_id, started_at, extra, refunded in rows
        if compute_remaining(now, started_at, extra, refunded) <= 0
    ]


def find_expired_ticket_ids(*, now: datetime, branch=None) -> list:
    queryset = Ticket.objects.filter(status__in=ACTIVE_STATUSES)
    if branch is not None:
        queryset = queryset.filter(branch=branch)

    return _expired_ids(queryset.values_list(*WINDOW_FIELDS).iterator(), now)


def deactivate_expired_tickets(*, now: Optional[datetime] = None, branch=None) -> int:
    """
    Deactivate every active ticket whose window has ended.

    Returns:
        Number of tickets deactivated
    """
    now = now or timezone.now()
    candidate_ids = find_expired_ticket_ids(now=now, branch=branch)
    if not candidate_ids:
        return 0

    with transaction.atomic():
        # Waits behind add_extra_time's row lock, then reads its committed minutes
        locked = (
            Ticket.objects
            .select_for_update()
            .filter(id__in=candidate_ids, status__in=ACTIVE_STATUSES)
            .order_by('id')
            .values_list(*WINDOW_FIELDS)
        )
        expired_ids = _expired_ids(list(locked), now)

        count = 0
        if expired_ids:
            count = Ticket.objects.filter(id__in=expired_ids).update(
                status=TicketStatus.DEACTIVATED,
                updated_at=now,
            )

    skipped = len(candidate_ids) - count
    if skipped:
        logger.info("Skipped %s ticket(s) extended or closed during the sweep", skipped)
    logger.info("Deactivated %s expired ticket(s)", count)
    return count
