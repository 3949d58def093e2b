"""
Extra time service.

Top-ups are applied with ``F()`` expressions so concurrent additions to
the same ticket are never lost, and the ticket row is locked while the
entry is written.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from apps.tickets.models import Ticket, ExtraTimeEntry

from .exceptions import TicketNotFoundError, InvalidExtraMinutesError
from .time_window import local_day_bounds

logger = logging.getLogger(__name__)


@transaction.atomic
def add_extra_time(
    *,
    ticket_id: UUID,
    user,
    minutes: int,
    amount: Decimal = Decimal('0.00'),
    label: str = '',
    notes: str = '',
) -> Ticket:
    """
    Extend a session by ``minutes`` and charge ``amount`` for it.

    Raises:
        InvalidExtraMinutesError: If minutes is not positive or amount is negative
        TicketNotFoundError: If ticket doesn't exist in user's branch
    """
    if minutes is None or int(minutes) <= 0:
        raise InvalidExtraMinutesError("Please provide minutes greater than zero")
    amount = Decimal(amount or 0)
    if amount < 0:
        raise InvalidExtraMinutesError("Extra time amount cannot be negative")

    try:
        ticket = Ticket.objects.select_for_update().get(id=ticket_id, branch_id=user.branch_id)
    except Ticket.DoesNotExist:
        raise TicketNotFoundError(f"Ticket {ticket_id} not found")

    ExtraTimeEntry.objects.create(
        ticket=ticket,
        minutes=minutes,
        amount=amount,
        label=label or f"{minutes} minutes",
        notes=notes,
        added_by=user,
    )

    Ticket.objects.filter(id=ticket.id).update(
        total_extra_minutes=F('total_extra_minutes') + minutes,
        fee=F('fee') + amount,
        updated_at=timezone.now(),
    )
    ticket.refresh_from_db()

    logger.info(
        "Added %s extra minutes (%s) to ticket %s by %s",
        minutes, amount, ticket.ticket_no, user.email,
    )
    return ticket


def get_extra_time_entries(*, ticket_id: UUID, branch) -> tuple[Ticket, list]:
    try:
        ticket = Ticket.objects.get(id=ticket_id, branch=branch)
    except Ticket.DoesNotExist:
        raise TicketNotFoundError(f"Ticket {ticket_id} not found")

    entries = list(ticket.extra_time_entries.select_related('added_by'))
    return ticket, entries


def extra_time_report(
    *,
    branch,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> list:
    """Every extra-time entry in the branch, newest first, optionally by local day range."""
    queryset = ExtraTimeEntry.objects.select_related(
        'ticket', 'added_by'
    ).filter(ticket__branch=branch)

    if start_date:
        queryset = queryset.filter(added_at__gte=local_day_bounds(start_date)[0])
    if end_date:
        queryset = queryset.filter(added_at__lt=local_day_bounds(end_date)[1])

    return [
        {
            'ticket_id': entry.ticket_id,
            'ticket_no': entry.ticket.ticket_no,
            'name': entry.ticket.name,
            'ticket_type': entry.ticket.ticket_type,
            'minutes': entry.minutes,
            'amount': entry.amount,
            'label': entry.label,
            'notes': entry.notes,
            'added_at': entry.added_at,
            'added_by': entry.added_by.get_display_name() if entry.added_by else None,
            'total_extra_minutes': entry.ticket.total_extra_minutes,
            'is_refunded': entry.ticket.is_refunded,
        }
        for entry in queryset.order_by('-added_at')
    ]
