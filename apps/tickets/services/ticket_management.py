"""
Ticket management service.

Handles ticket issue, lookup and updates. Ticket numbers come from the
sequence allocator inside the same transaction as the ticket row, so a
failed allocation leaves no ticket behind and a failed insert does not
consume a number.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional, Iterable, Union
from uuid import UUID

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from apps.accounts.services import require_branch
from apps.branches.services import branch_currency
from apps.sequences.services import next_number, TICKET_NO
from apps.tickets.models import Ticket, TicketType

from .exceptions import (
    TicketNotFoundError,
    InvalidTicketError,
    TicketPermissionError,
)

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')

PRICING_FIELDS = ('per_person_fee', 'number_of_people', 'discount')

UPDATABLE_FIELDS = (
    'name',
    'contact_number',
    'player_names',
    'ticket_type',
    'remarks',
    'group_name',
    'group_number',
    'group_price',
    'status',
) + PRICING_FIELDS


def parse_player_names(value: Union[str, Iterable[str], None]) -> list:
    """Accept a comma-separated string or a list; drop blanks."""
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(',')
    return [name.strip() for name in value if name and name.strip()]


def calculate_fee(*, per_person_fee: Decimal, number_of_people: int, discount: Decimal = ZERO) -> Decimal:
    """``max(0, per_person_fee * people - discount)``, rounded to cents."""
    subtotal = Decimal(per_person_fee) * number_of_people
    return max(ZERO, subtotal - Decimal(discount)).quantize(Decimal('0.01'))


def _validate_pricing(per_person_fee, number_of_people, discount) -> None:
    if per_person_fee is None or Decimal(per_person_fee) <= 0:
        raise InvalidTicketError("Per person fee must be greater than zero")
    if number_of_people < 1:
        raise InvalidTicketError("Number of people must be at least 1")
    if Decimal(discount) < 0:
        raise InvalidTicketError("Discount cannot be negative")


def ensure_can_modify(ticket: Ticket, user) -> None:
    """Admins may change any ticket in their branch; staff only their own."""
    if user.is_venue_admin:
        return
    if ticket.staff_id != user.id:
        raise TicketPermissionError("Only admins or the issuing staff member can modify this ticket")


def create_ticket(
    *,
    staff,
    name: str,
    per_person_fee: Decimal,
    ticket_type: str = TicketType.ADULT,
    contact_number: str = '',
    player_names: Union[str, Iterable[str], None] = None,
    number_of_people: Optional[int] = None,
    discount: Decimal = ZERO,
    remarks: str = '',
    group_name: str = '',
    group_number: str = '',
    group_price: Optional[Decimal] = None,
    started_at: Optional[datetime] = None,
) -> Ticket:
    """
    Issue a ticket at the staff member's branch.

    People default to the number of player names, or 1 when none are
    given. ``fee = max(0, per_person_fee * people - discount)``.

    Raises:
        NoBranchAssignedError: If staff has no branch
        InvalidTicketError: If fee, discount or people are invalid
        StorageUnavailableError: If no ticket number could be allocated
    """
    branch = require_branch(staff)
    names = parse_player_names(player_names)
    people = number_of_people or len(names) or 1
    discount = Decimal(discount or 0)

    _validate_pricing(per_person_fee, people, discount)
    fee = calculate_fee(per_person_fee=per_person_fee, number_of_people=people, discount=discount)

    with transaction.atomic():
        ticket = Ticket.objects.create(
            ticket_no=next_number(TICKET_NO),
            name=name.strip(),
            contact_number=contact_number.strip(),
            player_names=names,
            number_of_people=people,
            ticket_type=ticket_type,
            per_person_fee=per_person_fee,
            discount=discount,
            fee=fee,
            currency=branch_currency(branch),
            group_name=group_name,
            group_number=group_number,
            group_price=group_price,
            branch=branch,
            staff=staff,
            remarks=remarks,
            started_at=started_at or timezone.now(),
            total_players=people,
            waiting_players=people,
        )

    logger.info(
        "Ticket %s issued at %s by %s: %s x %s = %s",
        ticket.ticket_no, branch.branch_name, staff.email, people, per_person_fee, fee,
    )
    return ticket


def get_ticket(*, ticket_id: UUID, branch) -> Ticket:
    try:
        return Ticket.objects.select_related('branch', 'staff').get(id=ticket_id, branch=branch)
    except Ticket.DoesNotExist:
        raise TicketNotFoundError(f"Ticket {ticket_id} not found")


def lookup_ticket(*, identifier: str, branch) -> Ticket:
    """
    Find a ticket by ticket number, then ID, then contact number.

    A contact number may match several tickets; the most recent wins.

    Raises:
        TicketNotFoundError: If nothing matches in this branch
    """
    identifier = (identifier or '').strip()
    queryset = Ticket.objects.select_related('branch', 'staff').filter(branch=branch)

    ticket = queryset.filter(ticket_no=identifier).first()

    if ticket is None:
        try:
            ticket = queryset.filter(id=UUID(identifier)).first()
        except ValueError:
            ticket = None

    if ticket is None and identifier:
        ticket = queryset.filter(contact_number=identifier).order_by('-created_at').first()

    if ticket is None:
        raise TicketNotFoundError(f"Ticket '{identifier}' not found")

    return ticket


@transaction.atomic
def update_ticket(*, ticket_id: UUID, user, **fields) -> Ticket:
    """
    Update ticket details.

    Changing any pricing field recalculates the fee; amounts paid for
    extra time stay on top of the recalculated base fee.

    Raises:
        TicketNotFoundError: If ticket doesn't exist in user's branch
        TicketPermissionError: If user is neither admin nor issuing staff
        InvalidTicketError: If the new pricing is invalid
    """
    try:
        ticket = Ticket.objects.select_for_update().get(id=ticket_id, branch_id=user.branch_id)
    except Ticket.DoesNotExist:
        raise TicketNotFoundError(f"Ticket {ticket_id} not found")

    ensure_can_modify(ticket, user)

    for field in UPDATABLE_FIELDS:
        if field not in fields or fields[field] is None:
            continue
        value = fields[field]
        if field == 'player_names':
            value = parse_player_names(value)
        setattr(ticket, field, value)

    if any(fields.get(field) is not None for field in PRICING_FIELDS):
        _validate_pricing(ticket.per_person_fee, ticket.number_of_people, ticket.discount)
        extra_paid = ticket.extra_time_entries.aggregate(total=Sum('amount'))['total'] or ZERO
        ticket.fee = calculate_fee(
            per_person_fee=ticket.per_person_fee,
            number_of_people=ticket.number_of_people,
            discount=ticket.discount,
        ) + extra_paid

    if fields.get('number_of_people') is not None:
        ticket.total_players = ticket.number_of_people
        ticket.waiting_players = max(
            0, ticket.total_players - ticket.played_players - ticket.refunded_players_count
        )

    ticket.save()
    return ticket


@transaction.atomic
def delete_ticket(*, ticket_id: UUID, branch) -> None:
    deleted, _ = Ticket.objects.filter(id=ticket_id, branch=branch).delete()
    if not deleted:
        raise TicketNotFoundError(f"Ticket {ticket_id} not found")
    logger.info("Ticket %s deleted", ticket_id)


@transaction.atomic
def update_player_status(
    *,
    ticket_id: UUID,
    user,
    played_players: Optional[int] = None,
    waiting_players: Optional[int] = None,
    status: Optional[str] = None,
) -> Ticket:
    """
    Record how many players have played or are still waiting.

    Setting ``played_players`` recomputes waiting players from the total.

    Raises:
        InvalidTicketError: If the counts exceed the ticket's players
    """
    try:
        ticket = Ticket.objects.select_for_update().get(id=ticket_id, branch_id=user.branch_id)
    except Ticket.DoesNotExist:
        raise TicketNotFoundError(f"Ticket {ticket_id} not found")

    available = ticket.total_players - ticket.refunded_players_count

    if played_players is not None:
        if played_players > available:
            raise InvalidTicketError(f"Only {available} player(s) can play on this ticket")
        ticket.played_players = played_players
        ticket.waiting_players = available - played_players

    if waiting_players is not None:
        if waiting_players + ticket.played_players > available:
            raise InvalidTicketError(f"Only {available} player(s) can play on this ticket")
        ticket.waiting_players = waiting_players

    if status:
        ticket.status = status

    ticket.save()
    return ticket


def mark_printed(*, ticket_id: UUID, branch) -> Ticket:
    updated = Ticket.objects.filter(id=ticket_id, branch=branch).update(
        printed=True,
        updated_at=timezone.now(),
    )
    if not updated:
        raise TicketNotFoundError(f"Ticket {ticket_id} not found")
    return Ticket.objects.get(id=ticket_id)

