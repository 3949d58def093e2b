"""
Refund service.

A full refund covers every remaining player. Partial refunds cover named
players and turn into a full refund once nobody is left.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Iterable
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.tickets.models import Ticket, RefundMethod

from .exceptions import (
    TicketNotFoundError,
    AlreadyRefundedError,
    InvalidRefundError,
)
from .ticket_management import ensure_can_modify, parse_player_names

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def _locked_ticket(ticket_id: UUID, user) -> Ticket:
    try:
        return Ticket.objects.select_for_update().get(id=ticket_id, branch_id=user.branch_id)
    except Ticket.DoesNotExist:
        raise TicketNotFoundError(f"Ticket {ticket_id} not found")


def _validate_amount(amount: Decimal, ticket: Ticket) -> Decimal:
    amount = Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
    if amount < 0:
        raise InvalidRefundError("Refund amount cannot be negative")
    if ticket.refund_amount + amount > ticket.fee:
        raise InvalidRefundError(
            f"Refund total {ticket.refund_amount + amount} exceeds ticket fee {ticket.fee}"
        )
    return amount


@transaction.atomic
def refund_ticket(
    *,
    ticket_id: UUID,
    user,
    reason: str = '',
    refund_amount: Optional[Decimal] = None,
    refunded_players: Optional[Iterable[str]] = None,
    refund_name: str = '',
    refund_method: str = RefundMethod.CASH,
    payment_reference: str = '',
) -> Ticket:
    """
    Fully refund a ticket.

    The amount defaults to the ticket fee. Naming players only records who
    was refunded; without names every player counts as refunded.

    Raises:
        AlreadyRefundedError: If the ticket was already fully refunded
        InvalidRefundError: If the amount exceeds the fee
    """
    ticket = _locked_ticket(ticket_id, user)
    ensure_can_modify(ticket, user)

    if ticket.is_refunded:
        raise AlreadyRefundedError(f"Ticket {ticket.ticket_no} already refunded")

    if refund_amount is None:
        amount = ticket.fee - ticket.refund_amount
    else:
        amount = _validate_amount(refund_amount, ticket)

    names = parse_player_names(refunded_players)

    ticket.is_refunded = True
    ticket.refund_reason = reason
    ticket.refund_amount = ticket.refund_amount + amount
    ticket.refund_name = refund_name or ticket.name
    ticket.refund_method = refund_method or RefundMethod.CASH
    ticket.payment_reference = payment_reference
    ticket.refunded_by = user
    ticket.refunded_at = timezone.now()

    if names:
        ticket.refunded_players = ticket.refunded_players + names
        ticket.refunded_players_count = len(ticket.refunded_players)
        ticket.waiting_players = max(0, ticket.waiting_players - len(names))
    else:
        ticket.refunded_players_count = ticket.total_players
        ticket.waiting_players = 0

    ticket.save()

    logger.info("Ticket %s refunded %s by %s", ticket.ticket_no, amount, user.email)
    return ticket


@transaction.atomic
def partial_refund(
    *,
    ticket_id: UUID,
    user,
    refunded_players: Iterable[str],
    reason: str = '',
    refund_amount: Optional[Decimal] = None,
) -> Ticket:
    """
    Refund some players on a ticket.

    The amount defaults to ``fee / total_players`` per refunded player.

    Raises:
        AlreadyRefundedError: If the ticket was already fully refunded
        InvalidRefundError: If no players are given, a player was already
            refunded, or more players are refunded than the ticket holds
    """
    ticket = _locked_ticket(ticket_id, user)
    ensure_can_modify(ticket, user)

    if ticket.is_refunded:
        raise AlreadyRefundedError(f"Ticket {ticket.ticket_no} already refunded")

    names = parse_player_names(refunded_players)
    if not names:
        raise InvalidRefundError("At least one player must be refunded")

    duplicates = set(names) & set(ticket.refunded_players)
    if duplicates:
        raise InvalidRefundError(f"Already refunded: {', '.join(sorted(duplicates))}")

    refunded_count = len(ticket.refunded_players) + len(names)
    if refunded_count > ticket.total_players:
        raise InvalidRefundError(
            f"Cannot refund {refunded_count} of {ticket.total_players} player(s)"
        )

    if refund_amount is None:
        per_player = ticket.fee / ticket.total_players
        refund_amount = per_player * len(names)
        if refunded_count == ticket.total_players:
            # Last players absorb the rounding so the whole fee comes back
            refund_amount = ticket.fee - ticket.refund_amount
    amount = _validate_amount(refund_amount, ticket)

    ticket.refunded_players = ticket.refunded_players + names
    ticket.refund_amount = ticket.refund_amount + amount
    ticket.refunded_players_count = refunded_count
    ticket.waiting_players = max(0, ticket.waiting_players - len(names))
    ticket.refunded_by = user
    ticket.refunded_at = timezone.now()

    if refunded_count == ticket.total_players:
        ticket.is_refunded = True
        ticket.refund_reason = reason

    ticket.save()

    logger.info(
        "Partial refund of %s for %s player(s) on ticket %s by %s",
        amount, len(names), ticket.ticket_no, user.email,
    )
    return ticket
