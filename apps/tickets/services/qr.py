"""
Ticket QR codes and entry scanning.

The QR payload is JSON describing the ticket; scanners may also submit a
bare ticket number typed by hand.
"""

import base64
import json
import logging
import re
from datetime import date, datetime
from io import BytesIO
from typing import Optional

import qrcode
from django.db import transaction
from django.utils import timezone

from apps.accounts.services import require_branch
from apps.tickets.models import Ticket, TicketScan, TicketStatus, ACTIVE_STATUSES

from .exceptions import (
    InvalidQRCodeError,
    QRGenerationError,
    TicketInactiveError,
    TicketNotFoundError,
)
from .ticket_management import lookup_ticket
from .time_window import (
    describe_window,
    format_clock,
    local_date,
    local_day_bounds,
    to_local_time,
)

logger = logging.getLogger(__name__)

SCAN_HISTORY_LIMIT = 50

_TICKET_NO_PATTERN = re.compile(r'^[A-Za-z0-9-]{1,20}$')


def build_qr_payload(ticket: Ticket) -> dict:
    """Data encoded in a ticket's QR code."""
    return {
        'ticket_no': ticket.ticket_no,
        'name': ticket.name,
        'ticket_type': ticket.ticket_type,
        'fee': str(ticket.fee),
        'date': local_date(ticket.started_at).isoformat(),
        'time': str(to_local_time(ticket.started_at)),
        'branch': ticket.branch.branch_name,
        'staff': ticket.staff.get_display_name(),
    }


def generate_qr_data_url(payload: dict) -> str:
    """
    Render ``payload`` as a PNG QR code and return it as a data URL.

    Raises:
        QRGenerationError: If the image could not be rendered
    """
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(json.dumps(payload, separators=(',', ':')))

    try:
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")
        buffer = BytesIO()
        img.save(buffer, format='PNG')
    except (ValueError, OSError) as e:
        logger.exception("QR generation failed for %s", payload.get('ticket_no'))
        raise QRGenerationError("Failed to generate QR code") from e

    encoded = base64.b64encode(buffer.getvalue()).decode('ascii')
    return f"data:image/png;base64,{encoded}"


def parse_qr_payload(raw) -> dict:
    """
    Turn scanned QR content into a payload dict with a ``ticket_no``.

    Accepts the JSON payload (as a string or already decoded) or a bare
    ticket number.

    Raises:
        InvalidQRCodeError: If no ticket number can be extracted
    """
    if isinstance(raw, dict):
        payload = raw
    elif isinstance(raw, str) and raw.strip():
        text = raw.strip()
        try:
            payload = json.loads(text)
        except ValueError:
            if not _TICKET_NO_PATTERN.match(text):
                raise InvalidQRCodeError("Invalid QR code")
            return {'ticket_no': text}
        # A purely numeric ticket number is also valid JSON
        if isinstance(payload, int) and not isinstance(payload, bool):
            return {'ticket_no': text}
    else:
        raise InvalidQRCodeError("QR data is required")

    if not isinstance(payload, dict):
        raise InvalidQRCodeError("Invalid QR code")

    ticket_no = str(payload.get('ticket_no') or payload.get('ticketNo') or '').strip()
    if not ticket_no:
        raise InvalidQRCodeError("Invalid QR code")

    payload = dict(payload, ticket_no=ticket_no)
    if 'time' in payload:
        payload['time'] = format_clock(payload['time'])
    return payload


def scan_ticket(*, qr_data, user, now: Optional[datetime] = None) -> dict:
    """
    Validate a ticket at the entrance.

    Records the scan, moves a booked ticket to playing, and reports the
    minutes left in the session (negative once it has run out).

    Raises:
        InvalidQRCodeError: If the QR content is not a ticket
        TicketNotFoundError: If the ticket is not in the user's branch
        TicketInactiveError: If the ticket is cancelled, completed or deactivated
    """
    branch = require_branch(user)
    payload = parse_qr_payload(qr_data)
    now = now or timezone.now()

    with transaction.atomic():
        found = lookup_ticket(identifier=payload['ticket_no'], branch=branch)
        ticket = Ticket.objects.select_for_update().select_related(
            'branch', 'staff'
        ).get(id=found.id)

        if ticket.status not in ACTIVE_STATUSES:
            raise TicketInactiveError(f"Ticket is {ticket.status}")

        window = describe_window(
            ticket.started_at,
            ticket.total_extra_minutes,
            ticket.is_refunded,
            now=now,
        )
        remaining = window['remaining_minutes']

        TicketScan.objects.create(
            ticket=ticket,
            branch=branch,
            scanned_by=user,
            scanned_at=now,
            remaining_minutes=remaining,
        )

        if ticket.status == TicketStatus.BOOKED:
            ticket.status = TicketStatus.PLAYING
            ticket.save(update_fields=['status', 'updated_at'])

    if window['is_expired']:
        message = 'Time has expired'
    else:
        message = f'Time remaining: {remaining} minutes'

    logger.info("Ticket %s scanned by %s: %s", ticket.ticket_no, user.email, message)

    return {
        'ticket': ticket,
        'remaining_minutes': remaining,
        'is_expired': window['is_expired'],
        'start_time': window['start_time'],
        'end_time': window['end_time'],
        'message': message,
    }


def scan_history(
    *,
    branch,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = SCAN_HISTORY_LIMIT,
):
    """Most recent scans in the branch, newest first."""
    queryset = TicketScan.objects.select_related(
        'ticket', 'scanned_by'
    ).filter(branch=branch)

    if start_date:
        queryset = queryset.filter(scanned_at__gte=local_day_bounds(start_date)[0])
    if end_date:
        queryset = queryset.filter(scanned_at__lt=local_day_bounds(end_date)[1])

    return queryset.order_by('-scanned_at')[:limit]


def ticket_qr(*, ticket_id, branch) -> dict:
    """Payload and rendered image for a ticket."""
    try:
        ticket = Ticket.objects.select_related('branch', 'staff').get(id=ticket_id, branch=branch)
    except Ticket.DoesNotExist:
        raise TicketNotFoundError(f"Ticket {ticket_id} not found")

    payload = build_qr_payload(ticket)
    return {
        'payload': payload,
        'qr_code': generate_qr_data_url(payload),
    }
