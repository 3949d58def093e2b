"""
Printable ticket receipt data.
"""

from apps.branches.services import receipt_settings
from apps.tickets.models import Ticket

from .time_window import display, format_time_range, local_date, to_local_time, format_clock


def build_receipt(ticket: Ticket) -> dict:
    """
    Everything printed on a ticket receipt.

    The header and house rules come from the branch settings. Times are
    venue wall-clock; an unknown start renders as the placeholder.
    """
    header = receipt_settings(ticket.branch)
    start = to_local_time(ticket.started_at)
    issued_on = local_date(ticket.started_at)

    return {
        'venue': header.company_name,
        'company_address': header.company_address,
        'contact_numbers': header.contact_numbers,
        'email': header.email,
        'pan_number': header.pan_number,
        'reg_no': header.reg_no,
        'ticket_rules': header.ticket_rules,
        'branch': ticket.branch.branch_name,
        'branch_location': ticket.branch.location,
        'branch_contact': ticket.branch.contact_number,
        'ticket_no': ticket.ticket_no,
        'name': ticket.name,
        'contact_number': ticket.contact_number,
        'player_names': ticket.player_names,
        'number_of_people': ticket.number_of_people,
        'ticket_type': ticket.ticket_type,
        'per_person_fee': ticket.per_person_fee,
        'discount': ticket.discount,
        'fee': ticket.fee,
        'currency': ticket.currency,
        'date': display(issued_on.isoformat() if issued_on else None),
        'time': display(format_clock(str(start)) if start else None),
        'time_range': format_time_range(
            ticket.started_at,
            ticket.total_extra_minutes,
            ticket.is_refunded,
        ),
        'total_extra_minutes': ticket.total_extra_minutes,
        'is_refunded': ticket.is_refunded,
        'refund_amount': ticket.refund_amount,
        'staff': ticket.staff.get_display_name(),
        'remarks': ticket.remarks,
    }
