"""
Tickets app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and row locks.
"""

from .exceptions import (
    TicketServiceError,
    TicketNotFoundError,
    InvalidTicketError,
    InvalidExtraMinutesError,
    AlreadyRefundedError,
    InvalidRefundError,
    TicketInactiveError,
    InvalidQRCodeError,
    QRGenerationError,
    TicketPermissionError,
)

from .ticket_management import (
    create_ticket,
    get_ticket,
    lookup_ticket,
    update_ticket,
    delete_ticket,
    update_player_status,
    mark_printed,
    calculate_fee,
    parse_player_names,
)

from .extra_time import (
    add_extra_time,
    get_extra_time_entries,
    extra_time_report,
)

from .refunds import (
    refund_ticket,
    partial_refund,
)

from .qr import (
    build_qr_payload,
    generate_qr_data_url,
    parse_qr_payload,
    scan_ticket,
    scan_history,
    ticket_qr,
)

from .expiry import deactivate_expired_tickets

from .statistics import ticket_statistics

from .receipts import build_receipt


__all__ = [
    # Exceptions
    'TicketServiceError',
    'TicketNotFoundError',
    'InvalidTicketError',
    'InvalidExtraMinutesError',
    'AlreadyRefundedError',
    'InvalidRefundError',
    'TicketInactiveError',
    'InvalidQRCodeError',
    'QRGenerationError',
    'TicketPermissionError',

    # Ticket Management
    'create_ticket',
    'get_ticket',
    'lookup_ticket',
    'update_ticket',
    'delete_ticket',
    'update_player_status',
    'mark_printed',
    'calculate_fee',
    'parse_player_names',

    # Extra Time
    'add_extra_time',
    'get_extra_time_entries',
    'extra_time_report',

    # Refunds
    'refund_ticket',
    'partial_refund',

    # QR
    'build_qr_payload',
    'generate_qr_data_url',
    'parse_qr_payload',
    'scan_ticket',
    'scan_history',
    'ticket_qr',

    # Expiry
    'deactivate_expired_tickets',

    # Statistics
    'ticket_statistics',

    # Receipts
    'build_receipt',
]
