"""
Domain exceptions for the tickets service layer.

Exception Hierarchy:
    TicketServiceError (base)
    ├── TicketNotFoundError
    ├── InvalidTicketError
    ├── InvalidExtraMinutesError
    ├── AlreadyRefundedError
    ├── InvalidRefundError
    ├── TicketInactiveError
    ├── InvalidQRCodeError
    ├── QRGenerationError
    └── TicketPermissionError

Allocation failures surface as ``apps.sequences.services.StorageUnavailableError``.
"""


class TicketServiceError(Exception):
    """Base exception for ticket service errors."""
    pass


class TicketNotFoundError(TicketServiceError):
    """No ticket matches the identifier in this branch."""
    pass


class InvalidTicketError(TicketServiceError):
    """Ticket input fails a business rule (fee, discount, people)."""
    pass


class InvalidExtraMinutesError(TicketServiceError):
    """Extra time must be a positive number of minutes."""
    pass


class AlreadyRefundedError(TicketServiceError):
    """Ticket has already been fully refunded."""
    pass


class InvalidRefundError(TicketServiceError):
    """Refund request is inconsistent with the ticket."""
    pass


class TicketInactiveError(TicketServiceError):
    """Ticket is cancelled or deactivated and cannot be used."""
    pass


class InvalidQRCodeError(TicketServiceError):
    """Scanned QR content is not a ticket payload."""
    pass


class QRGenerationError(TicketServiceError):
    """QR image could not be rendered."""
    pass


class TicketPermissionError(TicketServiceError):
    """User may not modify this ticket."""
    pass
