from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
import uuid


class TicketType(models.TextChoices):
    ADULT = 'Adult', 'Adult'
    CHILD = 'Child', 'Child'
    GROUP = 'Group', 'Group'
    CUSTOM = 'Custom', 'Custom'


class TicketStatus(models.TextChoices):
    BOOKED = 'booked', 'Booked'
    PLAYING = 'playing', 'Playing'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'
    DEACTIVATED = 'deactivated', 'Deactivated'


class RefundMethod(models.TextChoices):
    CASH = 'cash', 'Cash'
    ONLINE = 'online', 'Online'
    BANK = 'bank', 'Bank'
    WALLET = 'wallet', 'Wallet'
    OTHER = 'other', 'Other'


# Tickets in these states can still be scanned and can still expire
ACTIVE_STATUSES = (TicketStatus.BOOKED, TicketStatus.PLAYING)


class Ticket(models.Model):
    """
    A play session sold at a branch.

    ``started_at`` is the absolute instant the session began; all
    wall-clock display goes through ``services.time_window``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    ticket_no = models.CharField(max_length=20, unique=True, editable=False)

    # Customer
    name = models.CharField(max_length=100)
    contact_number = models.CharField(max_length=30, blank=True, db_index=True)
    player_names = models.JSONField(default=list, blank=True)
    number_of_people = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])

    # Pricing
    ticket_type = models.CharField(max_length=10, choices=TicketType.choices, default=TicketType.ADULT)
    per_person_fee = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    discount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    currency = models.CharField(max_length=3, default='NPR')

    # Group info
    group_name = models.CharField(max_length=100, blank=True)
    group_number = models.CharField(max_length=50, blank=True)
    group_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    # Ownership
    branch = models.ForeignKey('branches.Branch', on_delete=models.PROTECT, related_name='tickets')
    staff = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='tickets')
    remarks = models.TextField(blank=True)

    # Session
    started_at = models.DateTimeField(default=timezone.now, db_index=True)
    status = models.CharField(max_length=12, choices=TicketStatus.choices, default=TicketStatus.BOOKED)
    printed = models.BooleanField(default=False)
    total_extra_minutes = models.PositiveIntegerField(default=0)

    # Player status
    total_players = models.PositiveIntegerField(default=1)
    played_players = models.PositiveIntegerField(default=0)
    waiting_players = models.PositiveIntegerField(default=0)
    refunded_players_count = models.PositiveIntegerField(default=0)

    # Refund
    is_refunded = models.BooleanField(default=False)
    refund_reason = models.CharField(max_length=255, blank=True)
    refund_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    refunded_players = models.JSONField(default=list, blank=True)
    refund_name = models.CharField(max_length=100, blank=True)
    refund_method = models.CharField(max_length=10, choices=RefundMethod.choices, blank=True)
    payment_reference = models.CharField(max_length=100, blank=True)
    refunded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tickets_refunded'
    )
    refunded_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tickets'
        ordering = ['-started_at']
        indexes = [
            models.Index(fields=['branch', 'started_at'], name='tickets_branch_started_idx'),
            models.Index(fields=['branch', 'status'], name='tickets_branch_status_idx'),
        ]

    def __str__(self):
        return f"Ticket {self.ticket_no} - {self.name}"

    @property
    def is_active(self):
        return self.status in ACTIVE_STATUSES


class ExtraTimeEntry(models.Model):
    """Paid or complimentary minutes added to a session after issue."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    ticket = models.ForeignKey(Ticket, on_delete=models.CASCADE, related_name='extra_time_entries')
    minutes = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    label = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    added_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='extra_time_entries'
    )
    added_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'ticket_extra_time'
        ordering = ['added_at']

    def __str__(self):
        return f"+{self.minutes}min on {self.ticket.ticket_no}"


class TicketScan(models.Model):
    """Audit record of a QR entry validation."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    ticket = models.ForeignKey(Ticket, on_delete=models.CASCADE, related_name='scans')
    branch = models.ForeignKey('branches.Branch', on_delete=models.PROTECT, related_name='ticket_scans')
    scanned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='ticket_scans'
    )
    scanned_at = models.DateTimeField(default=timezone.now, db_index=True)
    remaining_minutes = models.IntegerField(null=True, blank=True)

    class Meta:
        db_table = 'ticket_scans'
        ordering = ['-scanned_at']

    def __str__(self):
        return f"Scan of {self.ticket.ticket_no} at {self.scanned_at:%Y-%m-%d %H:%M}"
