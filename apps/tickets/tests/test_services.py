"""
Tests for the tickets services layer.
"""

import json
import threading
from datetime import date, datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import connection
from django.test import TransactionTestCase

from apps.accounts.models import User, UserRole
from apps.accounts.services import NoBranchAssignedError
from apps.branches.models import Branch, BranchSettings
from apps.sequences.services import StorageUnavailableError
from apps.tickets.models import Ticket, TicketScan, TicketStatus, TicketType
from apps.tickets.services import (
    create_ticket,
    lookup_ticket,
    update_ticket,
    update_player_status,
    add_extra_time,
    extra_time_report,
    refund_ticket,
    partial_refund,
    parse_qr_payload,
    build_qr_payload,
    generate_qr_data_url,
    scan_ticket,
    scan_history,
    deactivate_expired_tickets,
    ticket_statistics,
    build_receipt,
    calculate_fee,
    TicketNotFoundError,
    InvalidTicketError,
    InvalidExtraMinutesError,
    AlreadyRefundedError,
    InvalidRefundError,
    TicketInactiveError,
    InvalidQRCodeError,
    TicketPermissionError,
)
from apps.tickets.services import expiry
from apps.tickets.services.statistics import period_range


def utc(*args):
    return datetime(*args, tzinfo=dt_timezone.utc)


@pytest.fixture
def ticket(staff_user):
    """Two-player adult ticket started at 10:00 local."""
    return create_ticket(
        staff=staff_user,
        name='Asha',
        per_person_fee=Decimal('500.00'),
        player_names='Asha, Bikash',
        contact_number='9800000001',
        started_at=utc(2025, 1, 10, 4, 15),
    )


# ============================================================================
# ISSUE
# ============================================================================

@pytest.mark.django_db
class TestCreateTicket:

    def test_fee_from_people_and_discount(self, staff_user):
        ticket = create_ticket(
            staff=staff_user,
            name='Group',
            per_person_fee=Decimal('300'),
            number_of_people=4,
            discount=Decimal('200'),
            ticket_type=TicketType.GROUP,
        )

        assert ticket.fee == Decimal('1000.00')
        assert ticket.total_players == 4
        assert ticket.waiting_players == 4
        assert ticket.status == TicketStatus.BOOKED
        assert ticket.branch == staff_user.branch
        assert ticket.currency == 'NPR'

    def test_people_default_to_player_names(self, ticket):
        assert ticket.player_names == ['Asha', 'Bikash']
        assert ticket.number_of_people == 2
        assert ticket.fee == Decimal('1000.00')

    def test_discount_never_makes_fee_negative(self):
        assert calculate_fee(
            per_person_fee=Decimal('100'), number_of_people=1, discount=Decimal('250')
        ) == Decimal('0.00')

    def test_numbers_are_sequential_and_padded(self, staff_user):
        first = create_ticket(staff=staff_user, name='A', per_person_fee=Decimal('100'))
        second = create_ticket(staff=staff_user, name='B', per_person_fee=Decimal('100'))

        assert first.ticket_no == '000001'
        assert second.ticket_no == '000002'

    def test_zero_fee_rejected(self, staff_user):
        with pytest.raises(InvalidTicketError):
            create_ticket(staff=staff_user, name='A', per_person_fee=Decimal('0'))

    def test_negative_discount_rejected(self, staff_user):
        with pytest.raises(InvalidTicketError):
            create_ticket(
                staff=staff_user, name='A', per_person_fee=Decimal('100'), discount=Decimal('-1')
            )

    def test_requires_branch(self, unassigned_user):
        with pytest.raises(NoBranchAssignedError):
            create_ticket(staff=unassigned_user, name='A', per_person_fee=Decimal('100'))

    def test_allocation_failure_leaves_no_ticket(self, staff_user):
        with patch(
            'apps.tickets.services.ticket_management.next_number',
            side_effect=StorageUnavailableError("Sequence storage unavailable"),
        ):
            with pytest.raises(StorageUnavailableError):
                create_ticket(staff=staff_user, name='A', per_person_fee=Decimal('100'))

        assert Ticket.objects.count() == 0


# ============================================================================
# LOOKUP AND UPDATE
# ============================================================================

@pytest.mark.django_db
class TestLookupTicket:

    def test_by_ticket_number(self, ticket, branch):
        assert lookup_ticket(identifier=ticket.ticket_no, branch=branch) == ticket

    def test_by_id(self, ticket, branch):
        assert lookup_ticket(identifier=str(ticket.id), branch=branch) == ticket

    def test_by_contact_number_returns_newest(self, ticket, staff_user, branch):
        newer = create_ticket(
            staff=staff_user, name='Asha', per_person_fee=Decimal('100'), contact_number='9800000001'
        )

        assert lookup_ticket(identifier='9800000001', branch=branch) == newer

    def test_other_branch_not_found(self, ticket, other_branch):
        with pytest.raises(TicketNotFoundError):
            lookup_ticket(identifier=ticket.ticket_no, branch=other_branch)

    def test_unknown(self, branch):
        with pytest.raises(TicketNotFoundError):
            lookup_ticket(identifier='nope', branch=branch)


@pytest.mark.django_db
class TestUpdateTicket:

    def test_pricing_change_recalculates_fee(self, ticket, staff_user):
        updated = update_ticket(ticket_id=ticket.id, user=staff_user, number_of_people=3)

        assert updated.fee == Decimal('1500.00')
        assert updated.total_players == 3
        assert updated.waiting_players == 3

    def test_extra_time_amount_kept_on_repricing(self, ticket, staff_user):
        add_extra_time(ticket_id=ticket.id, user=staff_user, minutes=30, amount=Decimal('200'))

        updated = update_ticket(ticket_id=ticket.id, user=staff_user, discount=Decimal('100'))

        assert updated.fee == Decimal('1100.00')

    def test_other_staff_cannot_modify(self, ticket, branch):
        colleague = User.objects.create_user(
            email='colleague@example.com', password='TestPass123!', branch=branch
        )

        with pytest.raises(TicketPermissionError):
            update_ticket(ticket_id=ticket.id, user=colleague, name='Changed')

    def test_admin_can_modify(self, ticket, admin_user):
        updated = update_ticket(ticket_id=ticket.id, user=admin_user, remarks='VIP')

        assert updated.remarks == 'VIP'

    def test_player_status(self, ticket, staff_user):
        updated = update_player_status(ticket_id=ticket.id, user=staff_user, played_players=1)

        assert updated.played_players == 1
        assert updated.waiting_players == 1

    def test_player_status_over_total(self, ticket, staff_user):
        with pytest.raises(InvalidTicketError):
            update_player_status(ticket_id=ticket.id, user=staff_user, played_players=3)


# ============================================================================
# EXTRA TIME
# ============================================================================

@pytest.mark.django_db
class TestExtraTime:

    def test_adds_minutes_and_amount(self, ticket, staff_user):
        updated = add_extra_time(ticket_id=ticket.id, user=staff_user, minutes=15, amount=Decimal('100'))

        assert updated.total_extra_minutes == 15
        assert updated.fee == Decimal('1100.00')
        entry = updated.extra_time_entries.get()
        assert entry.label == '15 minutes'
        assert entry.added_by == staff_user

    def test_accumulates(self, ticket, staff_user):
        add_extra_time(ticket_id=ticket.id, user=staff_user, minutes=15)
        updated = add_extra_time(ticket_id=ticket.id, user=staff_user, minutes=30, label='Half hour')

        assert updated.total_extra_minutes == 45
        assert updated.extra_time_entries.count() == 2

    @pytest.mark.parametrize('minutes', [0, -5])
    def test_non_positive_minutes_rejected(self, ticket, staff_user, minutes):
        with pytest.raises(InvalidExtraMinutesError):
            add_extra_time(ticket_id=ticket.id, user=staff_user, minutes=minutes)

    def test_other_branch_not_found(self, ticket, other_staff):
        with pytest.raises(TicketNotFoundError):
            add_extra_time(ticket_id=ticket.id, user=other_staff, minutes=10)

    def test_report(self, ticket, staff_user, branch):
        add_extra_time(ticket_id=ticket.id, user=staff_user, minutes=20, amount=Decimal('50'))

        report = extra_time_report(branch=branch)

        assert len(report) == 1
        assert report[0]['ticket_no'] == ticket.ticket_no
        assert report[0]['minutes'] == 20
        assert report[0]['added_by'] == 'Counter Staff'


# ============================================================================
# REFUNDS
# ============================================================================

@pytest.mark.django_db
class TestRefunds:

    def test_full_refund_defaults_to_fee(self, ticket, staff_user):
        refunded = refund_ticket(ticket_id=ticket.id, user=staff_user, reason='Closed')

        assert refunded.is_refunded is True
        assert refunded.refund_amount == Decimal('1000.00')
        assert refunded.refunded_players_count == 2
        assert refunded.waiting_players == 0
        assert refunded.refund_name == 'Asha'
        assert refunded.refunded_by == staff_user
        assert refunded.refunded_at is not None

    def test_full_refund_twice(self, ticket, staff_user):
        refund_ticket(ticket_id=ticket.id, user=staff_user)

        with pytest.raises(AlreadyRefundedError):
            refund_ticket(ticket_id=ticket.id, user=staff_user)

    def test_refund_above_fee_rejected(self, ticket, staff_user):
        with pytest.raises(InvalidRefundError):
            refund_ticket(ticket_id=ticket.id, user=staff_user, refund_amount=Decimal('1000.01'))

    def test_partial_refund_per_player(self, ticket, staff_user):
        updated = partial_refund(ticket_id=ticket.id, user=staff_user, refunded_players=['Bikash'])

        assert updated.refund_amount == Decimal('500.00')
        assert updated.refunded_players == ['Bikash']
        assert updated.refunded_players_count == 1
        assert updated.is_refunded is False

    def test_partial_refund_of_everyone_becomes_full(self, ticket, staff_user):
        partial_refund(ticket_id=ticket.id, user=staff_user, refunded_players=['Bikash'])
        updated = partial_refund(ticket_id=ticket.id, user=staff_user, refunded_players=['Asha'])

        assert updated.is_refunded is True
        assert updated.refund_amount == Decimal('1000.00')

    def test_partial_refund_remainder_absorbs_rounding(self, staff_user):
        ticket = create_ticket(
            staff=staff_user, name='Trio', per_person_fee=Decimal('100'),
            number_of_people=3, discount=Decimal('0.01'),
        )

        partial_refund(ticket_id=ticket.id, user=staff_user, refunded_players=['P1'])
        partial_refund(ticket_id=ticket.id, user=staff_user, refunded_players=['P2'])
        updated = partial_refund(ticket_id=ticket.id, user=staff_user, refunded_players=['P3'])

        assert updated.refund_amount == updated.fee

    def test_partial_refund_duplicate_player(self, ticket, staff_user):
        partial_refund(ticket_id=ticket.id, user=staff_user, refunded_players=['Bikash'])

        with pytest.raises(InvalidRefundError):
            partial_refund(ticket_id=ticket.id, user=staff_user, refunded_players=['Bikash'])

    def test_partial_refund_too_many_players(self, ticket, staff_user):
        with pytest.raises(InvalidRefundError):
            partial_refund(ticket_id=ticket.id, user=staff_user, refunded_players='A, B, C')

    def test_refunded_window_counts_only_extra(self, ticket, staff_user):
        add_extra_time(ticket_id=ticket.id, user=staff_user, minutes=15)
        refunded = refund_ticket(ticket_id=ticket.id, user=staff_user)

        assert build_receipt(refunded)['time_range'] == '10:00 - 10:15'


# ============================================================================
# QR
# ============================================================================

@pytest.mark.django_db
class TestQR:

    def test_payload(self, ticket):
        payload = build_qr_payload(ticket)

        assert payload['ticket_no'] == ticket.ticket_no
        assert payload['time'] == '10:00'
        assert payload['date'] == '2025-01-10'
        assert payload['fee'] == '1000.00'
        assert payload['branch'] == 'Thamel'

    def test_data_url(self, ticket):
        url = generate_qr_data_url(build_qr_payload(ticket))

        assert url.startswith('data:image/png;base64,')

    @pytest.mark.parametrize('raw, expected', [
        ('{"ticket_no": "000042", "time": "10:30$$"}', '000042'),
        ({'ticket_no': 'ABC-1'}, 'ABC-1'),
        ('000042', '000042'),
        ('42', '42'),
        (' T-77 ', 'T-77'),
    ])
    def test_parse(self, raw, expected):
        assert parse_qr_payload(raw)['ticket_no'] == expected

    def test_parse_sanitizes_time(self):
        payload = parse_qr_payload(json.dumps({'ticket_no': '1', 'time': '10:30$$'}))

        assert payload['time'] == '10:30'

    @pytest.mark.parametrize('raw', ['', None, '[1, 2]', '{"name": "x"}', 'not a ticket!', 'true', 'false'])
    def test_parse_invalid(self, raw):
        with pytest.raises(InvalidQRCodeError):
            parse_qr_payload(raw)


@pytest.mark.django_db
class TestScanTicket:

    def test_scan_within_window(self, ticket, staff_user):
        result = scan_ticket(
            qr_data=json.dumps(build_qr_payload(ticket)),
            user=staff_user,
            now=utc(2025, 1, 10, 4, 35),
        )

        assert result['remaining_minutes'] == 40
        assert result['is_expired'] is False
        assert result['message'] == 'Time remaining: 40 minutes'
        assert result['end_time'] == '11:00'
        ticket.refresh_from_db()
        assert ticket.status == TicketStatus.PLAYING
        assert TicketScan.objects.get().remaining_minutes == 40

    def test_scan_after_expiry_reports_negative(self, ticket, staff_user):
        result = scan_ticket(qr_data=ticket.ticket_no, user=staff_user, now=utc(2025, 1, 10, 5, 45))

        assert result['remaining_minutes'] == -30
        assert result['is_expired'] is True
        assert result['message'] == 'Time has expired'

    def test_scan_inactive_ticket(self, ticket, staff_user):
        Ticket.objects.filter(id=ticket.id).update(status=TicketStatus.CANCELLED)

        with pytest.raises(TicketInactiveError):
            scan_ticket(qr_data=ticket.ticket_no, user=staff_user)

    def test_scan_other_branch(self, ticket, other_staff):
        with pytest.raises(TicketNotFoundError):
            scan_ticket(qr_data=ticket.ticket_no, user=other_staff)

    def test_history(self, ticket, staff_user, branch):
        scan_ticket(qr_data=ticket.ticket_no, user=staff_user, now=utc(2025, 1, 10, 4, 20))
        scan_ticket(qr_data=ticket.ticket_no, user=staff_user, now=utc(2025, 1, 10, 4, 40))

        scans = list(scan_history(branch=branch, start_date=date(2025, 1, 10), end_date=date(2025, 1, 10)))

        assert [s.remaining_minutes for s in scans] == [35, 55]


# ============================================================================
# EXPIRY
# ============================================================================

@pytest.mark.django_db
class TestDeactivateExpired:

    def test_deactivates_only_expired(self, ticket, staff_user):
        fresh = create_ticket(
            staff=staff_user, name='Fresh', per_person_fee=Decimal('100'),
            started_at=utc(2025, 1, 10, 5, 0),
        )

        count = deactivate_expired_tickets(now=utc(2025, 1, 10, 5, 30))

        assert count == 1
        ticket.refresh_from_db()
        fresh.refresh_from_db()
        assert ticket.status == TicketStatus.DEACTIVATED
        assert fresh.status == TicketStatus.BOOKED

    def test_extra_time_keeps_ticket_active(self, ticket, staff_user):
        add_extra_time(ticket_id=ticket.id, user=staff_user, minutes=60)

        assert deactivate_expired_tickets(now=utc(2025, 1, 10, 5, 30)) == 0

    def test_extra_time_added_during_sweep_keeps_ticket_active(self, ticket, staff_user):
        """Top-up landing between candidate selection and update wins."""
        select_candidates = expiry.find_expired_ticket_ids

        def select_then_top_up(**kwargs):
            ids = select_candidates(**kwargs)
            add_extra_time(ticket_id=ticket.id, user=staff_user, minutes=30)
            return ids

        with patch.object(expiry, 'find_expired_ticket_ids', side_effect=select_then_top_up):
            count = deactivate_expired_tickets(now=utc(2025, 1, 10, 5, 16))

        assert count == 0
        ticket.refresh_from_db()
        assert ticket.status == TicketStatus.BOOKED
        assert ticket.total_extra_minutes == 30

    def test_completed_tickets_untouched(self, ticket):
        Ticket.objects.filter(id=ticket.id).update(status=TicketStatus.COMPLETED)

        assert deactivate_expired_tickets(now=utc(2025, 1, 11)) == 0

    def test_scoped_to_branch(self, ticket, other_branch):
        assert deactivate_expired_tickets(now=utc(2025, 1, 11), branch=other_branch) == 0


# ============================================================================
# STATISTICS AND RECEIPTS
# ============================================================================

class TestPeriodRange:

    def test_week(self):
        assert period_range('week', date(2025, 1, 10)) == (date(2025, 1, 4), date(2025, 1, 10))

    def test_month(self):
        assert period_range('month', date(2025, 2, 10)) == (date(2025, 2, 1), date(2025, 2, 28))

    def test_unknown_falls_back_to_today(self):
        assert period_range('decade', date(2025, 1, 10)) == (date(2025, 1, 10), date(2025, 1, 10))


@pytest.mark.django_db
class TestStatistics:

    def test_today(self, ticket, staff_user, branch):
        create_ticket(
            staff=staff_user, name='Kid', per_person_fee=Decimal('250'),
            ticket_type=TicketType.CHILD, started_at=utc(2025, 1, 10, 6, 0),
        )

        stats = ticket_statistics(branch=branch, today=date(2025, 1, 10))

        assert stats['total_tickets'] == 2
        assert stats['total_revenue'] == Decimal('1250.00')
        assert stats['type_distribution'] == [
            {'ticket_type': 'Adult', 'count': 1},
            {'ticket_type': 'Child', 'count': 1},
        ]
        assert stats['player_stats']['total_players'] == 3

    def test_local_day_boundary(self, staff_user, branch):
        # 18:20 UTC on the 9th is 00:05 local on the 10th
        create_ticket(
            staff=staff_user, name='Late', per_person_fee=Decimal('100'),
            started_at=utc(2025, 1, 9, 18, 20),
        )

        assert ticket_statistics(branch=branch, today=date(2025, 1, 10))['total_tickets'] == 1
        assert ticket_statistics(branch=branch, today=date(2025, 1, 9))['total_tickets'] == 0


@pytest.mark.django_db
class TestReceipt:

    def test_receipt_times_are_local(self, ticket):
        receipt = build_receipt(ticket)

        assert receipt['time'] == '10:00'
        assert receipt['date'] == '2025-01-10'
        assert receipt['time_range'] == '10:00 - 11:00'
        assert receipt['branch'] == 'Thamel'

    def test_receipt_uses_branch_settings(self, ticket, branch):
        BranchSettings.objects.create(
            branch=branch,
            company_name='Belaka Skate Park',
            company_address='Rampur, Belaka-9',
            contact_numbers=['9812345678', '035-400111'],
            pan_number='601234567',
            ticket_rules=['Valid once only.', 'No refund after entry.'],
        )

        receipt = build_receipt(ticket)

        assert receipt['venue'] == 'Belaka Skate Park'
        assert receipt['company_address'] == 'Rampur, Belaka-9'
        assert receipt['contact_numbers'] == ['9812345678', '035-400111']
        assert receipt['pan_number'] == '601234567'
        assert receipt['ticket_rules'] == ['Valid once only.', 'No refund after entry.']

    def test_receipt_defaults_without_settings(self, ticket, branch):
        receipt = build_receipt(ticket)

        assert receipt['company_address'] == 'Thamel, Kathmandu'
        assert receipt['contact_numbers'] == ['01-4000000']
        assert receipt['ticket_rules'] == []
        assert not BranchSettings.objects.filter(branch=branch).exists()

    def test_new_ticket_uses_branch_currency(self, staff_user, branch):
        BranchSettings.objects.create(
            branch=branch,
            company_name='Belaka Skate Park',
            company_address='Rampur',
            default_currency='INR',
        )

        ticket = create_ticket(
            staff=staff_user, name='Ravi', per_person_fee=Decimal('300'),
            started_at=utc(2025, 1, 10, 4, 15),
        )

        assert ticket.currency == 'INR'


# ============================================================================
# CONCURRENCY TESTS
# ============================================================================

class TestConcurrentTickets(TransactionTestCase):
    """Ticket writes under real concurrent database transactions."""

    def setUp(self):
        self.branch = Branch.objects.create(branch_name='Concurrency')
        self.staff = User.objects.create_user(
            email='rush@example.com',
            password='TestPass123!',
            role=UserRole.STAFF,
            branch=self.branch,
        )

    def _run_concurrently(self, count, target):
        results = []
        errors = []
        lock = threading.Lock()
        barrier = threading.Barrier(count)

        def run_in_thread(index):
            try:
                barrier.wait()
                value = target(index)
                with lock:
                    results.append(value)
            except Exception as e:
                with lock:
                    errors.append(e)
            finally:
                connection.close()

        threads = [threading.Thread(target=run_in_thread, args=(i,)) for i in range(count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        return results, errors

    def test_concurrent_issue_gets_unique_numbers(self):
        results, errors = self._run_concurrently(
            20,
            lambda i: create_ticket(
                staff=self.staff, name=f'Player {i}', per_person_fee=Decimal('100')
            ).ticket_no,
        )

        assert errors == []
        assert sorted(results) == [f'{n:06d}' for n in range(1, 21)]

    def test_concurrent_extra_time_is_not_lost(self):
        ticket = create_ticket(staff=self.staff, name='Long game', per_person_fee=Decimal('100'))

        results, errors = self._run_concurrently(
            10,
            lambda i: add_extra_time(
                ticket_id=ticket.id, user=self.staff, minutes=5, amount=Decimal('10')
            ),
        )

        assert errors == []
        ticket.refresh_from_db()
        assert ticket.total_extra_minutes == 50
        assert ticket.fee == Decimal('200.00')
        assert ticket.extra_time_entries.count() == 10
