import json
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from apps.sequences.services import StorageUnavailableError
from apps.tickets.models import Ticket, TicketStatus
from apps.tickets.services import create_ticket, build_qr_payload


@pytest.fixture
def ticket(staff_user):
    return create_ticket(
        staff=staff_user,
        name='Asha',
        per_person_fee=Decimal('500.00'),
        player_names=['Asha', 'Bikash'],
        contact_number='9800000001',
    )


def detail_url(ticket, action=None):
    if action:
        return reverse(f'tickets:ticket-{action}', kwargs={'pk': ticket.id})
    return reverse('tickets:ticket-detail', kwargs={'pk': ticket.id})


# =============================================================================
# Issue and list
# =============================================================================

@pytest.mark.django_db
class TestTicketCreate:
    """Tests for POST /api/tickets/"""

    def test_create_ticket(self, staff_client):
        response = staff_client.post(reverse('tickets:ticket-list'), {
            'name': 'Asha',
            'player_names': 'Asha, Bikash, Chandra',
            'per_person_fee': '400.00',
            'discount': '100.00',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['ticket_no'] == '000001'
        assert response.data['number_of_people'] == 3
        assert response.data['fee'] == '1100.00'
        assert response.data['branch_name'] == 'Thamel'
        assert response.data['staff_name'] == 'Counter Staff'
        assert len(response.data['end_time']) == 5

    def test_create_requires_fee(self, staff_client):
        response = staff_client.post(reverse('tickets:ticket-list'), {'name': 'Asha'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_create_without_branch(self, unassigned_client):
        response = unassigned_client.post(reverse('tickets:ticket-list'), {
            'name': 'Asha',
            'per_person_fee': '100.00',
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unauthenticated(self, api_client):
        response = api_client.get(reverse('tickets:ticket-list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_storage_unavailable_is_503(self, staff_client):
        with patch(
            'apps.tickets.services.ticket_management.next_number',
            side_effect=StorageUnavailableError("Sequence storage unavailable"),
        ):
            response = staff_client.post(reverse('tickets:ticket-list'), {
                'name': 'Asha',
                'per_person_fee': '100.00',
            }, format='json')

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert Ticket.objects.count() == 0


@pytest.mark.django_db
class TestTicketList:
    """Tests for GET /api/tickets/"""

    def test_lists_today_only(self, staff_client, staff_user, ticket):
        create_ticket(
            staff=staff_user, name='Yesterday', per_person_fee=Decimal('100'),
            started_at=timezone.now() - timedelta(days=2),
        )

        response = staff_client.get(reverse('tickets:ticket-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['ticket_no'] == ticket.ticket_no

    def test_history_lists_everything(self, staff_client, staff_user, ticket):
        create_ticket(
            staff=staff_user, name='Old', per_person_fee=Decimal('100'),
            started_at=timezone.now() - timedelta(days=30),
        )

        response = staff_client.get(reverse('tickets:ticket-list'), {'range': 'history'})

        assert response.data['count'] == 2

    def test_refund_filter(self, staff_client, staff_user, ticket):
        create_ticket(staff=staff_user, name='Other', per_person_fee=Decimal('100'))
        Ticket.objects.filter(id=ticket.id).update(is_refunded=True)

        refunded = staff_client.get(reverse('tickets:ticket-list'), {'is_refunded': 'true'})
        not_refunded = staff_client.get(reverse('tickets:ticket-list'), {'is_refunded': 'false'})

        assert refunded.data['count'] == 1
        assert not_refunded.data['count'] == 1

    def test_branch_isolation(self, other_staff_client, ticket):
        response = other_staff_client.get(reverse('tickets:ticket-list'))

        assert response.data['count'] == 0

    def test_invalid_range(self, staff_client):
        response = staff_client.get(reverse('tickets:ticket-list'), {
            'start_date': '2025-02-01',
            'end_date': '2025-01-01',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Detail actions
# =============================================================================

@pytest.mark.django_db
class TestTicketDetail:

    def test_retrieve(self, staff_client, ticket):
        response = staff_client.get(detail_url(ticket))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['player_names'] == ['Asha', 'Bikash']

    def test_other_branch_cannot_retrieve(self, other_staff_client, ticket):
        response = other_staff_client.get(detail_url(ticket))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update(self, staff_client, ticket):
        response = staff_client.patch(detail_url(ticket), {'discount': '200.00'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['fee'] == '800.00'

    def test_staff_cannot_delete(self, staff_client, ticket):
        response = staff_client.delete(detail_url(ticket))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_admin_deletes(self, admin_client, ticket):
        response = admin_client.delete(detail_url(ticket))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Ticket.objects.filter(id=ticket.id).exists()

    def test_extra_time(self, staff_client, ticket):
        response = staff_client.post(detail_url(ticket, 'extra-time'), {
            'minutes': 30,
            'amount': '150.00',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['total_extra_minutes'] == 30
        assert response.data['fee'] == '1150.00'

        listing = staff_client.get(detail_url(ticket, 'extra-time'))
        assert listing.data['total_extra_minutes'] == 30
        assert listing.data['entries'][0]['label'] == '30 minutes'

    def test_extra_time_rejects_zero(self, staff_client, ticket):
        response = staff_client.post(detail_url(ticket, 'extra-time'), {'minutes': 0}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_refund(self, staff_client, ticket):
        response = staff_client.post(detail_url(ticket, 'refund'), {'reason': 'Rain'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_refunded'] is True
        assert response.data['refund_amount'] == '1000.00'

        again = staff_client.post(detail_url(ticket, 'refund'), {}, format='json')
        assert again.status_code == status.HTTP_400_BAD_REQUEST

    def test_partial_refund(self, staff_client, ticket):
        response = staff_client.post(detail_url(ticket, 'partial-refund'), {
            'refunded_players': ['Bikash'],
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['refund_amount'] == '500.00'
        assert response.data['refunded_players'] == ['Bikash']

    def test_player_status(self, staff_client, ticket):
        response = staff_client.post(detail_url(ticket, 'player-status'), {
            'played_players': 2,
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['waiting_players'] == 0

    def test_print(self, staff_client, ticket):
        response = staff_client.post(detail_url(ticket, 'mark-printed'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['printed'] is True

    def test_qr(self, staff_client, ticket):
        response = staff_client.get(detail_url(ticket, 'qr'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['payload']['ticket_no'] == ticket.ticket_no
        assert response.data['qr_code'].startswith('data:image/png;base64,')

    def test_receipt(self, staff_client, ticket):
        response = staff_client.get(detail_url(ticket, 'receipt'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['ticket_no'] == ticket.ticket_no
        assert ' - ' in response.data['time_range']

    def test_window(self, staff_client, ticket):
        response = staff_client.get(detail_url(ticket, 'window'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['duration_minutes'] == 60
        assert 58 <= response.data['remaining_minutes'] <= 60
        assert response.data['is_expired'] is False


# =============================================================================
# Collection actions
# =============================================================================

@pytest.mark.django_db
class TestTicketCollectionActions:

    def test_lookup_by_number(self, staff_client, ticket):
        url = reverse('tickets:ticket-lookup', kwargs={'identifier': ticket.ticket_no})

        response = staff_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['id'] == str(ticket.id)

    def test_lookup_by_phone(self, staff_client, ticket):
        url = reverse('tickets:ticket-lookup', kwargs={'identifier': '9800000001'})

        response = staff_client.get(url)

        assert response.data['ticket_no'] == ticket.ticket_no

    def test_lookup_missing(self, staff_client):
        url = reverse('tickets:ticket-lookup', kwargs={'identifier': '999999'})

        assert staff_client.get(url).status_code == status.HTTP_404_NOT_FOUND

    def test_stats(self, staff_client, ticket):
        response = staff_client.get(reverse('tickets:ticket-stats'), {'period': 'week'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['period'] == 'week'
        assert response.data['total_tickets'] == 1

    def test_extra_time_report(self, staff_client, ticket):
        staff_client.post(detail_url(ticket, 'extra-time'), {'minutes': 10}, format='json')

        response = staff_client.get(reverse('tickets:ticket-extra-time-report'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['minutes'] == 10

    def test_deactivate_expired_admin_only(self, staff_client, admin_client, staff_user):
        create_ticket(
            staff=staff_user, name='Old', per_person_fee=Decimal('100'),
            started_at=timezone.now() - timedelta(hours=3),
        )

        assert staff_client.post(reverse('tickets:ticket-deactivate-expired')).status_code == 403

        response = admin_client.post(reverse('tickets:ticket-deactivate-expired'))
        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'deactivated': 1}


# =============================================================================
# QR scanning
# =============================================================================

@pytest.mark.django_db
class TestQRScan:
    """Tests for POST /api/qr/scan/ and GET /api/qr/history/"""

    def test_scan_json_payload(self, staff_client, ticket):
        response = staff_client.post(reverse('tickets:qr-scan'), {
            'qr_data': json.dumps(build_qr_payload(ticket)),
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_expired'] is False
        assert response.data['message'].startswith('Time remaining:')
        assert response.data['ticket']['status'] == TicketStatus.PLAYING

    def test_scan_bare_number(self, staff_client, ticket):
        response = staff_client.post(reverse('tickets:qr-scan'), {'qr_data': ticket.ticket_no}, format='json')

        assert response.status_code == status.HTTP_200_OK

    def test_scan_expired(self, staff_client, staff_user):
        old = create_ticket(
            staff=staff_user, name='Old', per_person_fee=Decimal('100'),
            started_at=timezone.now() - timedelta(minutes=90, seconds=5),
        )

        response = staff_client.post(reverse('tickets:qr-scan'), {'qr_data': old.ticket_no}, format='json')

        assert response.data['is_expired'] is True
        assert response.data['remaining_minutes'] == -31
        assert response.data['message'] == 'Time has expired'

    def test_scan_invalid(self, staff_client):
        response = staff_client.post(reverse('tickets:qr-scan'), {'qr_data': 'not a ticket!'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_scan_unknown_ticket(self, staff_client):
        response = staff_client.post(reverse('tickets:qr-scan'), {'qr_data': '123456'}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_scan_inactive(self, staff_client, ticket):
        Ticket.objects.filter(id=ticket.id).update(status=TicketStatus.DEACTIVATED)

        response = staff_client.post(reverse('tickets:qr-scan'), {'qr_data': ticket.ticket_no}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Ticket is deactivated'

    def test_history(self, staff_client, ticket):
        staff_client.post(reverse('tickets:qr-scan'), {'qr_data': ticket.ticket_no}, format='json')

        response = staff_client.get(reverse('tickets:qr-history'))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert response.data[0]['ticket_no'] == ticket.ticket_no

    def test_history_limit(self, staff_client, ticket):
        for _ in range(3):
            staff_client.post(reverse('tickets:qr-scan'), {'qr_data': ticket.ticket_no}, format='json')

        response = staff_client.get(reverse('tickets:qr-history'), {'limit': 2})

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 2

    @pytest.mark.parametrize('limit', ['-1', '0', '501', 'abc'])
    def test_history_invalid_limit(self, staff_client, limit):
        response = staff_client.get(reverse('tickets:qr-history'), {'limit': limit})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'limit' in response.data

    def test_scan_boolean_payload_rejected(self, staff_client):
        response = staff_client.post(reverse('tickets:qr-scan'), {'qr_data': 'true'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
