"""
Tests for the reports API endpoints.
"""

from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework import status

from apps.reports.models import DailySummary
from apps.tickets.services import create_ticket


@pytest.fixture
def tickets(staff_user):
    for hour, fee in ((4, '500.00'), (6, '300.00')):
        create_ticket(
            staff=staff_user,
            name='Asha',
            per_person_fee=Decimal(fee),
            started_at=datetime(2025, 1, 10, hour, 0, tzinfo=dt_timezone.utc),
        )


@pytest.mark.django_db
class TestDailyEndpoint:

    def test_daily_summary(self, staff_client, branch, tickets):
        response = staff_client.get(reverse('reports:daily'), {'date': '2025-01-10'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['branch_name'] == 'Thamel'
        assert response.data['total_tickets'] == 2
        assert response.data['total_ticket_sales'] == '800.00'
        assert response.data['profit_loss'] == '800.00'
        assert DailySummary.objects.filter(branch=branch, date=date(2025, 1, 10)).exists()

    def test_defaults_to_today(self, staff_client):
        response = staff_client.get(reverse('reports:daily'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_tickets'] == 0

    def test_invalid_date(self, staff_client):
        response = staff_client.get(reverse('reports:daily'), {'date': 'yesterday'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unauthenticated(self, api_client):
        response = api_client.get(reverse('reports:daily'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_no_branch(self, unassigned_client):
        response = unassigned_client.get(reverse('reports:daily'))
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestRangeEndpoint:

    def test_range_summary(self, staff_client, tickets):
        response = staff_client.get(
            reverse('reports:range'),
            {'start_date': '2025-01-09', 'end_date': '2025-01-11'},
        )

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['days']) == 3
        assert response.data['days'][1]['total_tickets'] == 2
        assert response.data['totals']['total_revenue'] == '800.00'

    def test_missing_dates(self, staff_client):
        response = staff_client.get(reverse('reports:range'), {'start_date': '2025-01-09'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_reversed_range(self, staff_client):
        response = staff_client.get(
            reverse('reports:range'),
            {'start_date': '2025-01-11', 'end_date': '2025-01-09'},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data

    def test_other_branch_sees_nothing(self, other_staff_client, tickets):
        response = other_staff_client.get(
            reverse('reports:range'),
            {'start_date': '2025-01-10', 'end_date': '2025-01-10'},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['totals']['total_tickets'] == 0


@pytest.mark.django_db
class TestDashboardEndpoint:

    def test_dashboard_shape(self, staff_client, tickets):
        response = staff_client.get(reverse('reports:dashboard'))

        assert response.status_code == status.HTTP_200_OK
        assert set(response.data) == {
            'today', 'totals', 'timeline', 'type_counts', 'top_customers', 'checked_in',
        }
        assert response.data['totals']['tickets'] == 2
        assert response.data['totals']['revenue'] == '800.00'
        assert len(response.data['timeline']) == 10

    def test_admin_can_view(self, admin_client):
        response = admin_client.get(reverse('reports:dashboard'))
        assert response.status_code == status.HTTP_200_OK
