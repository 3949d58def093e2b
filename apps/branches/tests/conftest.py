import pytest
from datetime import time
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.branches.models import Branch


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def branch(db):
    """Create and return the main test branch."""
    return Branch.objects.create(
        branch_name='Thamel',
        location='Thamel, Kathmandu',
        contact_number='01-4000000',
        manager='Branch Manager',
        opening_time=time(9, 0),
        closing_time=time(20, 0),
    )


@pytest.fixture
def other_branch(db):
    """Create and return a second branch."""
    return Branch.objects.create(
        branch_name='Lalitpur',
        location='Jawalakhel, Lalitpur',
    )


@pytest.fixture
def admin_user(db, branch):
    """Create and return a branch admin."""
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        display_name='Venue Admin',
        role=UserRole.ADMIN,
        branch=branch,
    )


@pytest.fixture
def staff_user(db, branch):
    """Create and return a staff member at the main branch."""
    return User.objects.create_user(
        email='staff@example.com',
        password='TestPass123!',
        display_name='Counter Staff',
        role=UserRole.STAFF,
        branch=branch,
    )


@pytest.fixture
def admin_client(admin_user):
    """Return an API client authenticated as the admin."""
    return _client_for(admin_user)


@pytest.fixture
def staff_client(staff_user):
    """Return an API client authenticated as staff."""
    return _client_for(staff_user)
