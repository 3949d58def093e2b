"""
Login for venue staff.

A user signs in with email and password and receives a JWT pair whose
access token carries the user's role and branch, so clients can tell an
admin from counter staff without an extra profile request.
"""

import logging

from django.db import transaction
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework_simplejwt.tokens import RefreshToken

from .exceptions import InvalidCredentialsError, InactiveAccountError

User = get_user_model()
logger = logging.getLogger(__name__)

INVALID_LOGIN = "Invalid email or password"


@transaction.atomic
def authenticate_user(*, email: str, password: str) -> User:
    """
    Check credentials and record the login.

    Email matching ignores case and surrounding spaces. Staff assigned to
    a deactivated branch cannot sign in; admins and unassigned accounts
    are not affected by branch state.

    Raises:
        InvalidCredentialsError: Unknown email or wrong password
        InactiveAccountError: Account or its branch is deactivated
    """
    try:
        user = (
            User.objects
            .select_related('branch')
            .select_for_update(of=('self',))
            .get(email__iexact=email.strip())
        )
    except User.DoesNotExist:
        logger.info("Login attempt for unknown email %s", email)
        raise InvalidCredentialsError(INVALID_LOGIN)

    if not user.check_password(password):
        logger.warning("Failed login attempt for %s", user.email)
        raise InvalidCredentialsError(INVALID_LOGIN)

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    if user.branch_id and not user.branch.is_active and not user.is_venue_admin:
        raise InactiveAccountError(f"Branch {user.branch.branch_name} is deactivated")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    logger.info("User %s signed in (%s)", user.email, user.role)
    return user


def issue_tokens(user) -> dict:
    """JWT refresh/access pair with ``role`` and ``branch_id`` claims."""
    refresh = RefreshToken.for_user(user)
    refresh['role'] = user.role
    refresh['branch_id'] = str(user.branch_id) if user.branch_id else None

    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }
