"""
User management service.

Admins create and deactivate staff accounts; staff belong to exactly one
branch and every branch-scoped query uses it.
"""

import logging
from typing import Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction, IntegrityError

from apps.accounts.models import UserRole

from .exceptions import (
    UserRegistrationError,
    UserNotFoundError,
    CannotDeactivateSelfError,
    NoBranchAssignedError,
)

User = get_user_model()
logger = logging.getLogger(__name__)


def require_branch(user):
    """Return the user's branch or raise when none is assigned."""
    if user.branch_id is None:
        raise NoBranchAssignedError("User is not assigned to a branch")
    return user.branch


def create_staff_user(
    *,
    email: str,
    password: str,
    created_by,
    display_name: str = '',
    phone: str = '',
    role: str = UserRole.STAFF,
    branch=None,
) -> User:
    """
    Create a staff or admin account.

    The new account joins the creating admin's branch unless one is given.

    Raises:
        UserRegistrationError: If the email is taken or no branch is available
    """
    branch = branch or created_by.branch
    if branch is None:
        raise UserRegistrationError("A branch is required for new users")

    if User.objects.filter(email__iexact=email).exists():
        raise UserRegistrationError(f"User with email {email} already exists")

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email,
                password=password,
                display_name=display_name,
                phone=phone,
                role=role,
                branch=branch,
            )
    except IntegrityError:
        raise UserRegistrationError(f"User with email {email} already exists")

    logger.info("User %s (%s) created by %s", user.email, user.role, created_by.email)
    return user


@transaction.atomic
def update_user(
    *,
    user_id: UUID,
    display_name: Optional[str] = None,
    phone: Optional[str] = None,
    role: Optional[str] = None,
    branch=None,
) -> User:
    try:
        user = User.objects.select_for_update().get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User with ID {user_id} not found")

    if display_name is not None:
        user.display_name = display_name
    if phone is not None:
        user.phone = phone
    if role is not None:
        user.role = role
    if branch is not None:
        user.branch = branch

    user.save()
    return user


@transaction.atomic
def deactivate_user(*, user_id: UUID, acting_user) -> User:
    """
    Deactivate an account. Admins cannot lock themselves out.

    Raises:
        UserNotFoundError: If user doesn't exist
        CannotDeactivateSelfError: If acting_user targets their own account
    """
    if str(user_id) == str(acting_user.id):
        raise CannotDeactivateSelfError("You cannot deactivate your own account")

    try:
        user = User.objects.select_for_update().get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User with ID {user_id} not found")

    user.is_active = False
    user.save(update_fields=['is_active'])
    logger.info("User %s deactivated by %s", user.email, acting_user.email)
    return user
