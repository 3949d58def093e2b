"""
Branch management service.

Branches are never hard-deleted because tickets, sales and expenses
reference them; deactivation hides them from staff instead.
"""

import logging
from datetime import time
from typing import Optional
from uuid import UUID

from django.db import transaction, IntegrityError

from apps.branches.models import Branch

from .exceptions import (
    BranchNotFoundError,
    DuplicateBranchError,
    InvalidBusinessHoursError,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    'branch_name',
    'location',
    'contact_number',
    'email',
    'manager',
    'opening_time',
    'closing_time',
    'is_active',
)


def _validate_hours(opening_time: time, closing_time: time) -> None:
    if closing_time <= opening_time:
        raise InvalidBusinessHoursError(
            f"Closing time {closing_time:%H:%M} must be after opening time {opening_time:%H:%M}"
        )


def get_branch_by_id(*, branch_id: UUID) -> Branch:
    try:
        return Branch.objects.get(id=branch_id)
    except Branch.DoesNotExist:
        raise BranchNotFoundError(f"Branch with ID {branch_id} not found")


def create_branch(
    *,
    branch_name: str,
    location: str,
    created_by=None,
    contact_number: str = '',
    email: str = '',
    manager: str = '',
    opening_time: Optional[time] = None,
    closing_time: Optional[time] = None,
) -> Branch:
    """
    Create a new branch.

    Raises:
        DuplicateBranchError: If a branch with the same name exists
        InvalidBusinessHoursError: If closing time is not after opening time
    """
    opening_time = opening_time or time(9, 0)
    closing_time = closing_time or time(20, 0)
    _validate_hours(opening_time, closing_time)

    try:
        with transaction.atomic():
            branch = Branch.objects.create(
                branch_name=branch_name.strip(),
                location=location,
                contact_number=contact_number,
                email=email,
                manager=manager,
                opening_time=opening_time,
                closing_time=closing_time,
                created_by=created_by,
            )
    except IntegrityError:
        raise DuplicateBranchError(f"Branch '{branch_name}' already exists")

    logger.info("Branch %s created by %s", branch.branch_name, created_by)
    return branch


@transaction.atomic
def update_branch(*, branch_id: UUID, **fields) -> Branch:
    """Update the given branch fields. Unknown fields are ignored."""
    try:
        branch = Branch.objects.select_for_update().get(id=branch_id)
    except Branch.DoesNotExist:
        raise BranchNotFoundError(f"Branch with ID {branch_id} not found")

    for field in UPDATABLE_FIELDS:
        if field in fields and fields[field] is not None:
            setattr(branch, field, fields[field])

    _validate_hours(branch.opening_time, branch.closing_time)

    name_taken = Branch.objects.filter(
        branch_name=branch.branch_name
    ).exclude(id=branch.id).exists()
    if name_taken:
        raise DuplicateBranchError(f"Branch '{branch.branch_name}' already exists")

    branch.save()
    return branch


@transaction.atomic
def deactivate_branch(*, branch_id: UUID) -> Branch:
    try:
        branch = Branch.objects.select_for_update().get(id=branch_id)
    except Branch.DoesNotExist:
        raise BranchNotFoundError(f"Branch with ID {branch_id} not found")

    branch.is_active = False
    branch.save(update_fields=['is_active', 'updated_at'])
    logger.info("Branch %s deactivated", branch.branch_name)
    return branch
