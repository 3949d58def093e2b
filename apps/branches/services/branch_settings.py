"""
Per-branch receipt settings.

Each branch has one settings row holding the company header printed on
receipts, contact numbers, tax identifiers, the currency new records are
stored in, and the house rules printed under a ticket. A branch without a
row reads as defaults built from the branch itself and the project
settings.
"""

import logging
from typing import Iterable, Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction

from apps.branches.models import Branch, BranchSettings

from .branch_management import get_branch_by_id
from .exceptions import BranchPermissionError, InvalidBranchSettingsError

logger = logging.getLogger(__name__)

UPDATABLE_SETTINGS = (
    'company_name',
    'company_address',
    'contact_numbers',
    'email',
    'pan_number',
    'reg_no',
    'default_currency',
    'ticket_rules',
    'country',
)


def _defaults(branch: Branch) -> dict:
    return {
        'company_name': settings.VENUE_NAME,
        'company_address': branch.location,
        'contact_numbers': [branch.contact_number] if branch.contact_number else [],
        'email': branch.email,
        'default_currency': settings.VENUE_CURRENCY,
    }


def _clean_lines(values: Optional[Iterable[str]]) -> list:
    return [str(value).strip() for value in values or [] if str(value).strip()]


def get_branch_settings(*, branch: Branch) -> BranchSettings:
    """Stored settings for ``branch``, created with defaults on first read."""
    branch_settings, created = BranchSettings.objects.get_or_create(
        branch=branch,
        defaults=_defaults(branch),
    )
    if created:
        logger.info("Created default settings for branch %s", branch.branch_name)
    return branch_settings


def receipt_settings(branch: Branch) -> BranchSettings:
    """Stored settings, or unsaved defaults when the branch has none. Never writes."""
    stored = BranchSettings.objects.filter(branch=branch).first()
    return stored or BranchSettings(branch=branch, **_defaults(branch))


def branch_currency(branch: Branch) -> str:
    """Currency that new tickets, sales and expenses at ``branch`` are stored in."""
    return receipt_settings(branch).default_currency


@transaction.atomic
def update_branch_settings(*, branch_id: UUID, user, **fields) -> BranchSettings:
    """
    Change a branch's settings. Fields left out or None keep their value.

    Raises:
        BranchPermissionError: If user is not an admin
        BranchNotFoundError: If the branch doesn't exist
        InvalidBranchSettingsError: If company name or address ends up blank,
            or the currency is not a 3-letter code
    """
    if not user.is_venue_admin:
        raise BranchPermissionError("Only admins can change branch settings")

    branch = get_branch_by_id(branch_id=branch_id)
    branch_settings, _ = BranchSettings.objects.select_for_update().get_or_create(
        branch=branch,
        defaults=_defaults(branch),
    )

    for field in UPDATABLE_SETTINGS:
        if field in fields and fields[field] is not None:
            setattr(branch_settings, field, fields[field])

    branch_settings.company_name = branch_settings.company_name.strip()
    branch_settings.company_address = branch_settings.company_address.strip()
    branch_settings.default_currency = branch_settings.default_currency.strip().upper()
    branch_settings.contact_numbers = _clean_lines(branch_settings.contact_numbers)
    branch_settings.ticket_rules = _clean_lines(branch_settings.ticket_rules)

    if not branch_settings.company_name:
        raise InvalidBranchSettingsError("Company name is required")
    if not branch_settings.company_address:
        raise InvalidBranchSettingsError("Company address is required")
    if len(branch_settings.default_currency) != 3 or not branch_settings.default_currency.isalpha():
        raise InvalidBranchSettingsError("Currency must be a 3-letter code")

    branch_settings.updated_by = user
    branch_settings.save()

    logger.info("Settings for branch %s updated by %s", branch.branch_name, user.email)
    return branch_settings
