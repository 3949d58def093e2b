"""
Expense management service.

Staff record expenses at their own branch. Only admins delete them, and
only an admin or the staff member who recorded an expense may edit it.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from apps.accounts.services import require_branch
from apps.branches.services import branch_currency
from apps.sequences.services import next_number, EXPENSE_NO
from apps.expenses.models import Expense, ExpensePaymentMethod, COMMON_CATEGORIES
from apps.tickets.services.time_window import local_day_bounds

from .exceptions import (
    ExpenseNotFoundError,
    InvalidExpenseError,
    ExpensePermissionError,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    'category',
    'description',
    'amount',
    'receipt_no',
    'vendor',
    'payment_method',
    'remarks',
    'spent_at',
)


def _validate(category: str, description: str, amount) -> None:
    if not (category or '').strip():
        raise InvalidExpenseError("Category is required")
    if not (description or '').strip():
        raise InvalidExpenseError("Description is required")
    if amount is None or Decimal(amount) <= 0:
        raise InvalidExpenseError("Amount must be greater than zero")


def create_expense(
    *,
    staff,
    category: str,
    description: str,
    amount: Decimal,
    receipt_no: str = '',
    vendor: str = '',
    payment_method: str = ExpensePaymentMethod.CASH,
    remarks: str = '',
    spent_at: Optional[datetime] = None,
) -> Expense:
    """
    Record an expense at the staff member's branch.

    Raises:
        NoBranchAssignedError: If staff has no branch
        InvalidExpenseError: If category, description or amount is invalid
        StorageUnavailableError: If no expense number could be allocated
    """
    branch = require_branch(staff)
    _validate(category, description, amount)

    with transaction.atomic():
        expense = Expense.objects.create(
            expense_no=next_number(EXPENSE_NO),
            category=category.strip(),
            description=description.strip(),
            amount=amount,
            currency=branch_currency(branch),
            receipt_no=receipt_no,
            vendor=vendor,
            payment_method=payment_method,
            remarks=remarks,
            branch=branch,
            staff=staff,
            spent_at=spent_at or timezone.now(),
        )

    logger.info(
        "Expense %s recorded at %s by %s: %s %s (%s)",
        expense.expense_no, branch.branch_name, staff.email,
        expense.amount, expense.currency, expense.category,
    )
    return expense


def get_expense(*, expense_id: UUID, branch) -> Expense:
    try:
        return Expense.objects.select_related('branch', 'staff').get(id=expense_id, branch=branch)
    except Expense.DoesNotExist:
        raise ExpenseNotFoundError(f"Expense {expense_id} not found")


@transaction.atomic
def update_expense(*, expense_id: UUID, user, **fields) -> Expense:
    """
    Update an expense.

    Raises:
        ExpenseNotFoundError: If expense doesn't exist in user's branch
        ExpensePermissionError: If user is neither admin nor the recorder
        InvalidExpenseError: If the updated values are invalid
    """
    try:
        expense = Expense.objects.select_for_update().get(id=expense_id, branch_id=user.branch_id)
    except Expense.DoesNotExist:
        raise ExpenseNotFoundError(f"Expense {expense_id} not found")

    if not user.is_venue_admin and expense.staff_id != user.id:
        raise ExpensePermissionError("Only admins or the recording staff member can edit this expense")

    for field in UPDATABLE_FIELDS:
        if field in fields and fields[field] is not None:
            setattr(expense, field, fields[field])

    _validate(expense.category, expense.description, expense.amount)
    expense.category = expense.category.strip()
    expense.description = expense.description.strip()
    expense.save()

    logger.info("Expense %s updated by %s", expense.expense_no, user.email)
    return expense


@transaction.atomic
def delete_expense(*, expense_id: UUID, user) -> None:
    """
    Raises:
        ExpensePermissionError: If user is not an admin
        ExpenseNotFoundError: If the expense is not in the user's branch
    """
    if not user.is_venue_admin:
        raise ExpensePermissionError("Only admins can delete expenses")

    deleted, _ = Expense.objects.filter(id=expense_id, branch_id=user.branch_id).delete()
    if not deleted:
        raise ExpenseNotFoundError(f"Expense {expense_id} not found")

    logger.info("Expense %s deleted by %s", expense_id, user.email)


def expense_categories(*, branch) -> list:
    """Common categories plus every category the branch has used, sorted."""
    used = Expense.objects.filter(branch=branch).order_by().values_list('category', flat=True).distinct()
    return sorted(set(COMMON_CATEGORIES) | set(used))


def filter_expenses(
    queryset,
    *,
    date: Optional[date] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    category: Optional[str] = None,
    payment_method: Optional[str] = None,
    staff: Optional[UUID] = None,
):
    """Apply local-day and attribute filters to an expense queryset."""
    if date:
        start, end = local_day_bounds(date)
        queryset = queryset.filter(spent_at__gte=start, spent_at__lt=end)
    if start_date:
        queryset = queryset.filter(spent_at__gte=local_day_bounds(start_date)[0])
    if end_date:
        queryset = queryset.filter(spent_at__lt=local_day_bounds(end_date)[1])
    if category:
        queryset = queryset.filter(category__iexact=category)
    if payment_method:
        queryset = queryset.filter(payment_method=payment_method)
    if staff:
        queryset = queryset.filter(staff_id=staff)
    return queryset


def expense_summary(queryset) -> dict:
    """Count and total over an expense queryset, broken down by category."""
    totals = queryset.aggregate(count=Count('id'), total_amount=Sum('amount'))

    by_category = list(
        queryset.order_by()
        .values('category')
        .annotate(count=Count('id'), total_amount=Sum('amount'))
        .order_by('-total_amount', 'category')
    )

    return {
        'count': totals['count'],
        'total_amount': totals['total_amount'] or Decimal('0.00'),
        'by_category': by_category,
    }
