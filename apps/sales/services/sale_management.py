"""
Sale management service.

A sale is written together with its items and its sale number in one
transaction: either all of it is stored or none of it.
"""

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from apps.accounts.services import require_branch
from apps.branches.services import branch_currency
from apps.sequences.services import next_number, SALE_NO
from apps.sales.models import Sale, SaleItem, PaymentMethod
from apps.tickets.services.time_window import local_day_bounds

from .exceptions import (
    SaleNotFoundError,
    InvalidSaleError,
    SalePermissionError,
)

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')
CENT = Decimal('0.01')


def _clean_items(items: Iterable[dict]) -> list:
    """Validate line items and compute their totals."""
    cleaned = []
    for index, item in enumerate(items or [], start=1):
        name = (item.get('item_name') or '').strip()
        if not name:
            raise InvalidSaleError(f"Item {index} needs a name")

        quantity = item.get('quantity')
        if not isinstance(quantity, int) or quantity < 1:
            raise InvalidSaleError(f"Item {index} quantity must be at least 1")

        try:
            price = Decimal(item.get('price'))
        except (InvalidOperation, TypeError):
            raise InvalidSaleError(f"Item {index} has an invalid price")
        if price < 0:
            raise InvalidSaleError(f"Item {index} price cannot be negative")

        cleaned.append({
            'item_name': name,
            'quantity': quantity,
            'price': price,
            'total': (price * quantity).quantize(CENT),
        })

    if not cleaned:
        raise InvalidSaleError("A sale needs at least one item")
    return cleaned


def create_sale(
    *,
    staff,
    items: Iterable[dict],
    discount: Decimal = ZERO,
    customer_name: str = '',
    payment_method: str = PaymentMethod.CASH,
    remarks: str = '',
    sold_at: Optional[datetime] = None,
) -> Sale:
    """
    Record a sale at the staff member's branch.

    ``subtotal`` is the sum of ``quantity * price`` over the items and
    ``total_amount = subtotal - discount``.

    Raises:
        NoBranchAssignedError: If staff has no branch
        InvalidSaleError: If there are no items, an item is invalid, or the
            discount is outside ``[0, subtotal]``
        StorageUnavailableError: If no sale number could be allocated
    """
    branch = require_branch(staff)
    lines = _clean_items(items)

    subtotal = sum((line['total'] for line in lines), ZERO)
    discount = Decimal(discount or 0)
    if discount < 0:
        raise InvalidSaleError("Discount cannot be negative")
    if discount > subtotal:
        raise InvalidSaleError(f"Discount {discount} exceeds subtotal {subtotal}")

    with transaction.atomic():
        sale = Sale.objects.create(
            sale_no=next_number(SALE_NO),
            customer_name=customer_name.strip(),
            subtotal=subtotal,
            discount=discount,
            total_amount=subtotal - discount,
            currency=branch_currency(branch),
            payment_method=payment_method,
            branch=branch,
            staff=staff,
            remarks=remarks,
            sold_at=sold_at or timezone.now(),
        )
        SaleItem.objects.bulk_create([SaleItem(sale=sale, **line) for line in lines])

    logger.info(
        "Sale %s recorded at %s by %s: %s %s",
        sale.sale_no, branch.branch_name, staff.email, sale.total_amount, sale.currency,
    )
    return sale


def get_sale(*, sale_id: UUID, branch) -> Sale:
    try:
        return Sale.objects.select_related('branch', 'staff').prefetch_related('items').get(
            id=sale_id, branch=branch
        )
    except Sale.DoesNotExist:
        raise SaleNotFoundError(f"Sale {sale_id} not found")


@transaction.atomic
def delete_sale(*, sale_id: UUID, user) -> None:
    """
    Delete a sale and its items.

    Raises:
        SalePermissionError: If user is not an admin
        SaleNotFoundError: If the sale is not in the user's branch
    """
    if not user.is_venue_admin:
        raise SalePermissionError("Only admins can delete sales")

    deleted, _ = Sale.objects.filter(id=sale_id, branch_id=user.branch_id).delete()
    if not deleted:
        raise SaleNotFoundError(f"Sale {sale_id} not found")

    logger.info("Sale %s deleted by %s", sale_id, user.email)


def filter_sales(
    queryset,
    *,
    date: Optional[date] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    payment_method: Optional[str] = None,
    staff: Optional[UUID] = None,
):
    """Apply local-day and attribute filters to a sale queryset."""
    if date:
        start, end = local_day_bounds(date)
        queryset = queryset.filter(sold_at__gte=start, sold_at__lt=end)
    if start_date:
        queryset = queryset.filter(sold_at__gte=local_day_bounds(start_date)[0])
    if end_date:
        queryset = queryset.filter(sold_at__lt=local_day_bounds(end_date)[1])
    if payment_method:
        queryset = queryset.filter(payment_method=payment_method)
    if staff:
        queryset = queryset.filter(staff_id=staff)
    return queryset


def sales_summary(queryset) -> dict:
    """Count and amounts over a sale queryset, with a payment method breakdown."""
    totals = queryset.aggregate(
        count=Count('id'),
        subtotal=Sum('subtotal'),
        discount=Sum('discount'),
        total_amount=Sum('total_amount'),
    )

    by_payment_method = list(
        queryset.order_by()
        .values('payment_method')
        .annotate(count=Count('id'), total_amount=Sum('total_amount'))
        .order_by('payment_method')
    )

    return {
        'count': totals['count'],
        'subtotal': totals['subtotal'] or ZERO,
        'discount': totals['discount'] or ZERO,
        'total_amount': totals['total_amount'] or ZERO,
        'by_payment_method': by_payment_method,
    }
