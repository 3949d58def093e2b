from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
import uuid


class ExpensePaymentMethod(models.TextChoices):
    CASH = 'Cash', 'Cash'
    CARD = 'Card', 'Card'
    BANK_TRANSFER = 'Bank Transfer', 'Bank Transfer'


# Offered for every branch alongside the categories it has used
COMMON_CATEGORIES = ['Maintenance', 'Salary', 'Electricity', 'Rent', 'Supplies', 'Other']


class Expense(models.Model):
    """Money paid out by a branch."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    expense_no = models.CharField(max_length=20, unique=True, editable=False)

    category = models.CharField(max_length=50)
    description = models.CharField(max_length=200)
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    currency = models.CharField(max_length=3, default='NPR')

    # Paperwork
    receipt_no = models.CharField(max_length=50, blank=True)
    vendor = models.CharField(max_length=100, blank=True)
    payment_method = models.CharField(
        max_length=20,
        choices=ExpensePaymentMethod.choices,
        default=ExpensePaymentMethod.CASH
    )
    remarks = models.CharField(max_length=500, blank=True)

    # Ownership
    branch = models.ForeignKey('branches.Branch', on_delete=models.PROTECT, related_name='expenses')
    staff = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='expenses')

    spent_at = models.DateTimeField(default=timezone.now, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'expenses'
        ordering = ['-spent_at']
        indexes = [
            models.Index(fields=['branch', 'spent_at'], name='expenses_branch_spent_idx'),
            models.Index(fields=['branch', 'category'], name='expenses_branch_category_idx'),
        ]

    def __str__(self):
        return f"{self.expense_no} - {self.category}: {self.amount} {self.currency}"
