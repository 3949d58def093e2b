from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
import uuid


class PaymentMethod(models.TextChoices):
    CASH = 'Cash', 'Cash'
    CARD = 'Card', 'Card'
    DIGITAL_WALLET = 'Digital Wallet', 'Digital Wallet'
    BANK_TRANSFER = 'Bank Transfer', 'Bank Transfer'
    CREDIT = 'Credit', 'Credit'


class Sale(models.Model):
    """Counter sale of snacks, drinks or merchandise."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    sale_no = models.CharField(max_length=20, unique=True, editable=False)

    customer_name = models.CharField(max_length=100, blank=True)

    # Amounts
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    currency = models.CharField(max_length=3, default='NPR')
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.CASH)

    # Ownership
    branch = models.ForeignKey('branches.Branch', on_delete=models.PROTECT, related_name='sales')
    staff = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='sales')
    remarks = models.TextField(blank=True)

    sold_at = models.DateTimeField(default=timezone.now, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'sales'
        ordering = ['-sold_at']
        indexes = [
            models.Index(fields=['branch', 'sold_at'], name='sales_branch_sold_idx'),
        ]

    def __str__(self):
        return f"Sale {self.sale_no} - {self.total_amount} {self.currency}"


class SaleItem(models.Model):
    """Line item on a sale."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name='items')
    item_name = models.CharField(max_length=100)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    total = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        db_table = 'sale_items'

    def __str__(self):
        return f"{self.quantity} x {self.item_name}"
