from decimal import Decimal
from django.db import models
import uuid


class DailySummary(models.Model):
    """
    Snapshot of a branch's takings for one venue-local day.

    Refreshed every time the daily report is requested; range reports and
    the dashboard always read live data.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    branch = models.ForeignKey('branches.Branch', on_delete=models.CASCADE, related_name='daily_summaries')
    date = models.DateField()

    total_tickets = models.PositiveIntegerField(default=0)
    total_ticket_sales = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_other_sales = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_expenses = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_refunds = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_revenue = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    profit_loss = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'daily_summaries'
        ordering = ['-date']
        constraints = [
            models.UniqueConstraint(fields=['branch', 'date'], name='daily_summary_branch_date_uniq'),
        ]

    def __str__(self):
        return f"{self.branch} {self.date}: {self.profit_loss}"
