from django.contrib import admin
from .models import DailySummary


@admin.register(DailySummary)
class DailySummaryAdmin(admin.ModelAdmin):
    list_display = ['branch', 'date', 'total_tickets', 'total_revenue', 'total_expenses', 'profit_loss']
    list_filter = ['branch']
    date_hierarchy = 'date'
    readonly_fields = ['created_at', 'updated_at']
