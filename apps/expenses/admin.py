from django.contrib import admin
from .models import Expense


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['expense_no', 'category', 'description', 'amount', 'payment_method', 'branch', 'staff', 'spent_at']
    list_filter = ['category', 'payment_method', 'branch']
    search_fields = ['expense_no', 'description', 'vendor', 'receipt_no']
    readonly_fields = ['expense_no', 'created_at', 'updated_at']
    date_hierarchy = 'spent_at'
