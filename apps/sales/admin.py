from django.contrib import admin
from .models import Sale, SaleItem


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ['sale_no', 'customer_name', 'total_amount', 'payment_method', 'branch', 'staff', 'sold_at']
    list_filter = ['payment_method', 'branch']
    search_fields = ['sale_no', 'customer_name']
    readonly_fields = ['sale_no', 'created_at', 'updated_at']
    date_hierarchy = 'sold_at'
    inlines = [SaleItemInline]
