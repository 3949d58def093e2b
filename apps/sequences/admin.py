from django.contrib import admin
from .models import Counter


@admin.register(Counter)
class CounterAdmin(admin.ModelAdmin):
    """Counters are advanced only by the allocator, never edited by hand."""

    list_display = ['name', 'value', 'updated_at']
    search_fields = ['name']
    readonly_fields = ['name', 'value', 'created_at', 'updated_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
