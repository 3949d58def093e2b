from django.contrib import admin
from .models import Branch, BranchSettings


class BranchSettingsInline(admin.StackedInline):
    model = BranchSettings
    can_delete = False
    readonly_fields = ['updated_by', 'created_at', 'updated_at']


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ['branch_name', 'location', 'manager', 'opening_time', 'closing_time', 'is_active']
    list_filter = ['is_active']
    search_fields = ['branch_name', 'location', 'manager']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [BranchSettingsInline]
