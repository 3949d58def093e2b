from django.contrib import admin
from .models import Ticket, ExtraTimeEntry, TicketScan


class ExtraTimeEntryInline(admin.TabularInline):
    model = ExtraTimeEntry
    extra = 0
    readonly_fields = ['added_by', 'added_at']


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = [
        'ticket_no',
        'name',
        'ticket_type',
        'number_of_people',
        'fee',
        'status',
        'is_refunded',
        'branch',
        'staff',
        'started_at',
    ]
    list_filter = ['status', 'ticket_type', 'is_refunded', 'branch']
    search_fields = ['ticket_no', 'name', 'contact_number']
    readonly_fields = ['ticket_no', 'created_at', 'updated_at', 'refunded_at']
    date_hierarchy = 'started_at'
    inlines = [ExtraTimeEntryInline]


@admin.register(TicketScan)
class TicketScanAdmin(admin.ModelAdmin):
    list_display = ['ticket', 'branch', 'scanned_by', 'scanned_at', 'remaining_minutes']
    list_filter = ['branch']
    search_fields = ['ticket__ticket_no']
