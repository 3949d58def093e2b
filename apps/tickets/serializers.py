from decimal import Decimal
from rest_framework import serializers
from .models import Ticket, ExtraTimeEntry, TicketScan, TicketType, TicketStatus, RefundMethod
from .services.ticket_management import parse_player_names
from .services.time_window import compute_end_time, format_time_range, local_date, to_local_time


class PlayerNamesField(serializers.Field):
    """Accepts a list of names or a comma-separated string."""

    def to_internal_value(self, data):
        if data in (None, ''):
            return []
        if not isinstance(data, (str, list)):
            raise serializers.ValidationError("Expected a list or a comma-separated string.")
        if isinstance(data, list) and not all(isinstance(name, str) for name in data):
            raise serializers.ValidationError("Player names must be strings.")
        return parse_player_names(data)

    def to_representation(self, value):
        return list(value or [])


class ExtraTimeEntrySerializer(serializers.ModelSerializer):
    added_by_name = serializers.SerializerMethodField()

    class Meta:
        model = ExtraTimeEntry
        fields = ['id', 'minutes', 'amount', 'label', 'notes', 'added_by', 'added_by_name', 'added_at']
        read_only_fields = fields

    def get_added_by_name(self, obj):
        return obj.added_by.get_display_name() if obj.added_by else None


class TicketListSerializer(serializers.ModelSerializer):
    """Compact ticket for list views."""

    staff_name = serializers.SerializerMethodField()
    start_time = serializers.SerializerMethodField()
    end_time = serializers.SerializerMethodField()

    class Meta:
        model = Ticket
        fields = [
            'id',
            'ticket_no',
            'name',
            'contact_number',
            'ticket_type',
            'number_of_people',
            'fee',
            'currency',
            'status',
            'is_refunded',
            'refund_amount',
            'printed',
            'total_extra_minutes',
            'started_at',
            'start_time',
            'end_time',
            'staff_name',
        ]

    def get_staff_name(self, obj):
        return obj.staff.get_display_name()

    def get_start_time(self, obj):
        start = to_local_time(obj.started_at)
        return str(start) if start else None

    def get_end_time(self, obj):
        return compute_end_time(obj.started_at, obj.total_extra_minutes, obj.is_refunded)


class TicketSerializer(TicketListSerializer):
    """Full ticket representation."""

    branch_name = serializers.CharField(source='branch.branch_name', read_only=True)
    player_names = PlayerNamesField(read_only=True)
    local_date = serializers.SerializerMethodField()
    time_range = serializers.SerializerMethodField()
    extra_time_entries = ExtraTimeEntrySerializer(many=True, read_only=True)
    refunded_by_name = serializers.SerializerMethodField()

    class Meta(TicketListSerializer.Meta):
        fields = TicketListSerializer.Meta.fields + [
            'player_names',
            'per_person_fee',
            'discount',
            'group_name',
            'group_number',
            'group_price',
            'branch',
            'branch_name',
            'staff',
            'remarks',
            'local_date',
            'time_range',
            'total_players',
            'played_players',
            'waiting_players',
            'refunded_players_count',
            'refund_reason',
            'refunded_players',
            'refund_name',
            'refund_method',
            'payment_reference',
            'refunded_by',
            'refunded_by_name',
            'refunded_at',
            'extra_time_entries',
            'created_at',
            'updated_at',
        ]

    def get_local_date(self, obj):
        day = local_date(obj.started_at)
        return day.isoformat() if day else None

    def get_time_range(self, obj):
        return format_time_range(obj.started_at, obj.total_extra_minutes, obj.is_refunded)

    def get_refunded_by_name(self, obj):
        return obj.refunded_by.get_display_name() if obj.refunded_by else None


# =============================================================================
# Input serializers
# =============================================================================

class TicketCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    contact_number = serializers.CharField(max_length=30, required=False, allow_blank=True, default='')
    player_names = PlayerNamesField(required=False)
    number_of_people = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    ticket_type = serializers.ChoiceField(choices=TicketType.choices, default=TicketType.ADULT)
    per_person_fee = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    discount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'), default=Decimal('0'))
    remarks = serializers.CharField(required=False, allow_blank=True, default='')
    group_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    group_number = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    group_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)


class TicketUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, required=False)
    contact_number = serializers.CharField(max_length=30, required=False, allow_blank=True)
    player_names = PlayerNamesField(required=False)
    number_of_people = serializers.IntegerField(min_value=1, required=False)
    ticket_type = serializers.ChoiceField(choices=TicketType.choices, required=False)
    per_person_fee = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'), required=False)
    discount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False)
    remarks = serializers.CharField(required=False, allow_blank=True)
    group_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    group_number = serializers.CharField(max_length=50, required=False, allow_blank=True)
    group_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    status = serializers.ChoiceField(choices=TicketStatus.choices, required=False)


class TicketFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for ticket listing.

    Query Parameters:
        date (date): Tickets started on this local day (default today)
        start_date, end_date (date): Local day range
        range (str): ``history`` lists every ticket regardless of date
        is_refunded (bool): Filter by refund state
        staff (UUID): Tickets issued by this staff member
        status (str): Filter by ticket status
    """

    date = serializers.DateField(required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    range = serializers.ChoiceField(choices=['history'], required=False)
    is_refunded = serializers.BooleanField(required=False, allow_null=True, default=None)
    staff = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=TicketStatus.choices, required=False)

    def validate(self, attrs):
        start_date = attrs.get('start_date')
        end_date = attrs.get('end_date')

        if start_date and end_date and start_date > end_date:
            raise serializers.ValidationError({
                'end_date': 'End date must be after start date'
            })

        return attrs


class DateRangeFilterSerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)


class ScanHistoryFilterSerializer(DateRangeFilterSerializer):
    limit = serializers.IntegerField(min_value=1, max_value=500, default=50)


class StatsFilterSerializer(serializers.Serializer):
    period = serializers.ChoiceField(choices=['today', 'week', 'month'], default='today')


class ExtraTimeInputSerializer(serializers.Serializer):
    minutes = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'), default=Decimal('0'))
    label = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class RefundInputSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    refund_amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True)
    refunded_players = PlayerNamesField(required=False)
    refund_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    refund_method = serializers.ChoiceField(choices=RefundMethod.choices, default=RefundMethod.CASH)
    payment_reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')


class PartialRefundInputSerializer(serializers.Serializer):
    refunded_players = PlayerNamesField()
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    refund_amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True)


class PlayerStatusInputSerializer(serializers.Serializer):
    played_players = serializers.IntegerField(min_value=0, required=False)
    waiting_players = serializers.IntegerField(min_value=0, required=False)
    status = serializers.ChoiceField(choices=TicketStatus.choices, required=False)


class QRScanInputSerializer(serializers.Serializer):
    qr_data = serializers.JSONField(help_text="Scanned QR content: JSON payload or ticket number")


# =============================================================================
# Response serializers for API documentation
# =============================================================================

class ExtraTimeListResponseSerializer(serializers.Serializer):
    total_extra_minutes = serializers.IntegerField()
    entries = ExtraTimeEntrySerializer(many=True)


class TicketWindowSerializer(serializers.Serializer):
    start_time = serializers.CharField(allow_null=True)
    end_time = serializers.CharField(allow_null=True)
    duration_minutes = serializers.IntegerField()
    remaining_minutes = serializers.IntegerField(allow_null=True)
    is_expired = serializers.BooleanField(allow_null=True)
    time_range = serializers.CharField()


class QRCodeResponseSerializer(serializers.Serializer):
    payload = serializers.DictField()
    qr_code = serializers.CharField()


class QRScanResponseSerializer(serializers.Serializer):
    ticket = TicketSerializer()
    remaining_minutes = serializers.IntegerField(allow_null=True)
    is_expired = serializers.BooleanField(allow_null=True)
    start_time = serializers.CharField(allow_null=True)
    end_time = serializers.CharField(allow_null=True)
    message = serializers.CharField()


class TicketScanSerializer(serializers.ModelSerializer):
    ticket_no = serializers.CharField(source='ticket.ticket_no', read_only=True)
    name = serializers.CharField(source='ticket.name', read_only=True)
    ticket_type = serializers.CharField(source='ticket.ticket_type', read_only=True)
    scanned_by_name = serializers.SerializerMethodField()

    class Meta:
        model = TicketScan
        fields = ['id', 'ticket', 'ticket_no', 'name', 'ticket_type', 'scanned_by_name', 'scanned_at', 'remaining_minutes']

    def get_scanned_by_name(self, obj):
        return obj.scanned_by.get_display_name() if obj.scanned_by else None


class ExtraTimeReportEntrySerializer(serializers.Serializer):
    ticket_id = serializers.UUIDField()
    ticket_no = serializers.CharField()
    name = serializers.CharField()
    ticket_type = serializers.CharField()
    minutes = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    label = serializers.CharField()
    notes = serializers.CharField()
    added_at = serializers.DateTimeField()
    added_by = serializers.CharField(allow_null=True)
    total_extra_minutes = serializers.IntegerField()
    is_refunded = serializers.BooleanField()


class TicketStatsSerializer(serializers.Serializer):
    period = serializers.CharField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    total_tickets = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=12, decimal_places=2)
    type_distribution = serializers.ListField(child=serializers.DictField())
    player_stats = serializers.DictField(child=serializers.IntegerField())
