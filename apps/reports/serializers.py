from rest_framework import serializers
from .models import DailySummary


# =============================================================================
# Input serializers
# =============================================================================

class DailyQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False, help_text="Venue-local day (default today)")


class RangeQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()


# =============================================================================
# Response serializers
# =============================================================================

class DailySummarySerializer(serializers.ModelSerializer):
    branch_name = serializers.CharField(source='branch.branch_name', read_only=True)

    class Meta:
        model = DailySummary
        fields = [
            'id',
            'branch',
            'branch_name',
            'date',
            'total_tickets',
            'total_ticket_sales',
            'total_other_sales',
            'total_expenses',
            'total_refunds',
            'total_revenue',
            'profit_loss',
            'updated_at',
        ]
        read_only_fields = fields


class DayRowSerializer(serializers.Serializer):
    date = serializers.DateField()
    total_tickets = serializers.IntegerField()
    total_ticket_sales = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_other_sales = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_expenses = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_refunds = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    profit_loss = serializers.DecimalField(max_digits=14, decimal_places=2)


class RangeTotalsSerializer(DayRowSerializer):
    date = None


class RangeSummarySerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    days = DayRowSerializer(many=True)
    totals = RangeTotalsSerializer()


class DashboardTodaySerializer(serializers.Serializer):
    date = serializers.DateField()
    tickets = serializers.IntegerField()
    sales = serializers.IntegerField()
    expenses = serializers.IntegerField()


class DashboardTotalsSerializer(serializers.Serializer):
    tickets = serializers.IntegerField()
    sales = serializers.IntegerField()
    expenses = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    expenses_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    net_profit = serializers.DecimalField(max_digits=14, decimal_places=2)


class TimelineEntrySerializer(serializers.Serializer):
    date = serializers.DateField()
    tickets = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    refunded_amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class TopCustomerSerializer(serializers.Serializer):
    name = serializers.CharField()
    tickets = serializers.IntegerField()


class DashboardResponseSerializer(serializers.Serializer):
    today = DashboardTodaySerializer()
    totals = DashboardTotalsSerializer()
    timeline = TimelineEntrySerializer(many=True)
    type_counts = serializers.DictField(child=serializers.IntegerField())
    top_customers = TopCustomerSerializer(many=True)
    checked_in = serializers.IntegerField()


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
