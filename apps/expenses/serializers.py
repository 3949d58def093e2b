from decimal import Decimal
from rest_framework import serializers
from .models import Expense, ExpensePaymentMethod


class ExpenseSerializer(serializers.ModelSerializer):
    staff_name = serializers.SerializerMethodField()
    branch_name = serializers.CharField(source='branch.branch_name', read_only=True)

    class Meta:
        model = Expense
        fields = [
            'id',
            'expense_no',
            'category',
            'description',
            'amount',
            'currency',
            'receipt_no',
            'vendor',
            'payment_method',
            'remarks',
            'branch',
            'branch_name',
            'staff',
            'staff_name',
            'spent_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_staff_name(self, obj):
        return obj.staff.get_display_name()


class ExpenseInputSerializer(serializers.Serializer):
    """Create/update payload; all fields optional on partial updates."""

    category = serializers.CharField(max_length=50)
    description = serializers.CharField(max_length=200)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    receipt_no = serializers.CharField(max_length=50, required=False, allow_blank=True)
    vendor = serializers.CharField(max_length=100, required=False, allow_blank=True)
    payment_method = serializers.ChoiceField(choices=ExpensePaymentMethod.choices, required=False)
    remarks = serializers.CharField(max_length=500, required=False, allow_blank=True)
    spent_at = serializers.DateTimeField(required=False)


class ExpenseFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for expense listing.

    Query Parameters:
        date (date): Expenses on this local day
        start_date, end_date (date): Local day range
        category (str): Case-insensitive category match
        payment_method (str): Filter by payment method
        staff (UUID): Expenses recorded by this staff member
    """

    date = serializers.DateField(required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    category = serializers.CharField(max_length=50, required=False)
    payment_method = serializers.ChoiceField(choices=ExpensePaymentMethod.choices, required=False)
    staff = serializers.UUIDField(required=False)

    def validate(self, attrs):
        start_date = attrs.get('start_date')
        end_date = attrs.get('end_date')

        if start_date and end_date and start_date > end_date:
            raise serializers.ValidationError({
                'end_date': 'End date must be after start date'
            })

        return attrs


class CategoryTotalSerializer(serializers.Serializer):
    category = serializers.CharField()
    count = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class ExpenseSummarySerializer(serializers.Serializer):
    count = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    by_category = CategoryTotalSerializer(many=True)
