from decimal import Decimal
from rest_framework import serializers
from .models import Sale, SaleItem, PaymentMethod


class SaleItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = SaleItem
        fields = ['id', 'item_name', 'quantity', 'price', 'total']
        read_only_fields = fields


class SaleSerializer(serializers.ModelSerializer):
    """Sale with its line items."""

    items = SaleItemSerializer(many=True, read_only=True)
    staff_name = serializers.SerializerMethodField()
    branch_name = serializers.CharField(source='branch.branch_name', read_only=True)

    class Meta:
        model = Sale
        fields = [
            'id',
            'sale_no',
            'customer_name',
            'items',
            'subtotal',
            'discount',
            'total_amount',
            'currency',
            'payment_method',
            'branch',
            'branch_name',
            'staff',
            'staff_name',
            'remarks',
            'sold_at',
            'created_at',
        ]
        read_only_fields = fields

    def get_staff_name(self, obj):
        return obj.staff.get_display_name()


class SaleItemInputSerializer(serializers.Serializer):
    item_name = serializers.CharField(max_length=100)
    quantity = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))


class SaleCreateSerializer(serializers.Serializer):
    customer_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    items = SaleItemInputSerializer(many=True)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), default=Decimal('0'))
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    remarks = serializers.CharField(required=False, allow_blank=True, default='')


class SaleFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for sale listing.

    Query Parameters:
        date (date): Sales on this local day
        start_date, end_date (date): Local day range
        payment_method (str): Filter by payment method
        staff (UUID): Sales recorded by this staff member
    """

    date = serializers.DateField(required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False)
    staff = serializers.UUIDField(required=False)

    def validate(self, attrs):
        start_date = attrs.get('start_date')
        end_date = attrs.get('end_date')

        if start_date and end_date and start_date > end_date:
            raise serializers.ValidationError({
                'end_date': 'End date must be after start date'
            })

        return attrs


class PaymentMethodTotalSerializer(serializers.Serializer):
    payment_method = serializers.CharField()
    count = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class SalesSummarySerializer(serializers.Serializer):
    count = serializers.IntegerField()
    subtotal = serializers.DecimalField(max_digits=14, decimal_places=2)
    discount = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    by_payment_method = PaymentMethodTotalSerializer(many=True)
