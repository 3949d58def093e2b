from rest_framework import serializers
from .models import Branch, BranchSettings


class BranchSerializer(serializers.ModelSerializer):
    """Full branch representation."""

    created_by_name = serializers.SerializerMethodField()

    class Meta:
        model = Branch
        fields = [
            'id',
            'branch_name',
            'location',
            'contact_number',
            'email',
            'manager',
            'opening_time',
            'closing_time',
            'is_active',
            'created_by',
            'created_by_name',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'is_active', 'created_by', 'created_at', 'updated_at']

    def get_created_by_name(self, obj):
        return obj.created_by.get_display_name() if obj.created_by else None


class BranchInputSerializer(serializers.Serializer):
    """Input for creating or updating a branch."""

    branch_name = serializers.CharField(max_length=100)
    location = serializers.CharField(max_length=200)
    contact_number = serializers.CharField(max_length=30, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    manager = serializers.CharField(max_length=100, required=False, allow_blank=True)
    opening_time = serializers.TimeField(required=False)
    closing_time = serializers.TimeField(required=False)
    is_active = serializers.BooleanField(required=False)

    def validate_branch_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Branch name cannot be empty")
        return value


class BranchSettingsSerializer(serializers.ModelSerializer):
    """Receipt header and house rules of a branch."""

    branch_name = serializers.CharField(source='branch.branch_name', read_only=True)
    updated_by_name = serializers.SerializerMethodField()

    class Meta:
        model = BranchSettings
        fields = [
            'branch',
            'branch_name',
            'company_name',
            'company_address',
            'contact_numbers',
            'email',
            'pan_number',
            'reg_no',
            'default_currency',
            'ticket_rules',
            'country',
            'updated_by_name',
            'updated_at',
        ]
        read_only_fields = fields

    def get_updated_by_name(self, obj):
        return obj.updated_by.get_display_name() if obj.updated_by else None


class BranchSettingsInputSerializer(serializers.Serializer):
    """Input for changing branch settings. Every field is optional."""

    company_name = serializers.CharField(max_length=150, required=False)
    company_address = serializers.CharField(max_length=255, required=False)
    contact_numbers = serializers.ListField(
        child=serializers.CharField(max_length=30, allow_blank=True),
        required=False,
        max_length=10,
    )
    email = serializers.EmailField(required=False, allow_blank=True)
    pan_number = serializers.CharField(max_length=30, required=False, allow_blank=True)
    reg_no = serializers.CharField(max_length=50, required=False, allow_blank=True)
    default_currency = serializers.CharField(max_length=3, required=False)
    ticket_rules = serializers.ListField(
        child=serializers.CharField(max_length=255, allow_blank=True),
        required=False,
        max_length=20,
    )
    country = serializers.CharField(max_length=60, required=False)
