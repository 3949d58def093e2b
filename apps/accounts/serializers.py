from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from apps.branches.models import Branch
from .models import User, UserRole


class UserSerializer(serializers.ModelSerializer):
    """User profile representation."""

    branch_name = serializers.CharField(source='branch.branch_name', read_only=True, default=None)

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'phone',
            'role',
            'branch',
            'branch_name',
            'is_active',
            'created_at',
            'last_login',
        ]
        read_only_fields = [
            'id', 'email', 'role', 'branch', 'is_active', 'created_at', 'last_login'
        ]


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class UserCreateSerializer(serializers.Serializer):
    """Admin input for creating a staff account."""

    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    display_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default='')
    role = serializers.ChoiceField(choices=UserRole.choices, default=UserRole.STAFF)
    branch = serializers.PrimaryKeyRelatedField(
        queryset=Branch.objects.filter(is_active=True),
        required=False,
        allow_null=True,
    )


class UserUpdateSerializer(serializers.Serializer):
    """Admin input for updating another account."""

    display_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=UserRole.choices, required=False)
    branch = serializers.PrimaryKeyRelatedField(
        queryset=Branch.objects.filter(is_active=True),
        required=False,
    )
