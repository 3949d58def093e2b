from rest_framework import serializers
from .models import Counter


class CounterSerializer(serializers.ModelSerializer):
    """Read-only counter state for the admin listing."""

    class Meta:
        model = Counter
        fields = ['name', 'value', 'created_at', 'updated_at']
        read_only_fields = fields


class CounterValueSerializer(serializers.Serializer):
    name = serializers.CharField()
    value = serializers.IntegerField()


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
