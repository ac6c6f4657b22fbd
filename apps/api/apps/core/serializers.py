"""
Core serializers.
"""
from rest_framework import serializers

from .models import AppSettings


class UserProfileSerializer(serializers.Serializer):
    """Profile of the authenticated user."""
    id = serializers.UUIDField()
    email = serializers.EmailField()
    name = serializers.CharField(allow_blank=True)
    is_active = serializers.BooleanField()
    can_have_availability = serializers.BooleanField()
    roles = serializers.ListField(child=serializers.CharField())


class SmsTemplateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    body = serializers.CharField()


class AppSettingsSerializer(serializers.ModelSerializer):
    consultation_sms_templates = SmsTemplateSerializer(many=True, required=False)

    class Meta:
        model = AppSettings
        fields = [
            'consultation_duration_minutes',
            'break_duration_minutes',
            'buffer_time_minutes',
            'consultation_sms_templates',
            'updated_at',
        ]
        read_only_fields = ['updated_at']
