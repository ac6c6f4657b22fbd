"""
SMS gateway serializers.
"""
from rest_framework import serializers

from .models import OutgoingSmsMessage


class IncomingSmsSerializer(serializers.Serializer):
    sender = serializers.CharField(min_length=1)
    text = serializers.CharField(min_length=1)
    createdAt = serializers.DateTimeField(source='created_at')


class OutgoingSmsSerializer(serializers.ModelSerializer):
    class Meta:
        model = OutgoingSmsMessage
        fields = ['id', 'phone_number', 'body']
        read_only_fields = fields


class MarkSentSerializer(serializers.Serializer):
    id = serializers.IntegerField(min_value=1)
    success = serializers.BooleanField()
